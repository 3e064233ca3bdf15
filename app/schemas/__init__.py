"""Pydantic schemas for request/response validation."""

from app.schemas.application import (
    ApplicationCreate,
    ApplicationRead,
    ApplicationUpdate,
    DashboardRead,
)
from app.schemas.audit_event import AuditEventFilter, AuditEventRead
from app.schemas.auth import LoginRequest, TokenResponse, UserCreate, UserRead
from app.schemas.condition import ConditionCreate, ConditionRead, ConditionUpdate
from app.schemas.device_check import DeviceCheckFilter, DeviceCheckRead
from app.schemas.evaluation import (
    EvaluationContextIn,
    LatestReleaseResponse,
    ReleaseEvaluationResponse,
)
from app.schemas.release import (
    ReleaseCreate,
    ReleaseListResponse,
    ReleaseRead,
    ReleaseUpdate,
)
from app.schemas.release_check import ReleaseCheckRequest, ReleaseCheckResponse

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "UserCreate",
    "UserRead",
    "ApplicationCreate",
    "ApplicationRead",
    "ApplicationUpdate",
    "DashboardRead",
    "ConditionCreate",
    "ConditionRead",
    "ConditionUpdate",
    "ReleaseCreate",
    "ReleaseListResponse",
    "ReleaseRead",
    "ReleaseUpdate",
    "EvaluationContextIn",
    "LatestReleaseResponse",
    "ReleaseEvaluationResponse",
    "ReleaseCheckRequest",
    "ReleaseCheckResponse",
    "DeviceCheckRead",
    "DeviceCheckFilter",
    "AuditEventRead",
    "AuditEventFilter",
]
