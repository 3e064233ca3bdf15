"""Business logic services."""

from app.services.applications import ApplicationNotFoundError, ApplicationService
from app.services.audit import AuditService, write_audit_event
from app.services.auth import AuthService, UserExistsError
from app.services.conditions import (
    ConditionNotFoundError,
    ConditionService,
    ConditionValidationError,
)
from app.services.device_checks import DeviceCheckService, record_device_check
from app.services.release_store import SqlReleaseStore, get_release_store_backend
from app.services.releases import ReleaseService, UnknownConditionError

__all__ = [
    "ApplicationNotFoundError",
    "ApplicationService",
    "AuditService",
    "write_audit_event",
    "AuthService",
    "UserExistsError",
    "ConditionNotFoundError",
    "ConditionService",
    "ConditionValidationError",
    "DeviceCheckService",
    "record_device_check",
    "SqlReleaseStore",
    "get_release_store_backend",
    "ReleaseService",
    "UnknownConditionError",
]
