"""Database models for the release console."""

from app.models.application import Application, ApplicationMember, MemberRole
from app.models.audit_event import ActorType, AuditEvent
from app.models.condition import Condition
from app.models.device_check import DeviceCheck
from app.models.release import Release, release_conditions
from app.models.user import User

__all__ = [
    # Users
    "User",
    # Applications
    "Application",
    "ApplicationMember",
    "MemberRole",
    # Targeting
    "Condition",
    "Release",
    "release_conditions",
    # Activity
    "DeviceCheck",
    # Audit
    "AuditEvent",
    "ActorType",
]
