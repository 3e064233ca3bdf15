"""Application schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.application import MemberRole
from app.schemas.auth import LenientEmail
from app.schemas.release import ReleaseRead

PACKAGE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z0-9_]+)+[0-9a-z_]$", re.IGNORECASE)


def validate_package_name(value: str) -> str:
    value = value.strip()
    if not PACKAGE_NAME_PATTERN.match(value):
        raise ValueError("Invalid package name format.")
    return value


class ApplicationCreate(BaseModel):
    """Schema for creating an application.

    The creating user is always added as an admin member.
    """

    name: str = Field(min_length=2, max_length=200)
    package_name: str = Field(min_length=2, max_length=255)
    member_emails: list[LenientEmail] = Field(default_factory=list)

    @field_validator("package_name")
    @classmethod
    def check_package_name(cls, value: str) -> str:
        return validate_package_name(value)


class ApplicationUpdate(BaseModel):
    """Schema for updating an application. Omitted fields keep their value."""

    name: str | None = Field(None, min_length=2, max_length=200)
    package_name: str | None = Field(None, min_length=2, max_length=255)
    member_emails: list[LenientEmail] | None = None

    @field_validator("package_name")
    @classmethod
    def check_package_name(cls, value: str | None) -> str | None:
        return validate_package_name(value) if value is not None else None


class MemberRead(BaseModel):
    """Application member."""

    user_id: str
    email: str
    role: MemberRole


class ApplicationRead(BaseModel):
    """Schema for reading application data."""

    id: str
    name: str
    package_name: str
    owner_id: str
    members: list[MemberRead]
    created_at: datetime
    updated_at: datetime | None = None


class DashboardRead(BaseModel):
    """Per-application overview."""

    application_id: str
    releases_by_status: dict[str, int]
    total_releases: int
    total_conditions: int
    latest_active_release: ReleaseRead | None
    device_checks_last_24h: int
    updates_required_last_24h: int
