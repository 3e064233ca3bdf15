"""Release schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, StringConstraints

from app.releases.models import ReleaseStatus


def _code_to_text(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


VersionCode = Annotated[
    str,
    BeforeValidator(_code_to_text),
    StringConstraints(strip_whitespace=True, pattern=r"^\d+$", max_length=20),
]


class ReleaseCreate(BaseModel):
    """Schema for creating a release."""

    version_name: str = Field(min_length=1, max_length=100)
    version_code: VersionCode
    status: ReleaseStatus = ReleaseStatus.ACTIVE
    condition_ids: list[str] = Field(default_factory=list)


class ReleaseUpdate(BaseModel):
    """Schema for updating a release. Omitted fields keep their value.

    Any status may change to any other.
    """

    version_name: str | None = Field(None, min_length=1, max_length=100)
    version_code: VersionCode | None = None
    status: ReleaseStatus | None = None
    condition_ids: list[str] | None = None


class ReleaseRead(BaseModel):
    """Schema for reading release data."""

    id: str
    application_id: str
    version_name: str
    version_code: str
    status: ReleaseStatus
    condition_ids: list[str]
    created_at: datetime | None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ReleaseListResponse(BaseModel):
    """One page of releases, newest first."""

    items: list[ReleaseRead]
    total: int
    page: int
    limit: int
