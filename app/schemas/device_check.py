"""Device check activity schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class DeviceCheckRead(BaseModel):
    """Schema for reading a recorded device check."""

    id: str
    application_id: str
    country: str
    company_id: int
    driver_id: str
    vehicle_id: str
    company_ref: str | None
    driver_ref: str | None
    vehicle_ref: str | None
    version_name: str
    version_code: int
    update_required: bool
    latest_release_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class DeviceCheckFilter(BaseModel):
    """Filter parameters for listing device checks."""

    driver_id: str | None = None
    vehicle_id: str | None = None
    update_required: bool | None = None
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
