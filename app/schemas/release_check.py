"""Public release check schemas."""

from typing import Annotated
from uuid import UUID

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel


def reject_boolean(value: object) -> object:
    """Refuse JSON booleans before lax mode casts them to 1 or 0."""
    if isinstance(value, bool):
        raise ValueError("Value must be a number or string, not a boolean")
    return value


def normalise_identifier(value: str | int) -> str:
    """Driver and vehicle ids arrive as numbers or strings; keep them as text."""
    text = str(value).strip()
    if not text:
        raise ValueError("Identifier must not be empty")
    return text


DeviceIdentifier = Annotated[
    str | int,
    BeforeValidator(reject_boolean),
    AfterValidator(normalise_identifier),
]
NumericField = Annotated[int, BeforeValidator(reject_boolean)]

# Bounded by the width of the device_checks.country column
COUNTRY_MAX_LENGTH = 10


class ReleaseCheckRequest(BaseModel):
    """Update check reported by a client device.

    Accepts the camelCase names as well as the short legacy names
    (``company``, ``driver``, ``vehicle``) older clients send.
    """

    app_id: UUID = Field(validation_alias=AliasChoices("appId", "app_id"))
    country: str = Field(min_length=1, max_length=COUNTRY_MAX_LENGTH)
    company_id: NumericField = Field(
        gt=0,
        validation_alias=AliasChoices("companyId", "company", "company_id"),
    )
    driver_id: DeviceIdentifier = Field(
        validation_alias=AliasChoices("driverId", "driver", "driver_id"),
    )
    vehicle_id: DeviceIdentifier = Field(
        validation_alias=AliasChoices("vehicleId", "vehicle", "vehicle_id"),
    )
    version_name: str = Field(
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("versionName", "version_name"),
    )
    version_code: NumericField = Field(
        gt=0,
        validation_alias=AliasChoices("versionCode", "version_code"),
    )

    # Opaque passthrough references
    company_ref: str | None = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("companyRef", "company_ref"),
    )
    driver_ref: str | None = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("driverRef", "driver_ref"),
    )
    vehicle_ref: str | None = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("vehicleRef", "vehicle_ref"),
    )


class CamelModel(BaseModel):
    """Response model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VersionInfo(CamelModel):
    """A version as reported by the device."""

    version_name: str
    version_code: int


class LatestVersionInfo(VersionInfo):
    """The release the device should update to."""

    id: str


class ReleaseCheckResponse(CamelModel):
    """Outcome of an update check."""

    update_required: bool
    current_version: VersionInfo
    latest_version: LatestVersionInfo | None = None
    message: str
