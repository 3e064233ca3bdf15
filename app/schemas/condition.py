"""Condition schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.condition import Condition as ConditionRow
from app.releases.models import RuleSet

BOTH_AXES_MESSAGE = "Driver IDs and Vehicle IDs cannot be used at the same time."


def _dedupe(values: list) -> list:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _clean_strings(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return _dedupe([v.strip() for v in values if v and v.strip()])


class RuleLists(BaseModel):
    """The four targeting dimensions. Empty lists mean no restriction."""

    countries: list[str] = Field(default_factory=list)
    company_ids: list[int] = Field(default_factory=list)
    driver_ids: list[str] = Field(default_factory=list)
    vehicle_ids: list[str] = Field(default_factory=list)


class ConditionCreate(RuleLists):
    """Schema for creating a condition.

    A single condition targets either drivers or vehicles, never both.
    """

    name: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required.")
        return value

    @field_validator("countries", "driver_ids", "vehicle_ids")
    @classmethod
    def strip_strings(cls, values: list[str]) -> list[str]:
        return _clean_strings(values)

    @field_validator("company_ids")
    @classmethod
    def dedupe_company_ids(cls, values: list[int]) -> list[int]:
        return _dedupe(values)

    @model_validator(mode="after")
    def check_single_identity_axis(self) -> "ConditionCreate":
        if self.driver_ids and self.vehicle_ids:
            raise ValueError(BOTH_AXES_MESSAGE)
        return self


class ConditionUpdate(BaseModel):
    """Schema for updating a condition. Omitted fields keep their value."""

    name: str | None = Field(None, min_length=1, max_length=200)
    countries: list[str] | None = None
    company_ids: list[int] | None = None
    driver_ids: list[str] | None = None
    vehicle_ids: list[str] | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Name is required.")
        return value

    @field_validator("countries", "driver_ids", "vehicle_ids")
    @classmethod
    def strip_strings(cls, values: list[str] | None) -> list[str] | None:
        return _clean_strings(values)

    @field_validator("company_ids")
    @classmethod
    def dedupe_company_ids(cls, values: list[int] | None) -> list[int] | None:
        return _dedupe(values) if values is not None else None


class ConditionRead(RuleLists):
    """Schema for reading condition data."""

    id: str
    application_id: str
    name: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: ConditionRow) -> "ConditionRead":
        """Build from a row, normalising legacy rule encodings."""
        rules = RuleSet.from_raw(
            countries=row.countries,
            company_ids=row.company_ids,
            driver_ids=row.driver_ids,
            vehicle_ids=row.vehicle_ids,
        )
        return cls(
            id=row.id,
            application_id=row.application_id,
            name=row.name,
            created_at=row.created_at,
            updated_at=row.updated_at,
            **rules.to_dict(),
        )
