"""Release targeting data models.

These are plain dataclasses with no persistence concerns. Storage backends
convert their rows into these shapes before the evaluation engine sees them.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping


class ReleaseStatus(str, Enum):
    """Lifecycle status of a release."""

    ACTIVE = "active"
    PAUSED = "paused"
    DEPRECATED = "deprecated"
    ARCHIVED = "archived"


# Canonical rule keys and the legacy spellings found in older rows
_RULE_KEY_ALIASES = {
    "countries": ("countries", "country"),
    "company_ids": ("company_ids", "companyIds", "companies", "companyId"),
    "driver_ids": ("driver_ids", "driverIds", "drivers", "driverId"),
    "vehicle_ids": ("vehicle_ids", "vehicleIds", "vehicles", "vehicleId"),
}


def _coerce_list(value: Any) -> list[Any]:
    """Turn a stored rule value (list, JSON string, scalar or None) into a list."""
    if value is None:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        if stripped.startswith("["):
            try:
                decoded = json.loads(stripped)
            except ValueError:
                return [stripped]
            return _coerce_list(decoded)
        return [stripped]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _clean_strings(values: Iterable[Any]) -> frozenset[str]:
    return frozenset(
        str(v).strip() for v in values if v is not None and str(v).strip()
    )


def _clean_ints(values: Iterable[Any]) -> frozenset[int]:
    result = set()
    for v in values:
        if isinstance(v, bool):
            continue
        try:
            result.add(int(v))
        except (TypeError, ValueError):
            continue
    return frozenset(result)


@dataclass(frozen=True)
class RuleSet:
    """Four-dimensional targeting predicate.

    An empty dimension places no restriction on that dimension.
    """

    countries: frozenset[str] = frozenset()
    company_ids: frozenset[int] = frozenset()
    driver_ids: frozenset[str] = frozenset()
    vehicle_ids: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        """True when no dimension is restricted."""
        return not (
            self.countries or self.company_ids or self.driver_ids or self.vehicle_ids
        )

    def union(self, other: "RuleSet") -> "RuleSet":
        """Per-dimension union of two rule sets."""
        return RuleSet(
            countries=self.countries | other.countries,
            company_ids=self.company_ids | other.company_ids,
            driver_ids=self.driver_ids | other.driver_ids,
            vehicle_ids=self.vehicle_ids | other.vehicle_ids,
        )

    @classmethod
    def from_raw(
        cls,
        countries: Any = None,
        company_ids: Any = None,
        driver_ids: Any = None,
        vehicle_ids: Any = None,
    ) -> "RuleSet":
        """Build a RuleSet from loosely typed values.

        Each argument may be a list, a JSON-encoded list, a single scalar or
        None. Company ids that do not parse as integers are dropped.
        """
        return cls(
            countries=_clean_strings(_coerce_list(countries)),
            company_ids=_clean_ints(_coerce_list(company_ids)),
            driver_ids=_clean_strings(_coerce_list(driver_ids)),
            vehicle_ids=_clean_strings(_coerce_list(vehicle_ids)),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | str | None) -> "RuleSet":
        """Create a RuleSet from a mapping using canonical or legacy keys."""
        if isinstance(data, str):
            data = json.loads(data) if data.strip() else {}
        if not data:
            return cls()

        values: dict[str, Any] = {}
        for canonical, aliases in _RULE_KEY_ALIASES.items():
            for key in aliases:
                if key in data:
                    values[canonical] = data[key]
                    break
        return cls.from_raw(**values)

    def to_dict(self) -> dict[str, list]:
        """Convert RuleSet to a JSON-friendly dictionary with sorted values."""
        return {
            "countries": sorted(self.countries),
            "company_ids": sorted(self.company_ids),
            "driver_ids": sorted(self.driver_ids),
            "vehicle_ids": sorted(self.vehicle_ids),
        }


@dataclass(frozen=True)
class Condition:
    """A named rule set scoped to one application."""

    id: str
    application_id: str
    name: str
    rules: RuleSet = field(default_factory=RuleSet)
    created_at: datetime | None = None


@dataclass(frozen=True)
class Release:
    """A versioned artifact record that may reference conditions by id."""

    id: str
    application_id: str
    version_name: str
    version_code: str
    status: ReleaseStatus = ReleaseStatus.ACTIVE
    condition_ids: tuple[str, ...] = ()
    created_at: datetime | None = None

    @property
    def version_number(self) -> int:
        """Numeric version code, or -1 when the stored code is not a valid number."""
        try:
            number = int(str(self.version_code).strip())
        except (TypeError, ValueError):
            return -1
        return number if number >= 0 else -1

    @property
    def is_active(self) -> bool:
        return self.status == ReleaseStatus.ACTIVE


@dataclass(frozen=True)
class EvaluationContext:
    """Caller identity tuple matched against a release's effective rule.

    Every field is optional here; a missing field simply cannot satisfy a
    rule that restricts its dimension.
    """

    country: str | None = None
    company_id: int | None = None
    driver_id: str | None = None
    vehicle_id: str | None = None

    def __post_init__(self) -> None:
        # Devices report driver and vehicle ids as numbers or strings
        for name in ("driver_id", "vehicle_id", "country"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                object.__setattr__(self, name, str(value))

    def to_dict(self) -> dict[str, Any]:
        return {
            "country": self.country,
            "company_id": self.company_id,
            "driver_id": self.driver_id,
            "vehicle_id": self.vehicle_id,
        }
