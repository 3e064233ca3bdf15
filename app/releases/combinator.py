"""Rule combinator for release availability.

Merges the rule sets of every condition attached to a release into one
effective rule and decides whether an evaluation context satisfies it:

- Conditions are combined per dimension by set union.
- Country and company are independent dimensions (AND).
- Driver and vehicle restrictions form one coupled check (OR) when both
  are populated.
- A release pointing at a condition that cannot be found is unavailable.

Nothing in this module raises for missing or empty data; every such case
is reported as a boolean outcome.
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Iterable

from app.releases.models import Condition, EvaluationContext, Release, RuleSet

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityReport:
    """Detailed outcome of evaluating one release against a context."""

    release_id: str
    available: bool
    effective_rule: RuleSet
    country_match: bool = True
    company_match: bool = True
    driver_or_vehicle_match: bool = True
    missing_condition_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "release_id": self.release_id,
            "available": self.available,
            "effective_rule": self.effective_rule.to_dict(),
            "country_match": self.country_match,
            "company_match": self.company_match,
            "driver_or_vehicle_match": self.driver_or_vehicle_match,
            "missing_condition_ids": list(self.missing_condition_ids),
        }


def effective_rule(conditions: Iterable[Condition]) -> RuleSet:
    """Union the rule sets of the given conditions, dimension by dimension."""
    return reduce(
        lambda acc, condition: acc.union(condition.rules),
        conditions,
        RuleSet(),
    )


def country_matches(rule: RuleSet, context: EvaluationContext) -> bool:
    if not rule.countries:
        return True
    return context.country is not None and context.country in rule.countries


def company_matches(rule: RuleSet, context: EvaluationContext) -> bool:
    if not rule.company_ids:
        return True
    return context.company_id is not None and context.company_id in rule.company_ids


def driver_or_vehicle_matches(rule: RuleSet, context: EvaluationContext) -> bool:
    """Coupled driver/vehicle check.

    With both lists populated a match on either axis is enough. With only one
    populated, the context must match that one.
    """
    driver_ok = context.driver_id is not None and context.driver_id in rule.driver_ids
    vehicle_ok = (
        context.vehicle_id is not None and context.vehicle_id in rule.vehicle_ids
    )

    if rule.driver_ids and rule.vehicle_ids:
        return driver_ok or vehicle_ok
    if rule.driver_ids:
        return driver_ok
    if rule.vehicle_ids:
        return vehicle_ok
    return True


def _resolve(
    release: Release,
    conditions: Iterable[Condition],
) -> tuple[list[Condition], list[str]]:
    """Look up a release's condition ids, returning (resolved, missing ids)."""
    by_id = {c.id: c for c in conditions}
    resolved: list[Condition] = []
    missing: list[str] = []

    for condition_id in release.condition_ids:
        condition = by_id.get(condition_id)
        if condition is None:
            missing.append(condition_id)
        else:
            resolved.append(condition)

    return resolved, missing


def explain(
    release: Release,
    context: EvaluationContext,
    conditions: Iterable[Condition],
) -> AvailabilityReport:
    """Evaluate a release and report each sub-check.

    Args:
        release: Release under evaluation
        context: Caller identity tuple
        conditions: All conditions of the release's application

    Returns:
        AvailabilityReport with the overall result and per-dimension detail
    """
    if not release.condition_ids:
        return AvailabilityReport(
            release_id=release.id,
            available=True,
            effective_rule=RuleSet(),
        )

    resolved, missing = _resolve(release, conditions)
    rule = effective_rule(resolved)

    if missing:
        logger.warning(
            f"Release {release.id} references missing conditions {missing}; "
            "treating it as unavailable"
        )
        return AvailabilityReport(
            release_id=release.id,
            available=False,
            effective_rule=rule,
            missing_condition_ids=missing,
        )

    country_ok = country_matches(rule, context)
    company_ok = company_matches(rule, context)
    driver_vehicle_ok = driver_or_vehicle_matches(rule, context)

    return AvailabilityReport(
        release_id=release.id,
        available=country_ok and company_ok and driver_vehicle_ok,
        effective_rule=rule,
        country_match=country_ok,
        company_match=company_ok,
        driver_or_vehicle_match=driver_vehicle_ok,
    )


def is_available(
    release: Release,
    context: EvaluationContext,
    conditions: Iterable[Condition],
) -> bool:
    """Decide whether a context is authorised for a release."""
    return explain(release, context, conditions).available
