"""Release eligibility engine.

Decides which release, if any, a device should treat as its latest
available update. Evaluation is deterministic and read-only.
"""

from app.releases.combinator import AvailabilityReport, effective_rule, explain, is_available
from app.releases.loader import dump_snapshot, load_snapshot, parse_snapshot
from app.releases.models import (
    Condition,
    EvaluationContext,
    Release,
    ReleaseStatus,
    RuleSet,
)
from app.releases.selector import (
    ReleaseEvaluation,
    ReleaseNotFoundError,
    ReleaseSelector,
    UpdateCheckResult,
    order_releases,
)
from app.releases.store import InMemoryReleaseStore, ReleaseStore

__all__ = [
    "AvailabilityReport",
    "Condition",
    "EvaluationContext",
    "InMemoryReleaseStore",
    "Release",
    "ReleaseEvaluation",
    "ReleaseNotFoundError",
    "ReleaseSelector",
    "ReleaseStatus",
    "ReleaseStore",
    "RuleSet",
    "UpdateCheckResult",
    "dump_snapshot",
    "effective_rule",
    "explain",
    "is_available",
    "load_snapshot",
    "order_releases",
    "parse_snapshot",
]
