"""Admin evaluator schemas."""

from pydantic import BaseModel, Field

from app.releases.models import EvaluationContext
from app.schemas.condition import RuleLists
from app.schemas.release import ReleaseRead


class EvaluationContextIn(BaseModel):
    """Context to evaluate. Omitted fields cannot satisfy restricted dimensions."""

    country: str | None = Field(None, max_length=10)
    company_id: int | None = None
    driver_id: str | int | None = None
    vehicle_id: str | int | None = None

    def to_context(self) -> EvaluationContext:
        return EvaluationContext(
            country=self.country,
            company_id=self.company_id,
            driver_id=self.driver_id,
            vehicle_id=self.vehicle_id,
        )


class EffectiveRule(RuleLists):
    """Union of every attached condition's rules."""


class AvailabilityReportRead(BaseModel):
    """Per-dimension evaluation detail."""

    available: bool
    country_match: bool
    company_match: bool
    driver_or_vehicle_match: bool
    missing_condition_ids: list[str]
    effective_rule: EffectiveRule


class LatestReleaseResponse(BaseModel):
    """Latest release available for a context, if any."""

    release: ReleaseRead | None
    message: str


class ReleaseEvaluationResponse(BaseModel):
    """Evaluation of one named release."""

    release: ReleaseRead
    is_available: bool
    report: AvailabilityReportRead
    latest_available: ReleaseRead | None
