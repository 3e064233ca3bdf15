"""Admin evaluator endpoints.

Lets console users preview what a device with a given context would be
offered, without recording a device check.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentApplication, Store
from app.releases.selector import NO_RELEASES_MESSAGE, ReleaseNotFoundError, ReleaseSelector
from app.schemas.evaluation import (
    AvailabilityReportRead,
    EvaluationContextIn,
    LatestReleaseResponse,
    ReleaseEvaluationResponse,
)
from app.schemas.release import ReleaseRead

router = APIRouter()


@router.post(
    "/evaluate",
    response_model=LatestReleaseResponse,
    summary="Latest release for a context",
)
async def evaluate_latest(
    context: EvaluationContextIn,
    application: CurrentApplication,
    store: Store,
) -> LatestReleaseResponse:
    latest = await ReleaseSelector(store).select_latest(application.id, context.to_context())
    if latest is None:
        return LatestReleaseResponse(release=None, message=NO_RELEASES_MESSAGE)
    return LatestReleaseResponse(
        release=ReleaseRead.model_validate(latest),
        message=f"{latest.version_name} ({latest.version_number}) is available",
    )


@router.post(
    "/releases/{release_id}/evaluate",
    response_model=ReleaseEvaluationResponse,
    summary="Evaluate one release",
    description="Explain whether a specific ACTIVE release is available for a context",
)
async def evaluate_release(
    release_id: UUID,
    context: EvaluationContextIn,
    application: CurrentApplication,
    store: Store,
) -> ReleaseEvaluationResponse:
    """Evaluate a named release.

    Raises:
        HTTPException: 404 if the release is missing or not ACTIVE
    """
    try:
        evaluation = await ReleaseSelector(store).evaluate_release(
            application.id, str(release_id), context.to_context()
        )
    except ReleaseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    latest = evaluation.latest_available
    return ReleaseEvaluationResponse(
        release=ReleaseRead.model_validate(evaluation.release),
        is_available=evaluation.is_available,
        report=AvailabilityReportRead.model_validate(evaluation.report.to_dict()),
        latest_available=ReleaseRead.model_validate(latest) if latest else None,
    )
