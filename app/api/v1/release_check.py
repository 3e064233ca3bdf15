"""Public release check endpoints consumed by client devices."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import DbSession, Store
from app.core.config import settings
from app.releases.models import EvaluationContext
from app.releases.selector import ReleaseSelector, UpdateCheckResult
from app.releases.store import ReleaseStore
from app.schemas.release_check import (
    LatestVersionInfo,
    ReleaseCheckRequest,
    ReleaseCheckResponse,
    VersionInfo,
)
from app.services.device_checks import record_device_check

router = APIRouter()
logger = logging.getLogger(__name__)

CHECK_FAILED_BODY = {
    "error": "Internal server error",
    "message": "Failed to check release requirements",
}


def to_check_response(result: UpdateCheckResult) -> ReleaseCheckResponse:
    latest = result.latest_release
    return ReleaseCheckResponse(
        update_required=result.update_required,
        current_version=VersionInfo(
            version_name=result.current_version_name,
            version_code=result.current_version_code,
        ),
        latest_version=(
            LatestVersionInfo(
                id=latest.id,
                version_name=latest.version_name,
                version_code=latest.version_number,
            )
            if latest
            else None
        ),
        message=result.message,
    )


async def run_check(
    check: ReleaseCheckRequest,
    store: ReleaseStore,
    session: AsyncSession,
) -> JSONResponse:
    """Evaluate a check request and record it as device activity."""
    context = EvaluationContext(
        country=check.country,
        company_id=check.company_id,
        driver_id=check.driver_id,
        vehicle_id=check.vehicle_id,
    )

    try:
        result = await ReleaseSelector(store).check_for_update(
            application_id=str(check.app_id),
            current_version_name=check.version_name,
            current_version_code=check.version_code,
            context=context,
        )
    except Exception:
        logger.exception(f"Release check failed for app {check.app_id}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=CHECK_FAILED_BODY,
        )

    logger.info(
        f"Release check app={check.app_id} driver={check.driver_id} "
        f"vehicle={check.vehicle_id} code={check.version_code} "
        f"update_required={result.update_required}"
    )

    if settings.record_device_checks:
        try:
            await record_device_check(session, check, result)
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error(f"Failed to record device check for app {check.app_id}: {exc}")

    response = to_check_response(result)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post(
    "/check",
    response_model=ReleaseCheckResponse,
    response_model_exclude_none=True,
    summary="Check for a required update",
    description="Report the installed version and identity; returns the release to install, if any",
)
async def check_release_post(
    check: ReleaseCheckRequest,
    store: Store,
    session: DbSession,
) -> JSONResponse:
    return await run_check(check, store, session)


@router.get(
    "/check",
    response_model=ReleaseCheckResponse,
    response_model_exclude_none=True,
    summary="Check for a required update (query string)",
)
async def check_release_get(
    request: Request,
    store: Store,
    session: DbSession,
) -> JSONResponse:
    """Same as the POST variant with the fields passed as query parameters."""
    try:
        check = ReleaseCheckRequest.model_validate(dict(request.query_params))
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False, include_context=False))
    return await run_check(check, store, session)
