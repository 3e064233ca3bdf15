"""Release management endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Request, status

from app.api.deps import (
    CurrentApplication,
    CurrentUser,
    DbSession,
    get_client_ip,
    get_request_id,
)
from app.releases.selector import ReleaseNotFoundError
from app.schemas.release import ReleaseCreate, ReleaseListResponse, ReleaseRead, ReleaseUpdate
from app.services.audit import write_audit_event
from app.services.releases import ReleaseService, UnknownConditionError

router = APIRouter()


@router.get(
    "",
    response_model=ReleaseListResponse,
    summary="List releases",
    description="One page of the application's releases, newest first",
)
async def list_releases(
    application: CurrentApplication,
    session: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ReleaseListResponse:
    releases, total = await ReleaseService(session).list_page(
        application.id, page=page, limit=limit
    )
    return ReleaseListResponse(
        items=[ReleaseRead.model_validate(r) for r in releases],
        total=total,
        page=page,
        limit=limit,
    )


@router.post(
    "",
    response_model=ReleaseRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create release",
)
async def create_release(
    request: Request,
    data: ReleaseCreate,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> ReleaseRead:
    """Create a release, optionally gated by conditions of the same application.

    Raises:
        HTTPException: 400 if a condition id does not belong to the application
    """
    try:
        release = await ReleaseService(session).create(application.id, data)
    except UnknownConditionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    await write_audit_event(
        session=session,
        actor=user,
        action="release.create",
        entity_type="release",
        entity_id=release.id,
        application_id=application.id,
        metadata={
            "version_name": release.version_name,
            "version_code": release.version_code,
            "status": release.status,
            "condition_ids": release.condition_ids,
        },
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return ReleaseRead.model_validate(release)


@router.get(
    "/{release_id}",
    response_model=ReleaseRead,
    summary="Get release",
)
async def get_release(
    release_id: UUID,
    application: CurrentApplication,
    session: DbSession,
) -> ReleaseRead:
    try:
        release = await ReleaseService(session).get(application.id, str(release_id))
    except ReleaseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Release not found")
    return ReleaseRead.model_validate(release)


@router.patch(
    "/{release_id}",
    response_model=ReleaseRead,
    summary="Update release",
    description="Change version, status or attached conditions",
)
async def update_release(
    request: Request,
    release_id: UUID,
    data: ReleaseUpdate,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> ReleaseRead:
    try:
        release = await ReleaseService(session).update(application.id, str(release_id), data)
    except ReleaseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Release not found")
    except UnknownConditionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    await write_audit_event(
        session=session,
        actor=user,
        action="release.update",
        entity_type="release",
        entity_id=release.id,
        application_id=application.id,
        metadata=data.model_dump(mode="json", exclude_none=True),
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return ReleaseRead.model_validate(release)


@router.delete(
    "/{release_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete release",
)
async def delete_release(
    request: Request,
    release_id: UUID,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> None:
    try:
        await ReleaseService(session).delete(application.id, str(release_id))
    except ReleaseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Release not found")

    await write_audit_event(
        session=session,
        actor=user,
        action="release.delete",
        entity_type="release",
        entity_id=str(release_id),
        application_id=application.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
