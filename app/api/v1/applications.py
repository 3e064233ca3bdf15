"""Application management endpoints."""

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy import select

from app.api.deps import (
    CurrentApplication,
    CurrentUser,
    DbSession,
    get_client_ip,
    get_request_id,
)
from app.models.application import Application
from app.models.release import Release
from app.models.user import User
from app.releases.loader import dump_snapshot
from app.schemas.application import (
    ApplicationCreate,
    ApplicationRead,
    ApplicationUpdate,
    DashboardRead,
    MemberRead,
)
from app.schemas.audit_event import AuditEventFilter, AuditEventRead
from app.schemas.device_check import DeviceCheckFilter, DeviceCheckRead
from app.schemas.release import ReleaseRead
from app.services.applications import ApplicationService, is_application_admin
from app.services.audit import AuditService, write_audit_event
from app.services.device_checks import DeviceCheckService
from app.services.release_store import SqlReleaseStore, release_from_row

router = APIRouter()


def to_application_read(application: Application) -> ApplicationRead:
    """Flatten memberships into member entries with their emails."""
    return ApplicationRead(
        id=application.id,
        name=application.name,
        package_name=application.package_name,
        owner_id=application.owner_id,
        members=[
            MemberRead(user_id=m.user_id, email=m.user.email, role=m.role)
            for m in sorted(application.members, key=lambda m: m.user.email)
        ],
        created_at=application.created_at,
        updated_at=application.updated_at,
    )


def require_application_admin(user: User, application: Application) -> None:
    if not is_application_admin(user, application):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Application admin privileges required",
        )


@router.get(
    "",
    response_model=list[ApplicationRead],
    summary="List applications",
    description="Applications the current user is a member of (all of them for super-admins)",
)
async def list_applications(session: DbSession, user: CurrentUser) -> list[ApplicationRead]:
    applications = await ApplicationService(session).list_for_user(user)
    return [to_application_read(a) for a in applications]


@router.post(
    "",
    response_model=ApplicationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create application",
)
async def create_application(
    request: Request,
    data: ApplicationCreate,
    session: DbSession,
    user: CurrentUser,
) -> ApplicationRead:
    """Create an application owned by the current user.

    Member emails that are not registered users are ignored.
    """
    application = await ApplicationService(session).create(data, owner=user)

    await write_audit_event(
        session=session,
        actor=user,
        action="application.create",
        entity_type="application",
        entity_id=application.id,
        application_id=application.id,
        metadata={
            "package_name": application.package_name,
            "members": [m.user_id for m in application.members],
        },
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return to_application_read(application)


@router.get(
    "/{app_id}",
    response_model=ApplicationRead,
    summary="Get application",
)
async def get_application(application: CurrentApplication) -> ApplicationRead:
    return to_application_read(application)


@router.patch(
    "/{app_id}",
    response_model=ApplicationRead,
    summary="Update application",
    description="Rename, change package name or replace the member list",
)
async def update_application(
    request: Request,
    data: ApplicationUpdate,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> ApplicationRead:
    require_application_admin(user, application)

    updated = await ApplicationService(session).update(application.id, data)

    await write_audit_event(
        session=session,
        actor=user,
        action="application.update",
        entity_type="application",
        entity_id=updated.id,
        application_id=updated.id,
        metadata=data.model_dump(exclude_none=True),
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return to_application_read(updated)


@router.delete(
    "/{app_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete application",
    description="Delete an application with all its releases, conditions and device checks",
)
async def delete_application(
    request: Request,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> None:
    require_application_admin(user, application)

    application_id = application.id
    package_name = application.package_name
    await ApplicationService(session).delete(application_id)

    await write_audit_event(
        session=session,
        actor=user,
        action="application.delete",
        entity_type="application",
        entity_id=application_id,
        metadata={"package_name": package_name},
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )


@router.get(
    "/{app_id}/dashboard",
    response_model=DashboardRead,
    summary="Application dashboard",
    description="Release counts by status, latest active release and recent device activity",
)
async def get_dashboard(application: CurrentApplication, session: DbSession) -> DashboardRead:
    data = await ApplicationService(session).dashboard(application.id)
    latest = data.pop("latest_active_release")
    return DashboardRead(
        **data,
        latest_active_release=ReleaseRead.model_validate(latest) if latest else None,
    )


@router.get(
    "/{app_id}/device-checks",
    response_model=list[DeviceCheckRead],
    summary="List device checks",
    description="Update checks reported by devices, newest first",
)
async def list_device_checks(
    application: CurrentApplication,
    session: DbSession,
    driver_id: str | None = Query(None),
    vehicle_id: str | None = Query(None),
    update_required: bool | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[DeviceCheckRead]:
    filters = DeviceCheckFilter(
        driver_id=driver_id,
        vehicle_id=vehicle_id,
        update_required=update_required,
        limit=limit,
        offset=offset,
    )
    checks = await DeviceCheckService(session).list_checks(application.id, filters)
    return [DeviceCheckRead.model_validate(c) for c in checks]


@router.get(
    "/{app_id}/audit",
    response_model=list[AuditEventRead],
    summary="List audit events",
    description="Changes made to the application, newest first",
)
async def list_audit_events(
    application: CurrentApplication,
    session: DbSession,
    entity_type: str | None = Query(None),
    entity_id: str | None = Query(None),
    actor_id: str | None = Query(None),
    action: str | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[AuditEventRead]:
    filters = AuditEventFilter(
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor_id,
        action=action,
        limit=limit,
        offset=offset,
    )
    events = await AuditService(session).get_events(application.id, filters)
    return [AuditEventRead.model_validate(e) for e in events]


@router.get(
    "/{app_id}/snapshot",
    response_class=PlainTextResponse,
    summary="Export release snapshot",
    description="YAML export of every release and condition, loadable by the memory store",
)
async def export_snapshot(application: CurrentApplication, session: DbSession) -> PlainTextResponse:
    result = await session.execute(
        select(Release)
        .where(Release.application_id == application.id)
        .order_by(Release.created_at)
    )
    releases = [release_from_row(row) for row in result.scalars().all()]
    conditions = await SqlReleaseStore(session).list_conditions(application.id)

    return PlainTextResponse(
        dump_snapshot(releases, conditions),
        media_type="application/x-yaml",
    )
