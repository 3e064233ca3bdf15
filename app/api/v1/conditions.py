"""Condition management endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Request, status

from app.api.deps import (
    CurrentApplication,
    CurrentUser,
    DbSession,
    get_client_ip,
    get_request_id,
)
from app.schemas.condition import ConditionCreate, ConditionRead, ConditionUpdate
from app.services.audit import write_audit_event
from app.services.conditions import (
    ConditionNotFoundError,
    ConditionService,
    ConditionValidationError,
)

router = APIRouter()


@router.get(
    "",
    response_model=list[ConditionRead],
    summary="List conditions",
    description="All conditions of the application, newest first",
)
async def list_conditions(
    application: CurrentApplication,
    session: DbSession,
) -> list[ConditionRead]:
    conditions = await ConditionService(session).list_conditions(application.id)
    return [ConditionRead.from_row(c) for c in conditions]


@router.post(
    "",
    response_model=ConditionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create condition",
)
async def create_condition(
    request: Request,
    data: ConditionCreate,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> ConditionRead:
    """Create a targeting condition.

    A condition may restrict drivers or vehicles, not both.
    """
    condition = await ConditionService(session).create(application.id, data)

    await write_audit_event(
        session=session,
        actor=user,
        action="condition.create",
        entity_type="condition",
        entity_id=condition.id,
        application_id=application.id,
        metadata=data.model_dump(),
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return ConditionRead.from_row(condition)


@router.get(
    "/{condition_id}",
    response_model=ConditionRead,
    summary="Get condition",
)
async def get_condition(
    condition_id: UUID,
    application: CurrentApplication,
    session: DbSession,
) -> ConditionRead:
    try:
        condition = await ConditionService(session).get(application.id, str(condition_id))
    except ConditionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Condition not found")
    return ConditionRead.from_row(condition)


@router.patch(
    "/{condition_id}",
    response_model=ConditionRead,
    summary="Update condition",
)
async def update_condition(
    request: Request,
    condition_id: UUID,
    data: ConditionUpdate,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> ConditionRead:
    """Update a condition in place.

    Every release referencing it sees the new rules on the next evaluation.
    """
    try:
        condition = await ConditionService(session).update(
            application.id, str(condition_id), data
        )
    except ConditionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Condition not found")
    except ConditionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    await write_audit_event(
        session=session,
        actor=user,
        action="condition.update",
        entity_type="condition",
        entity_id=condition.id,
        application_id=application.id,
        metadata=data.model_dump(exclude_none=True),
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return ConditionRead.from_row(condition)


@router.delete(
    "/{condition_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete condition",
    description="Delete a condition and detach it from every release that referenced it",
)
async def delete_condition(
    request: Request,
    condition_id: UUID,
    application: CurrentApplication,
    session: DbSession,
    user: CurrentUser,
) -> None:
    try:
        detached = await ConditionService(session).delete(application.id, str(condition_id))
    except ConditionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Condition not found")

    await write_audit_event(
        session=session,
        actor=user,
        action="condition.delete",
        entity_type="condition",
        entity_id=str(condition_id),
        application_id=application.id,
        metadata={"detached_from_releases": detached},
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
