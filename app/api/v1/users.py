"""Console user management endpoints (super-admin only)."""

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select

from app.api.deps import DbSession, SuperAdmin, get_client_ip, get_request_id
from app.models.user import User
from app.schemas.auth import UserCreate, UserRead
from app.services.audit import write_audit_event
from app.services.auth import AuthService, UserExistsError

router = APIRouter()


@router.get(
    "",
    response_model=list[UserRead],
    summary="List users",
)
async def list_users(session: DbSession, admin: SuperAdmin) -> list[UserRead]:
    result = await session.execute(select(User).order_by(User.email))
    return [UserRead.model_validate(u) for u in result.scalars().all()]


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Register a console user. Only registered users can be added to applications.",
)
async def create_user(
    request: Request,
    data: UserCreate,
    session: DbSession,
    admin: SuperAdmin,
) -> UserRead:
    """Create a console user.

    Raises:
        HTTPException: 409 if the email is already registered
    """
    try:
        user = await AuthService(session).create_user(data)
    except UserExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    await write_audit_event(
        session=session,
        actor=admin,
        action="user.create",
        entity_type="user",
        entity_id=user.id,
        metadata={"email": user.email, "is_superadmin": user.is_superadmin},
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )
    return UserRead.model_validate(user)
