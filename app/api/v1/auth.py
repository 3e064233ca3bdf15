"""Console authentication endpoints."""

from fastapi import APIRouter, HTTPException, Request, status

from app.api.deps import CurrentUser, DbSession, get_client_ip, get_request_id
from app.core.config import settings
from app.schemas.auth import LoginRequest, TokenResponse, UserRead
from app.services.audit import write_audit_event
from app.services.auth import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Console login",
    description="Authenticate a console user with email and password",
)
async def login(
    request: Request,
    credentials: LoginRequest,
    session: DbSession,
) -> TokenResponse:
    """Authenticate a console user and return a JWT token.

    Args:
        request: FastAPI request
        credentials: Email and password
        session: Database session

    Returns:
        JWT access token

    Raises:
        HTTPException: If credentials are invalid
    """
    auth_service = AuthService(session)
    user = await auth_service.authenticate(
        email=credentials.email,
        password=credentials.password,
    )

    if not user:
        # Log failed attempt
        await write_audit_event(
            session=session,
            actor=None,
            action="login_failed",
            entity_type="user",
            entity_id=None,
            metadata={"email": credentials.email, "reason": "invalid_credentials"},
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            request_id=get_request_id(request),
        )

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = auth_service.create_token(user)

    await write_audit_event(
        session=session,
        actor=user,
        action="login_success",
        entity_type="user",
        entity_id=user.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current user",
)
async def read_current_user(user: CurrentUser) -> UserRead:
    return UserRead.model_validate(user)
