"""FastAPI dependency injection utilities."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.application import Application
from app.models.user import User
from app.releases.store import ReleaseStore
from app.services.applications import ApplicationNotFoundError, ApplicationService, can_access
from app.services.auth import AuthService
from app.services.release_store import get_release_store_backend

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict | None:
    """Extract and decode the current JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Decoded token payload or None
    """
    if not credentials:
        return None

    payload = decode_access_token(credentials.credentials)
    return payload


async def get_current_user(
    token: Annotated[dict | None, Depends(get_current_token)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated console user.

    Args:
        token: Decoded JWT token
        session: Database session

    Returns:
        Authenticated User

    Raises:
        HTTPException: If not authenticated or the account is disabled
    """
    if not token or token.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    auth_service = AuthService(session)
    user = await auth_service.get_user_by_id(token["sub"])

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


async def require_superadmin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Only super-admins may pass."""
    if not user.is_superadmin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super-admin privileges required",
        )
    return user


async def get_application_for_user(
    app_id: UUID,
    user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> Application:
    """Resolve the ``app_id`` path parameter for the current user.

    Raises:
        HTTPException: 404 if the application does not exist, 403 if the
            user is not a member
    """
    try:
        application = await ApplicationService(session).get(str(app_id))
    except ApplicationNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )

    if not can_access(user, application):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this application",
        )

    return application


def get_release_store(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
) -> ReleaseStore:
    """Release store the evaluation engine reads from."""
    return get_release_store_backend(
        session,
        memory_store=getattr(request.app.state, "memory_store", None),
    )


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request.

    Args:
        request: FastAPI request

    Returns:
        Client IP address or None
    """
    # Check for forwarded header (when behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    # Fall back to direct client
    if request.client:
        return request.client.host

    return None


def get_request_id(request: Request) -> str | None:
    """Extract request ID from headers."""
    return request.headers.get("X-Request-ID")


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
SuperAdmin = Annotated[User, Depends(require_superadmin)]
CurrentApplication = Annotated[Application, Depends(get_application_for_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Store = Annotated[ReleaseStore, Depends(get_release_store)]
