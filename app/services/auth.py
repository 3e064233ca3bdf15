"""Authentication and user management service."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User
from app.schemas.auth import UserCreate


class UserExistsError(Exception):
    """Raised when creating a user whose email is already registered."""

    pass


class AuthService:
    """Service for handling authentication operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def authenticate(
        self,
        email: str,
        password: str,
    ) -> User | None:
        """Authenticate a user with email and password.

        Args:
            email: User email address
            password: Plain text password

        Returns:
            User if credentials valid, None otherwise
        """
        user = await self.get_user_by_email(email)

        if not user:
            return None

        if not user.is_active:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        user.last_login_at = datetime.now(timezone.utc)
        await self.session.commit()
        return user

    def create_token(self, user: User) -> str:
        """Create JWT access token for a user."""
        return create_access_token(
            subject=user.id,
            additional_claims={
                "email": user.email,
                "superadmin": user.is_superadmin,
            },
        )

    async def get_user_by_id(self, user_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_users_by_emails(self, emails: list[str]) -> list[User]:
        """Look up registered users; unknown emails are skipped."""
        if not emails:
            return []
        result = await self.session.execute(
            select(User).where(User.email.in_([e.lower() for e in emails]))
        )
        return list(result.scalars().all())

    async def create_user(self, data: UserCreate) -> User:
        """Create a console user.

        Raises:
            UserExistsError: If the email is already registered
        """
        if await self.get_user_by_email(data.email):
            raise UserExistsError(f"A user with email {data.email} already exists.")

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            display_name=data.display_name,
            is_superadmin=data.is_superadmin,
            is_active=True,
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user
