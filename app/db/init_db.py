"""Database initialization utilities."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import engine
from app.models.user import User

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def create_initial_admin(session: AsyncSession) -> User | None:
    """Create the bootstrap super-admin if no super-admin exists.

    Args:
        session: Database session

    Returns:
        Created admin user or None if one already exists
    """
    result = await session.execute(
        select(User).where(User.is_superadmin.is_(True)).limit(1)
    )
    if result.scalar_one_or_none():
        logger.info("Super-admin already exists, skipping creation")
        return None

    admin = User(
        email=settings.bootstrap_admin_email.lower(),
        hashed_password=hash_password(settings.bootstrap_admin_password),
        display_name="System Admin",
        is_superadmin=True,
        is_active=True,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)

    logger.warning(
        "Created initial super-admin with the bootstrap password. "
        "CHANGE THE PASSWORD IMMEDIATELY!"
    )
    return admin


async def init_db(session: AsyncSession) -> None:
    """Initialize database with required data.

    Args:
        session: Database session
    """
    await create_tables()
    await create_initial_admin(session)
    logger.info("Database initialization complete")
