"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.security import create_access_token, hash_password
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.application import Application, ApplicationMember, MemberRole
from app.models.condition import Condition
from app.models.release import Release
from app.models.user import User


# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an HTTP client bound to the app with overridden dependencies."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(async_session: AsyncSession) -> User:
    """Create a regular console user."""
    user = User(
        email="test@releases.local",
        hashed_password=hash_password("testpassword123"),
        display_name="Test User",
        is_superadmin=False,
        is_active=True,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def other_user(async_session: AsyncSession) -> User:
    """Create a console user with no memberships."""
    user = User(
        email="other@releases.local",
        hashed_password=hash_password("otherpassword123"),
        is_superadmin=False,
        is_active=True,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(async_session: AsyncSession) -> User:
    """Create a super-admin."""
    user = User(
        email="admin@releases.local",
        hashed_password=hash_password("adminpassword123"),
        display_name="Admin User",
        is_superadmin=True,
        is_active=True,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


def make_auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(
        subject=user.id,
        additional_claims={"email": user.email, "superadmin": user.is_superadmin},
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    """Bearer headers for the regular test user."""
    return make_auth_headers(test_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    """Bearer headers for the super-admin."""
    return make_auth_headers(admin_user)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    """Bearer headers for the user without memberships."""
    return make_auth_headers(other_user)


@pytest.fixture
async def test_application(async_session: AsyncSession, test_user: User) -> Application:
    """Create an application owned by the test user."""
    application = Application(
        name="Fleet Driver",
        package_name="com.example.fleet",
        owner_id=test_user.id,
    )
    application.members.append(
        ApplicationMember(user_id=test_user.id, role=MemberRole.ADMIN.value)
    )
    async_session.add(application)
    await async_session.commit()
    await async_session.refresh(application)
    return application


async def _create_condition(
    session: AsyncSession,
    application: Application,
    name: str = "Pilot",
    **rules: list,
) -> Condition:
    condition = Condition(
        application_id=application.id,
        name=name,
        countries=rules.get("countries", []),
        company_ids=rules.get("company_ids", []),
        driver_ids=rules.get("driver_ids", []),
        vehicle_ids=rules.get("vehicle_ids", []),
    )
    session.add(condition)
    await session.commit()
    await session.refresh(condition)
    return condition


async def _create_release(
    session: AsyncSession,
    application: Application,
    version_code: str,
    version_name: str | None = None,
    status: str = "active",
    conditions: list[Condition] | None = None,
    minutes: int = 0,
) -> Release:
    release = Release(
        application_id=application.id,
        version_name=version_name or f"1.0.{version_code}",
        version_code=version_code,
        status=status,
        conditions=conditions or [],
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    session.add(release)
    await session.commit()
    await session.refresh(release)
    return release


@pytest.fixture
def make_condition(async_session: AsyncSession):
    """Factory for conditions: ``await make_condition(app, name, countries=[...])``."""

    async def factory(application: Application, name: str = "Pilot", **rules: list) -> Condition:
        return await _create_condition(async_session, application, name, **rules)

    return factory


@pytest.fixture
def make_release(async_session: AsyncSession):
    """Factory for releases: ``await make_release(app, "42", conditions=[...])``."""

    async def factory(application: Application, version_code: str, **kwargs) -> Release:
        return await _create_release(async_session, application, version_code, **kwargs)

    return factory
