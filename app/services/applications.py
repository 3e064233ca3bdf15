"""Application management service."""

import logging
from datetime import timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.base import utc_now
from app.models.application import Application, ApplicationMember, MemberRole
from app.models.condition import Condition
from app.models.device_check import DeviceCheck
from app.models.release import Release, release_conditions
from app.models.user import User
from app.releases.selector import order_releases
from app.schemas.application import ApplicationCreate, ApplicationUpdate
from app.services.auth import AuthService
from app.services.release_store import SqlReleaseStore

logger = logging.getLogger(__name__)


class ApplicationNotFoundError(Exception):
    """Raised when an application does not exist."""

    pass


def can_access(user: User, application: Application) -> bool:
    """Super-admins see everything; other users need a membership."""
    if user.is_superadmin:
        return True
    return any(m.user_id == user.id for m in application.members)


def is_application_admin(user: User, application: Application) -> bool:
    """Only admins of an application may rename, re-staff or delete it."""
    if user.is_superadmin:
        return True
    return any(
        m.user_id == user.id and m.role == MemberRole.ADMIN.value for m in application.members
    )


class ApplicationService:
    """Service for creating and managing applications."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, data: ApplicationCreate, owner: User) -> Application:
        """Create an application and its memberships.

        Emails that do not belong to a registered user are ignored. The
        owner is always an admin member.
        """
        application = Application(
            name=data.name.strip(),
            package_name=data.package_name,
            owner_id=owner.id,
        )
        self.session.add(application)

        await self._replace_members(application, data.member_emails, owner.id)
        await self.session.commit()

        logger.info(f"Created application {application.package_name} ({application.id})")
        return await self.get(application.id)

    async def _replace_members(
        self,
        application: Application,
        emails: list[str],
        owner_id: str,
    ) -> None:
        """Make the membership match the given emails plus the owner."""
        users = await AuthService(self.session).get_users_by_emails(emails)
        wanted = {u.id for u in users} | {owner_id}

        for member in list(application.members):
            if member.user_id not in wanted:
                application.members.remove(member)

        existing = {m.user_id for m in application.members}
        for user_id in sorted(wanted - existing):
            application.members.append(
                ApplicationMember(
                    user_id=user_id,
                    role=(
                        MemberRole.ADMIN.value if user_id == owner_id else MemberRole.USER.value
                    ),
                )
            )

    async def get(self, application_id: str) -> Application:
        """Get an application by id.

        Raises:
            ApplicationNotFoundError: If it does not exist
        """
        result = await self.session.execute(
            select(Application)
            .where(Application.id == application_id)
            .options(selectinload(Application.members).selectinload(ApplicationMember.user))
            .execution_options(populate_existing=True)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise ApplicationNotFoundError(f"Application {application_id} not found")
        return application

    async def list_for_user(self, user: User) -> list[Application]:
        """Applications the user may manage, newest first."""
        query = (
            select(Application)
            .options(selectinload(Application.members).selectinload(ApplicationMember.user))
            .order_by(Application.created_at.desc())
        )
        if not user.is_superadmin:
            query = query.join(ApplicationMember).where(ApplicationMember.user_id == user.id)
        result = await self.session.execute(query)
        return list(result.scalars().unique().all())

    async def update(self, application_id: str, data: ApplicationUpdate) -> Application:
        application = await self.get(application_id)

        if data.name is not None:
            application.name = data.name.strip()
        if data.package_name is not None:
            application.package_name = data.package_name
        if data.member_emails is not None:
            await self._replace_members(application, data.member_emails, application.owner_id)

        await self.session.commit()
        return await self.get(application_id)

    async def delete(self, application_id: str) -> None:
        """Delete an application with its releases, conditions and checks."""
        application = await self.get(application_id)

        release_ids = select(Release.id).where(Release.application_id == application_id)
        await self.session.execute(
            delete(release_conditions).where(release_conditions.c.release_id.in_(release_ids))
        )
        await self.session.execute(delete(Release).where(Release.application_id == application_id))
        await self.session.execute(
            delete(Condition).where(Condition.application_id == application_id)
        )
        await self.session.execute(
            delete(DeviceCheck).where(DeviceCheck.application_id == application_id)
        )
        await self.session.delete(application)
        await self.session.commit()

        logger.info(f"Deleted application {application_id}")

    async def dashboard(self, application_id: str) -> dict:
        """Release, condition and device-check counts for one application."""
        await self.get(application_id)

        status_rows = await self.session.execute(
            select(Release.status, func.count(Release.id))
            .where(Release.application_id == application_id)
            .group_by(Release.status)
        )
        releases_by_status = {status: count for status, count in status_rows.all()}

        total_conditions = await self.session.scalar(
            select(func.count(Condition.id)).where(Condition.application_id == application_id)
        )

        active = await SqlReleaseStore(self.session).list_active_releases(application_id)
        ordered = order_releases(active)

        since = utc_now() - timedelta(hours=24)
        checks = await self.session.execute(
            select(DeviceCheck.update_required, func.count(DeviceCheck.id))
            .where(DeviceCheck.application_id == application_id)
            .where(DeviceCheck.created_at >= since)
            .group_by(DeviceCheck.update_required)
        )
        check_counts = {bool(flag): count for flag, count in checks.all()}

        return {
            "application_id": application_id,
            "releases_by_status": releases_by_status,
            "total_releases": sum(releases_by_status.values()),
            "total_conditions": total_conditions or 0,
            "latest_active_release": ordered[0] if ordered else None,
            "device_checks_last_24h": sum(check_counts.values()),
            "updates_required_last_24h": check_counts.get(True, 0),
        }
