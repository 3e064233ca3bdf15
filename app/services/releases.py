"""Release management service."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.condition import Condition
from app.models.release import Release
from app.releases.selector import ReleaseNotFoundError
from app.schemas.release import ReleaseCreate, ReleaseUpdate

logger = logging.getLogger(__name__)


class UnknownConditionError(Exception):
    """Raised when a release references conditions outside its application."""

    def __init__(self, condition_ids: list[str]) -> None:
        super().__init__(f"Unknown condition ids: {', '.join(condition_ids)}")
        self.condition_ids = condition_ids


class ReleaseService:
    """CRUD operations for an application's releases."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _resolve_conditions(
        self,
        application_id: str,
        condition_ids: list[str],
    ) -> list[Condition]:
        """Load conditions by id, keeping the requested order.

        Raises:
            UnknownConditionError: If any id is not a condition of the application
        """
        wanted = list(dict.fromkeys(condition_ids))
        if not wanted:
            return []

        result = await self.session.execute(
            select(Condition)
            .where(Condition.application_id == application_id)
            .where(Condition.id.in_(wanted))
        )
        found = {c.id: c for c in result.scalars().all()}
        missing = [cid for cid in wanted if cid not in found]
        if missing:
            raise UnknownConditionError(missing)
        return [found[cid] for cid in wanted]

    async def create(self, application_id: str, data: ReleaseCreate) -> Release:
        conditions = await self._resolve_conditions(application_id, data.condition_ids)
        release = Release(
            application_id=application_id,
            version_name=data.version_name.strip(),
            version_code=data.version_code,
            status=data.status.value,
            conditions=conditions,
        )
        self.session.add(release)
        await self.session.flush()
        return release

    async def list_page(
        self,
        application_id: str,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Release], int]:
        """One page of releases, newest first, with the total count."""
        total = await self.session.scalar(
            select(func.count(Release.id)).where(Release.application_id == application_id)
        )
        result = await self.session.execute(
            select(Release)
            .where(Release.application_id == application_id)
            .order_by(Release.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total or 0

    async def get(self, application_id: str, release_id: str) -> Release:
        """Get one release.

        Raises:
            ReleaseNotFoundError: If it does not exist in the application
        """
        result = await self.session.execute(
            select(Release)
            .where(Release.id == release_id)
            .where(Release.application_id == application_id)
            .execution_options(populate_existing=True)
        )
        release = result.scalar_one_or_none()
        if release is None:
            raise ReleaseNotFoundError(f"Release {release_id} not found")
        return release

    async def update(
        self,
        application_id: str,
        release_id: str,
        data: ReleaseUpdate,
    ) -> Release:
        release = await self.get(application_id, release_id)

        if data.version_name is not None:
            release.version_name = data.version_name.strip()
        if data.version_code is not None:
            release.version_code = data.version_code
        if data.status is not None:
            if data.status.value != release.status:
                logger.info(
                    f"Release {release_id} status {release.status} -> {data.status.value}"
                )
            release.status = data.status.value
        if data.condition_ids is not None:
            release.conditions = await self._resolve_conditions(
                application_id, data.condition_ids
            )

        await self.session.flush()
        return release

    async def delete(self, application_id: str, release_id: str) -> None:
        release = await self.get(application_id, release_id)
        await self.session.delete(release)
        await self.session.flush()
