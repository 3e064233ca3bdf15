"""Release store backends for the evaluation engine.

The SQL backend reads ORM rows through an ``AsyncSession`` and converts
them into the engine's dataclasses. Rule columns are normalised here, so
the combinator only ever sees canonical ``RuleSet`` values.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.condition import Condition as ConditionRow
from app.models.release import Release as ReleaseRow
from app.releases.loader import load_snapshot
from app.releases.models import Condition, Release, ReleaseStatus, RuleSet
from app.releases.store import InMemoryReleaseStore, ReleaseStore

logger = logging.getLogger(__name__)


def condition_from_row(row: ConditionRow) -> Condition:
    """Adapt a condition row to the engine's Condition."""
    return Condition(
        id=row.id,
        application_id=row.application_id,
        name=row.name,
        rules=RuleSet.from_raw(
            countries=row.countries,
            company_ids=row.company_ids,
            driver_ids=row.driver_ids,
            vehicle_ids=row.vehicle_ids,
        ),
        created_at=row.created_at,
    )


def release_from_row(row: ReleaseRow) -> Release:
    """Adapt a release row to the engine's Release.

    Unknown status strings map to ARCHIVED so they are never selected.
    """
    try:
        status = ReleaseStatus(str(row.status).lower())
    except ValueError:
        logger.warning(f"Release {row.id} has unknown status {row.status!r}")
        status = ReleaseStatus.ARCHIVED

    return Release(
        id=row.id,
        application_id=row.application_id,
        version_name=row.version_name,
        version_code=row.version_code,
        status=status,
        condition_ids=tuple(row.condition_ids),
        created_at=row.created_at,
    )


class SqlReleaseStore(ReleaseStore):
    """Relational backend over the ORM models."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_active_releases(self, application_id: str) -> list[Release]:
        result = await self.session.execute(
            select(ReleaseRow)
            .where(ReleaseRow.application_id == application_id)
            .where(ReleaseRow.status == ReleaseStatus.ACTIVE.value)
            .execution_options(populate_existing=True)
        )
        return [release_from_row(row) for row in result.scalars().all()]

    async def get_release(
        self, application_id: str, release_id: str
    ) -> Release | None:
        result = await self.session.execute(
            select(ReleaseRow)
            .where(ReleaseRow.id == release_id)
            .where(ReleaseRow.application_id == application_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return release_from_row(row) if row else None

    async def list_conditions(self, application_id: str) -> list[Condition]:
        result = await self.session.execute(
            select(ConditionRow)
            .where(ConditionRow.application_id == application_id)
            .execution_options(populate_existing=True)
        )
        return [condition_from_row(row) for row in result.scalars().all()]

    async def get_condition(
        self, application_id: str, condition_id: str
    ) -> Condition | None:
        result = await self.session.execute(
            select(ConditionRow)
            .where(ConditionRow.id == condition_id)
            .where(ConditionRow.application_id == application_id)
        )
        row = result.scalar_one_or_none()
        return condition_from_row(row) if row else None


def load_memory_store() -> InMemoryReleaseStore:
    """Build the memory backend from the configured snapshot, if any."""
    if not settings.release_snapshot_path:
        logger.warning("Memory release store started without a snapshot; it is empty")
        return InMemoryReleaseStore()

    store, snapshot_hash = load_snapshot(settings.release_snapshot_path)
    logger.info(
        f"Loaded release snapshot {settings.release_snapshot_path} (sha256={snapshot_hash})"
    )
    return store


def get_release_store_backend(
    session: AsyncSession,
    memory_store: InMemoryReleaseStore | None = None,
) -> ReleaseStore:
    """Get configured release store backend.

    Returns SqlReleaseStore by default, or the process-wide memory store
    when ``release_store_backend`` is ``memory``.
    """
    if settings.release_store_backend == "memory":
        if memory_store is None:
            raise RuntimeError("Memory release store has not been initialised")
        return memory_store
    return SqlReleaseStore(session)
