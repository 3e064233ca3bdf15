"""Release selection.

Finds the single newest ACTIVE release a context qualifies for, and answers
the update check consumed by client devices. Selection is read-only and
keeps no state between calls; the same inputs against unchanged data always
yield the same release.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from app.releases import combinator
from app.releases.combinator import AvailabilityReport
from app.releases.models import EvaluationContext, Release, ReleaseStatus
from app.releases.store import ReleaseStore

logger = logging.getLogger(__name__)

NO_RELEASES_MESSAGE = "No releases available for your context"
UP_TO_DATE_MESSAGE = "Current version is up to date"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class ReleaseNotFoundError(Exception):
    """Release does not exist, belongs to another application, or is not ACTIVE."""

    pass


def _sort_key(release: Release) -> tuple[int, datetime, str]:
    created_at = release.created_at or _EPOCH
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (release.version_number, created_at, release.id)


def order_releases(releases: Iterable[Release]) -> list[Release]:
    """Order releases newest first.

    Version code descending (numeric), then creation time descending, then
    id descending, so duplicate codes resolve the same way on every backend.
    """
    return sorted(releases, key=_sort_key, reverse=True)


@dataclass
class ReleaseEvaluation:
    """Result of evaluating one named release for a context."""

    release: Release
    report: AvailabilityReport
    latest_available: Release | None

    @property
    def is_available(self) -> bool:
        return self.report.available


@dataclass
class UpdateCheckResult:
    """Outcome of a device update check."""

    update_required: bool
    current_version_name: str
    current_version_code: int
    message: str
    latest_release: Release | None = None


class ReleaseSelector:
    """Selects releases for evaluation contexts.

    The storage collaborator is injected; the selector never opens or closes
    it.
    """

    def __init__(self, store: ReleaseStore) -> None:
        self.store = store

    async def select_latest(
        self,
        application_id: str,
        context: EvaluationContext,
    ) -> Release | None:
        """Return the newest ACTIVE release available for a context.

        Args:
            application_id: Owning application
            context: Caller identity tuple

        Returns:
            The first available release in version order, or None
        """
        releases = await self.store.list_active_releases(application_id)
        conditions = await self.store.list_conditions(application_id)

        for release in order_releases(releases):
            if release.status != ReleaseStatus.ACTIVE:
                continue
            if combinator.is_available(release, context, conditions):
                logger.debug(
                    f"Selected release {release.id} ({release.version_code}) "
                    f"for app {application_id}"
                )
                return release

        logger.debug(f"No release available for app {application_id}")
        return None

    async def _get_active_release(
        self, application_id: str, release_id: str
    ) -> Release:
        release = await self.store.get_release(application_id, release_id)
        if release is None:
            raise ReleaseNotFoundError(f"Release {release_id} not found")
        if release.status != ReleaseStatus.ACTIVE:
            raise ReleaseNotFoundError(
                f"Release {release_id} is not active (status={release.status.value})"
            )
        return release

    async def is_specific_release_available(
        self,
        application_id: str,
        release_id: str,
        context: EvaluationContext,
    ) -> bool:
        """Check one named release against a context.

        Raises:
            ReleaseNotFoundError: If the release is missing or not ACTIVE
        """
        release = await self._get_active_release(application_id, release_id)
        conditions = await self.store.list_conditions(application_id)
        return combinator.is_available(release, context, conditions)

    async def evaluate_release(
        self,
        application_id: str,
        release_id: str,
        context: EvaluationContext,
    ) -> ReleaseEvaluation:
        """Explain one named release and show what selection would pick instead.

        Raises:
            ReleaseNotFoundError: If the release is missing or not ACTIVE
        """
        release = await self._get_active_release(application_id, release_id)
        conditions = await self.store.list_conditions(application_id)
        report = combinator.explain(release, context, conditions)
        latest = await self.select_latest(application_id, context)
        return ReleaseEvaluation(
            release=release,
            report=report,
            latest_available=latest,
        )

    async def check_for_update(
        self,
        application_id: str,
        current_version_name: str,
        current_version_code: int,
        context: EvaluationContext,
    ) -> UpdateCheckResult:
        """Decide whether a device must update.

        An update is required only when the newest qualifying release has a
        strictly greater version code than the one the device reports.
        """
        latest = await self.select_latest(application_id, context)

        if latest is None:
            return UpdateCheckResult(
                update_required=False,
                current_version_name=current_version_name,
                current_version_code=current_version_code,
                message=NO_RELEASES_MESSAGE,
            )

        if latest.version_number > current_version_code:
            return UpdateCheckResult(
                update_required=True,
                current_version_name=current_version_name,
                current_version_code=current_version_code,
                message=(
                    f"Update required: {latest.version_name} "
                    f"({latest.version_number}) is available"
                ),
                latest_release=latest,
            )

        return UpdateCheckResult(
            update_required=False,
            current_version_name=current_version_name,
            current_version_code=current_version_code,
            message=UP_TO_DATE_MESSAGE,
        )
