"""Read-only storage interface required by the evaluation engine.

Backends convert whatever they persist into the dataclasses from
``app.releases.models``; the engine never sees raw rows.
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable

from app.releases.models import Condition, Release, ReleaseStatus


class ReleaseStore(ABC):
    """Abstract base class for release/condition storage backends."""

    @abstractmethod
    async def list_active_releases(self, application_id: str) -> list[Release]:
        """Return every ACTIVE release of an application, in any order."""
        pass

    @abstractmethod
    async def get_release(
        self, application_id: str, release_id: str
    ) -> Release | None:
        """Return one release of an application, or None if it does not exist."""
        pass

    @abstractmethod
    async def list_conditions(self, application_id: str) -> list[Condition]:
        """Return every condition of an application."""
        pass

    @abstractmethod
    async def get_condition(
        self, application_id: str, condition_id: str
    ) -> Condition | None:
        """Return one condition of an application, or None if it does not exist."""
        pass


class InMemoryReleaseStore(ReleaseStore):
    """Dictionary-backed store.

    Used by tests and by the ``memory`` backend. Records are immutable
    dataclasses, so handing them out without copying is safe.
    """

    def __init__(
        self,
        releases: Iterable[Release] = (),
        conditions: Iterable[Condition] = (),
    ) -> None:
        self._releases: dict[str, Release] = {}
        self._conditions: dict[str, Condition] = {}
        for release in releases:
            self.put_release(release)
        for condition in conditions:
            self.put_condition(condition)

    def put_release(self, release: Release) -> None:
        self._releases[release.id] = release

    def put_condition(self, condition: Condition) -> None:
        self._conditions[condition.id] = condition

    def delete_release(self, release_id: str) -> None:
        self._releases.pop(release_id, None)

    def delete_condition(self, condition_id: str) -> None:
        """Delete a condition and drop it from every release that references it."""
        if self._conditions.pop(condition_id, None) is None:
            return
        for release in list(self._releases.values()):
            if condition_id in release.condition_ids:
                self._releases[release.id] = replace(
                    release,
                    condition_ids=tuple(
                        cid for cid in release.condition_ids if cid != condition_id
                    ),
                )

    async def list_active_releases(self, application_id: str) -> list[Release]:
        return [
            r
            for r in self._releases.values()
            if r.application_id == application_id and r.status == ReleaseStatus.ACTIVE
        ]

    async def get_release(
        self, application_id: str, release_id: str
    ) -> Release | None:
        release = self._releases.get(release_id)
        if release is None or release.application_id != application_id:
            return None
        return release

    async def list_conditions(self, application_id: str) -> list[Condition]:
        return [
            c for c in self._conditions.values() if c.application_id == application_id
        ]

    async def get_condition(
        self, application_id: str, condition_id: str
    ) -> Condition | None:
        condition = self._conditions.get(condition_id)
        if condition is None or condition.application_id != application_id:
            return None
        return condition
