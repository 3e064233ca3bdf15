"""Condition management service."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.condition import Condition
from app.models.release import release_conditions
from app.releases.models import RuleSet
from app.schemas.condition import BOTH_AXES_MESSAGE, ConditionCreate, ConditionUpdate

logger = logging.getLogger(__name__)


class ConditionNotFoundError(Exception):
    """Raised when a condition does not exist in the application."""

    pass


class ConditionValidationError(Exception):
    """Raised when an update would leave a condition in an invalid state."""

    pass


class ConditionService:
    """CRUD operations for an application's conditions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, application_id: str, data: ConditionCreate) -> Condition:
        condition = Condition(
            application_id=application_id,
            name=data.name,
            countries=data.countries,
            company_ids=data.company_ids,
            driver_ids=data.driver_ids,
            vehicle_ids=data.vehicle_ids,
        )
        self.session.add(condition)
        await self.session.flush()
        return condition

    async def list_conditions(self, application_id: str) -> list[Condition]:
        """All conditions of an application, newest first."""
        result = await self.session.execute(
            select(Condition)
            .where(Condition.application_id == application_id)
            .order_by(Condition.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, application_id: str, condition_id: str) -> Condition:
        """Get one condition.

        Raises:
            ConditionNotFoundError: If it does not exist in the application
        """
        result = await self.session.execute(
            select(Condition)
            .where(Condition.id == condition_id)
            .where(Condition.application_id == application_id)
        )
        condition = result.scalar_one_or_none()
        if condition is None:
            raise ConditionNotFoundError(f"Condition {condition_id} not found")
        return condition

    async def update(
        self,
        application_id: str,
        condition_id: str,
        data: ConditionUpdate,
    ) -> Condition:
        """Update name and/or rules in place.

        Raises:
            ConditionNotFoundError: If it does not exist in the application
            ConditionValidationError: If the result would target both drivers and vehicles
        """
        condition = await self.get(application_id, condition_id)
        current = RuleSet.from_raw(
            countries=condition.countries,
            company_ids=condition.company_ids,
            driver_ids=condition.driver_ids,
            vehicle_ids=condition.vehicle_ids,
        )

        driver_ids = data.driver_ids if data.driver_ids is not None else sorted(current.driver_ids)
        vehicle_ids = (
            data.vehicle_ids if data.vehicle_ids is not None else sorted(current.vehicle_ids)
        )
        if driver_ids and vehicle_ids:
            raise ConditionValidationError(BOTH_AXES_MESSAGE)

        if data.name is not None:
            condition.name = data.name
        if data.countries is not None:
            condition.countries = data.countries
        if data.company_ids is not None:
            condition.company_ids = data.company_ids
        condition.driver_ids = driver_ids
        condition.vehicle_ids = vehicle_ids

        await self.session.flush()
        return condition

    async def delete(self, application_id: str, condition_id: str) -> list[str]:
        """Delete a condition and detach it from every release.

        Returns:
            Ids of the releases that referenced the condition
        """
        condition = await self.get(application_id, condition_id)

        result = await self.session.execute(
            select(release_conditions.c.release_id).where(
                release_conditions.c.condition_id == condition_id
            )
        )
        release_ids = [row[0] for row in result.all()]

        await self.session.execute(
            delete(release_conditions).where(release_conditions.c.condition_id == condition_id)
        )
        await self.session.delete(condition)
        await self.session.flush()

        if release_ids:
            logger.info(
                f"Detached condition {condition_id} from releases {release_ids} before deletion"
            )
        return release_ids
