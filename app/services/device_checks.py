"""Device check activity sink."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.device_check import DeviceCheck
from app.releases.selector import UpdateCheckResult
from app.schemas.device_check import DeviceCheckFilter
from app.schemas.release_check import ReleaseCheckRequest

logger = logging.getLogger(__name__)


async def record_device_check(
    session: AsyncSession,
    request: ReleaseCheckRequest,
    result: UpdateCheckResult,
) -> DeviceCheck:
    """Persist one update check with its raw context and outcome.

    Args:
        session: Database session
        request: Validated check request
        result: Outcome returned to the device

    Returns:
        Created DeviceCheck instance
    """
    check = DeviceCheck(
        application_id=str(request.app_id),
        country=request.country,
        company_id=request.company_id,
        driver_id=request.driver_id,
        vehicle_id=request.vehicle_id,
        company_ref=request.company_ref,
        driver_ref=request.driver_ref,
        vehicle_ref=request.vehicle_ref,
        version_name=request.version_name,
        version_code=request.version_code,
        update_required=result.update_required,
        latest_release_id=result.latest_release.id if result.latest_release else None,
    )
    session.add(check)
    await session.commit()
    return check


class DeviceCheckService:
    """Read access to recorded device checks."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_checks(
        self,
        application_id: str,
        filters: DeviceCheckFilter,
    ) -> list[DeviceCheck]:
        """Recorded checks for an application, newest first."""
        query = (
            select(DeviceCheck)
            .where(DeviceCheck.application_id == application_id)
            .order_by(DeviceCheck.created_at.desc())
        )

        if filters.driver_id:
            query = query.where(DeviceCheck.driver_id == filters.driver_id)
        if filters.vehicle_id:
            query = query.where(DeviceCheck.vehicle_id == filters.vehicle_id)
        if filters.update_required is not None:
            query = query.where(DeviceCheck.update_required.is_(filters.update_required))

        query = query.offset(filters.offset).limit(filters.limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
