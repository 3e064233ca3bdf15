"""Audit event service for append-only audit logging."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import audit_logger
from app.models.audit_event import ActorType, AuditEvent
from app.models.user import User
from app.schemas.audit_event import AuditEventFilter


async def write_audit_event(
    session: AsyncSession,
    actor: User | None,
    action: str,
    entity_type: str,
    entity_id: str | None,
    application_id: str | None = None,
    metadata: dict[str, Any] | None = None,
    description: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """Write an audit event to the database.

    Events are append-only and cannot be modified or deleted. Any pending
    changes in the session are committed together with the event.

    Args:
        session: Database session
        actor: User performing the action, or None for system actions
        action: Action performed (e.g., "release.create", "condition.delete")
        entity_type: Type of entity affected (e.g., "release")
        entity_id: ID of the affected entity
        application_id: Application the entity belongs to
        metadata: Additional context as JSON
        description: Human-readable description
        ip_address: Client IP address
        user_agent: Client user agent string
        request_id: Request correlation ID

    Returns:
        Created AuditEvent instance
    """
    event = AuditEvent(
        actor_type=ActorType.USER if actor else ActorType.SYSTEM,
        actor_id=actor.id if actor else None,
        actor_email=actor.email if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        application_id=application_id,
        event_metadata=metadata,
        description=description,
        ip_address=ip_address,
        user_agent=user_agent,
        request_id=request_id,
    )

    session.add(event)
    await session.commit()
    await session.refresh(event)

    audit_logger.log(
        action=action,
        actor_id=actor.id if actor else "system",
        entity_type=entity_type,
        entity_id=entity_id or "none",
        application_id=application_id,
        metadata=metadata,
    )

    return event


class AuditService:
    """Service for querying audit events.

    Note: This service only provides read operations.
    Audit events are created via write_audit_event() function.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_events(
        self,
        application_id: str,
        filters: AuditEventFilter,
    ) -> list[AuditEvent]:
        """Query an application's audit events, newest first.

        Args:
            application_id: Application to query
            filters: Filter parameters

        Returns:
            List of matching audit events
        """
        query = (
            select(AuditEvent)
            .where(AuditEvent.application_id == application_id)
            .order_by(AuditEvent.created_at.desc())
        )

        if filters.entity_id:
            query = query.where(AuditEvent.entity_id == filters.entity_id)
        if filters.entity_type:
            query = query.where(AuditEvent.entity_type == filters.entity_type)
        if filters.actor_id:
            query = query.where(AuditEvent.actor_id == filters.actor_id)
        if filters.action:
            query = query.where(AuditEvent.action == filters.action)

        query = query.offset(filters.offset).limit(filters.limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
