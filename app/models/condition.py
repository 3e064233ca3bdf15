"""Targeting condition model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class Condition(Base, TimestampMixin):
    """Named targeting rule scoped to one application.

    Each rule dimension is stored as a JSON list. Rows written by older
    clients may hold JSON-encoded strings instead of lists; the release
    store normalises both.
    """

    __tablename__ = "conditions"

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    countries: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)
    company_ids: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)
    driver_ids: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)
    vehicle_ids: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)

    def __repr__(self) -> str:
        return f"<Condition {self.name} ({self.application_id})>"
