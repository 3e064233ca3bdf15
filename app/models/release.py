"""Release model and its condition association."""

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin
from app.models.condition import Condition
from app.releases.models import ReleaseStatus

# Association table for many-to-many release-condition relationship
release_conditions = Table(
    "release_conditions",
    Base.metadata,
    Column(
        "release_id",
        UUID(as_uuid=False),
        ForeignKey("releases.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "condition_id",
        UUID(as_uuid=False),
        ForeignKey("conditions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Release(Base, TimestampMixin):
    """Versioned artifact record for one application.

    ``version_code`` is stored as text and compared numerically by the
    evaluation engine.
    """

    __tablename__ = "releases"

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    version_code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReleaseStatus.ACTIVE.value,
        index=True,
    )

    conditions: Mapped[list[Condition]] = relationship(
        Condition,
        secondary=release_conditions,
        lazy="selectin",
    )

    @property
    def condition_ids(self) -> list[str]:
        return [c.id for c in self.conditions]

    def __repr__(self) -> str:
        return f"<Release {self.version_name} ({self.version_code}) {self.status}>"
