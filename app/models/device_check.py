"""Device check activity model."""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class DeviceCheck(Base, TimestampMixin):
    """One update check reported by a client device.

    Records the raw context exactly as received. Rows are written for
    activity tracking only and are never read by the evaluation engine.
    """

    __tablename__ = "device_checks"

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Context as reported
    country: Mapped[str] = mapped_column(String(10), nullable=False)
    company_id: Mapped[int] = mapped_column(Integer, nullable=False)
    driver_id: Mapped[str] = mapped_column(String(100), nullable=False)
    vehicle_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # Opaque references, logged but never matched against
    company_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    driver_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vehicle_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Installed version
    version_name: Mapped[str] = mapped_column(String(100), nullable=False)
    version_code: Mapped[int] = mapped_column(Integer, nullable=False)

    # Outcome
    update_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    latest_release_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<DeviceCheck {self.driver_id}/{self.vehicle_id} "
            f"v{self.version_code} update={self.update_required}>"
        )
