"""Application and membership models."""

from enum import Enum

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class MemberRole(str, Enum):
    """Role of a user within one application."""

    ADMIN = "admin"
    USER = "user"


class Application(Base, TimestampMixin):
    """A mobile/web application whose releases are managed here."""

    __tablename__ = "applications"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    package_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    members: Mapped[list["ApplicationMember"]] = relationship(
        "ApplicationMember",
        back_populates="application",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Application {self.package_name}>"


class ApplicationMember(Base, TimestampMixin):
    """Grants a user access to an application."""

    __tablename__ = "application_members"
    __table_args__ = (
        UniqueConstraint("application_id", "user_id", name="application_user"),
    )

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MemberRole.USER.value,
    )

    application: Mapped["Application"] = relationship(
        "Application",
        back_populates="members",
    )
    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="memberships",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<ApplicationMember {self.user_id} in {self.application_id} ({self.role})>"
