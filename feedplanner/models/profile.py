"""Profile ORM model: one per user, carries the global role."""
import enum
import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedplanner.models.base import Base, TimestampMixin, pg_enum


class GlobalRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[GlobalRole] = mapped_column(
        pg_enum(GlobalRole, name="global_role"), nullable=False, default=GlobalRole.USER
    )

    # Relationships
    user = relationship("User", back_populates="profile")
