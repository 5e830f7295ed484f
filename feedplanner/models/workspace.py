"""Workspace ORM model: one client engagement."""
from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedplanner.models.base import Base, TimestampMixin, UUIDMixin


class Workspace(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    social_accounts = relationship("SocialAccount", back_populates="workspace", lazy="noload")
    members = relationship("WorkspaceMember", back_populates="workspace", lazy="noload")
    brand_guidelines = relationship(
        "BrandGuidelines", back_populates="workspace", uselist=False, lazy="noload"
    )
