"""Brand guidelines ORM model (at most one per workspace)."""
import uuid

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedplanner.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class BrandGuidelines(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "brand_guidelines"

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    business_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand_mission: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_audience: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_pillars: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    tone_of_voice: Mapped[str] = mapped_column(String(50), nullable=False, default="professional")
    style_keywords: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    primary_colors: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    fonts: Mapped[str | None] = mapped_column(String(200), nullable=True)
    do_list: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    dont_list: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    hashtag_strategy: Mapped[str | None] = mapped_column(Text, nullable=True)
    posting_frequency: Mapped[str | None] = mapped_column(String(200), nullable=True)
    competitor_accounts: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    inspiration_accounts: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    additional_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    workspace = relationship("Workspace", back_populates="brand_guidelines")
