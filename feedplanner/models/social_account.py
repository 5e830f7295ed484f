"""Social account ORM model and platform display metadata."""
import enum
import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedplanner.models.base import Base, JSONType, TimestampMixin, UUIDMixin, pg_enum


class Platform(str, enum.Enum):
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    FACEBOOK = "facebook"
    YOUTUBE_SHORTS = "youtube_shorts"


# Display-only lookup; no access decision depends on the platform.
PLATFORM_LABELS: dict[Platform, str] = {
    Platform.INSTAGRAM: "Instagram",
    Platform.TIKTOK: "TikTok",
    Platform.FACEBOOK: "Facebook",
    Platform.YOUTUBE_SHORTS: "YouTube Shorts",
}


class SocialAccount(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "social_accounts"

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    platform: Mapped[Platform] = mapped_column(pg_enum(Platform, name="platform"), nullable=False)
    handle: Mapped[str] = mapped_column(String(200), nullable=False)
    assigned_manager_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    collaborator_emails: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    # Relationships
    workspace = relationship("Workspace", back_populates="social_accounts")
    posts = relationship("Post", back_populates="social_account", lazy="noload")
