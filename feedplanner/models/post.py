"""Post ORM model."""
import enum
import uuid
from datetime import date, datetime, time

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedplanner.models.base import Base, JSONType, TimestampMixin, UUIDMixin, pg_enum
from feedplanner.models.social_account import Platform


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    INTERNAL_REVIEW = "internal_review"
    SENT_TO_CLIENT = "sent_to_client"
    APPROVED = "approved"
    READY_TO_POST = "ready_to_post"
    POSTED = "posted"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"


class AssetType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


STATUS_LABELS: dict[PostStatus, str] = {
    PostStatus.DRAFT: "Draft",
    PostStatus.INTERNAL_REVIEW: "Internal Review",
    PostStatus.SENT_TO_CLIENT: "Awaiting Approval",
    PostStatus.APPROVED: "Approved",
    PostStatus.READY_TO_POST: "Ready to Post",
    PostStatus.POSTED: "Posted",
}


class Post(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "posts"

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    social_account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("social_accounts.id", ondelete="CASCADE"), nullable=False
    )
    platform: Mapped[Platform] = mapped_column(
        pg_enum(Platform, name="platform"), nullable=False
    )
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    scheduled_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    caption: Mapped[str] = mapped_column(Text, nullable=False, default="")
    hashtags: Mapped[str] = mapped_column(Text, nullable=False, default="")
    first_comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Parallel sequences: asset_types[i] describes asset_urls[i].
    asset_urls: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    asset_types: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[PostStatus] = mapped_column(
        pg_enum(PostStatus, name="post_status"), nullable=False, default=PostStatus.DRAFT
    )
    approval_status: Mapped[ApprovalStatus | None] = mapped_column(
        pg_enum(ApprovalStatus, name="approval_status"), nullable=True
    )
    approved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    posted_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    posted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    social_account = relationship("SocialAccount", back_populates="posts")
    comments = relationship("Comment", back_populates="post", lazy="noload", passive_deletes=True)
