"""Workspace membership model."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedplanner.models.base import Base, UUIDMixin, pg_enum


class WorkspaceRole(str, enum.Enum):
    ACCOUNT_MANAGER = "account_manager"
    CLIENT_VIEWER = "client_viewer"
    CLIENT_APPROVER = "client_approver"


CLIENT_WORKSPACE_ROLES = frozenset({WorkspaceRole.CLIENT_VIEWER, WorkspaceRole.CLIENT_APPROVER})


class WorkspaceMember(Base, UUIDMixin):
    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id", name="uq_workspace_member"),)

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[WorkspaceRole] = mapped_column(
        pg_enum(WorkspaceRole, name="workspace_role"), nullable=False
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="memberships")
    workspace = relationship("Workspace", back_populates="members")
