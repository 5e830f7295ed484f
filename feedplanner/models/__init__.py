"""SQLAlchemy ORM models."""
from feedplanner.models.base import Base, JSONType, TimestampMixin, UUIDMixin
from feedplanner.models.user import User
from feedplanner.models.profile import GlobalRole, Profile
from feedplanner.models.workspace import Workspace
from feedplanner.models.workspace_member import CLIENT_WORKSPACE_ROLES, WorkspaceMember, WorkspaceRole
from feedplanner.models.social_account import PLATFORM_LABELS, Platform, SocialAccount
from feedplanner.models.post import STATUS_LABELS, ApprovalStatus, AssetType, Post, PostStatus
from feedplanner.models.comment import Comment
from feedplanner.models.audit_log import AuditAction, AuditLog
from feedplanner.models.brand_guidelines import BrandGuidelines

__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "Profile",
    "GlobalRole",
    "Workspace",
    "WorkspaceMember",
    "WorkspaceRole",
    "CLIENT_WORKSPACE_ROLES",
    "SocialAccount",
    "Platform",
    "PLATFORM_LABELS",
    "Post",
    "PostStatus",
    "ApprovalStatus",
    "AssetType",
    "STATUS_LABELS",
    "Comment",
    "AuditLog",
    "AuditAction",
    "BrandGuidelines",
]
