"""Initial schema - 9 tables + indexes.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TIMESTAMPED = ["users", "profiles", "workspaces", "social_accounts", "posts", "comments", "brand_guidelines"]


def upgrade() -> None:
    # --- ENUM types ---
    global_role = sa.Enum("admin", "user", name="global_role")
    workspace_role = sa.Enum("account_manager", "client_viewer", "client_approver", name="workspace_role")
    platform = sa.Enum("instagram", "tiktok", "facebook", "youtube_shorts", name="platform")
    post_status = sa.Enum(
        "draft", "internal_review", "sent_to_client", "approved", "ready_to_post", "posted", name="post_status"
    )
    approval_status = sa.Enum("pending", "approved", "changes_requested", name="approval_status")
    audit_action = sa.Enum("status_changed", "approved", "rejected", "posted", name="audit_action")

    def uuid_pk() -> sa.Column:
        return sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()"))

    def timestamps() -> list[sa.Column]:
        return [
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        ]

    # --- 1. users ---
    op.create_table(
        "users",
        uuid_pk(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean, server_default=sa.text("true")),
        *timestamps(),
    )

    # --- 2. profiles ---
    op.create_table(
        "profiles",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("role", global_role, nullable=False, server_default="user"),
        *timestamps(),
    )

    # --- 3. workspaces ---
    op.create_table(
        "workspaces",
        uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), unique=True, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, server_default=sa.text("true")),
        *timestamps(),
    )

    # --- 4. workspace_members ---
    op.create_table(
        "workspace_members",
        uuid_pk(),
        sa.Column("workspace_id", UUID(as_uuid=True), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", workspace_role, nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("workspace_id", "user_id", name="uq_workspace_member"),
    )

    # --- 5. social_accounts ---
    op.create_table(
        "social_accounts",
        uuid_pk(),
        sa.Column("workspace_id", UUID(as_uuid=True), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False),
        sa.Column("platform", platform, nullable=False),
        sa.Column("handle", sa.String(200), nullable=False),
        sa.Column("assigned_manager_email", sa.String(255), nullable=True),
        sa.Column("collaborator_emails", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        *timestamps(),
    )

    # --- 6. posts ---
    op.create_table(
        "posts",
        uuid_pk(),
        sa.Column("workspace_id", UUID(as_uuid=True), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False),
        sa.Column("social_account_id", UUID(as_uuid=True), sa.ForeignKey("social_accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("platform", ENUM(name="platform", create_type=False), nullable=False),
        sa.Column("scheduled_date", sa.Date, nullable=True),
        sa.Column("scheduled_time", sa.Time, nullable=True),
        sa.Column("caption", sa.Text, nullable=False, server_default=""),
        sa.Column("hashtags", sa.Text, nullable=False, server_default=""),
        sa.Column("first_comment", sa.Text, nullable=False, server_default=""),
        sa.Column("internal_notes", sa.Text, nullable=True),
        sa.Column("client_notes", sa.Text, nullable=True),
        sa.Column("asset_urls", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("asset_types", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", post_status, nullable=False, server_default="draft"),
        sa.Column("approval_status", approval_status, nullable=True),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("posted_by", sa.String(255), nullable=True),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.CheckConstraint(
            "jsonb_array_length(asset_urls) = jsonb_array_length(asset_types)", name="ck_posts_parallel_assets"
        ),
        *timestamps(),
    )

    # --- 7. comments ---
    op.create_table(
        "comments",
        uuid_pk(),
        sa.Column("post_id", UUID(as_uuid=True), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("workspace_id", UUID(as_uuid=True), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("author_email", sa.String(255), nullable=True),
        sa.Column("author_name", sa.String(200), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("is_internal", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_resolved", sa.Boolean, nullable=False, server_default=sa.text("false")),
        *timestamps(),
    )

    # --- 8. audit_logs (append-only) ---
    op.create_table(
        "audit_logs",
        uuid_pk(),
        sa.Column("workspace_id", UUID(as_uuid=True), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", UUID(as_uuid=True), nullable=False),
        sa.Column("action", audit_action, nullable=False),
        sa.Column("actor_id", UUID(as_uuid=True), nullable=True),
        sa.Column("actor_email", sa.String(255), nullable=True),
        sa.Column("actor_name", sa.String(200), nullable=True),
        sa.Column("details", JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- 9. brand_guidelines ---
    op.create_table(
        "brand_guidelines",
        uuid_pk(),
        sa.Column("workspace_id", UUID(as_uuid=True), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), unique=True, nullable=False),
        sa.Column("business_description", sa.Text, nullable=True),
        sa.Column("brand_mission", sa.Text, nullable=True),
        sa.Column("target_audience", sa.Text, nullable=True),
        sa.Column("content_pillars", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("tone_of_voice", sa.String(50), nullable=False, server_default="professional"),
        sa.Column("style_keywords", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("primary_colors", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("fonts", sa.String(200), nullable=True),
        sa.Column("do_list", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("dont_list", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("hashtag_strategy", sa.Text, nullable=True),
        sa.Column("posting_frequency", sa.String(200), nullable=True),
        sa.Column("competitor_accounts", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("inspiration_accounts", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("additional_notes", sa.Text, nullable=True),
        *timestamps(),
    )

    # --- Indexes ---
    op.create_index("idx_members_user", "workspace_members", ["user_id", "assigned_at"])
    op.create_index("idx_accounts_workspace", "social_accounts", ["workspace_id"])
    op.create_index("idx_accounts_manager", "social_accounts", ["assigned_manager_email"])
    op.create_index("idx_posts_calendar", "posts", ["workspace_id", "scheduled_date", "order_index"])
    op.create_index("idx_posts_account_status", "posts", ["social_account_id", "status"])
    op.create_index("idx_comments_post", "comments", ["post_id", "created_at"])
    op.create_index("idx_audit_entity", "audit_logs", ["entity_type", "entity_id", "created_at"])

    # updated_at auto-update trigger
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    for table in _TIMESTAMPED:
        op.execute(f"""
            CREATE TRIGGER trigger_update_{table}_updated_at
            BEFORE UPDATE ON {table}
            FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
        """)


def downgrade() -> None:
    for table in _TIMESTAMPED:
        op.execute(f"DROP TRIGGER IF EXISTS trigger_update_{table}_updated_at ON {table}")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    for table in [
        "brand_guidelines", "audit_logs", "comments", "posts", "social_accounts",
        "workspace_members", "workspaces", "profiles", "users",
    ]:
        op.drop_table(table)

    for enum_name in [
        "audit_action", "approval_status", "post_status", "platform", "workspace_role", "global_role",
    ]:
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
