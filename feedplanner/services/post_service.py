"""Post business logic: visibility-checked CRUD and persisted workflow transitions."""
import uuid
from typing import Callable

import structlog
from sqlalchemy import false, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.config import settings
from feedplanner.exceptions import AuthorizationDenied, NotFound, PreconditionFailed
from feedplanner.middleware.metrics import record_transition
from feedplanner.models.audit_log import AuditLog
from feedplanner.models.comment import Comment
from feedplanner.models.post import AssetType, Post, PostStatus
from feedplanner.models.social_account import SocialAccount
from feedplanner.schemas.common import PaginationMeta
from feedplanner.schemas.post import (
    ApprovalStateResponse,
    PostCreate,
    PostFilter,
    PostResponse,
    PostUpdate,
    UploadUrlResponse,
)
from feedplanner.services import approval_workflow as workflow
from feedplanner.services import assets
from feedplanner.services.role_engine import AccessContext
from feedplanner.services.visibility import can_view_post, filter_posts
from feedplanner.utils.helpers import utc_now

logger = structlog.get_logger()


def _require_staff(access: AccessContext) -> None:
    if not access.is_account_manager():
        raise AuthorizationDenied("Only account managers and admins can do this")


def to_response(post: Post, access: AccessContext) -> dict:
    data = PostResponse.model_validate(post).model_dump()
    if access.is_client():
        data["internal_notes"] = None
    return data


# --- Reads ---

def _scope_to_visible(query, access: AccessContext):
    """Narrow a post query in SQL to what ``can_view_post`` would allow."""
    if access.is_admin():
        return query
    if access.is_account_manager():
        return query.where(Post.social_account_id.in_(list(access.facts.visible_account_ids)))
    workspace_id = access.client_workspace_id()
    if workspace_id is None:
        return query.where(false())
    return query.where(Post.workspace_id == workspace_id, Post.status != PostStatus.DRAFT)


async def list_posts(
    db: AsyncSession, access: AccessContext, filters: PostFilter,
) -> tuple[list[Post], PaginationMeta]:
    query = _scope_to_visible(select(Post), access)
    if filters.workspace_id:
        query = query.where(Post.workspace_id == filters.workspace_id)
    if filters.social_account_id:
        query = query.where(Post.social_account_id == filters.social_account_id)
    if filters.status:
        query = query.where(Post.status == filters.status)
    if filters.date_from:
        query = query.where(Post.scheduled_date >= filters.date_from)
    if filters.date_to:
        query = query.where(Post.scheduled_date <= filters.date_to)

    count_q = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_q)).scalar() or 0

    offset = (filters.page - 1) * filters.per_page
    query = query.order_by(
        Post.scheduled_date, Post.scheduled_time, Post.order_index, Post.created_at, Post.id
    ).offset(offset).limit(filters.per_page)
    result = await db.execute(query)
    window = filter_posts(result.scalars().all(), access.role, access.facts)

    meta = PaginationMeta(
        total=total,
        page=filters.page,
        per_page=filters.per_page,
        has_next=offset + filters.per_page < total,
    )
    return window, meta



async def get_visible_post(db: AsyncSession, access: AccessContext, post_id: uuid.UUID) -> Post:
    """Fetch a post, reporting invisible posts as missing."""
    post = await db.get(Post, post_id)
    if post is None or not can_view_post(post, access.role, access.facts):
        raise NotFound("Post not found")
    return post


# --- Writes ---

async def create_post(db: AsyncSession, access: AccessContext, data: PostCreate) -> Post:
    _require_staff(access)
    account = await db.get(SocialAccount, data.social_account_id)
    if account is None:
        raise NotFound("Social account not found")
    if not access.is_admin() and account.id not in access.facts.visible_account_ids:
        raise AuthorizationDenied("Social account is not assigned to you")

    asset_types = [t.value for t in data.asset_types]
    assets.check_assets(data.asset_urls, asset_types)

    post = Post(
        workspace_id=account.workspace_id,
        social_account_id=account.id,
        platform=account.platform,
        scheduled_date=data.scheduled_date,
        scheduled_time=data.scheduled_time,
        caption=data.caption,
        hashtags=data.hashtags,
        first_comment=data.first_comment,
        internal_notes=data.internal_notes,
        client_notes=data.client_notes,
        asset_urls=list(data.asset_urls),
        asset_types=asset_types,
        order_index=data.order_index,
        status=PostStatus.DRAFT,
        created_by=access.facts.actor.id,
    )
    db.add(post)
    await db.flush()
    await db.refresh(post)
    logger.info("post_created", post_id=str(post.id), workspace_id=str(post.workspace_id))
    return post


async def update_post(db: AsyncSession, access: AccessContext, post: Post, data: PostUpdate) -> Post:
    _require_staff(access)
    workflow.ensure_editable(post)

    update_data = data.model_dump(exclude_unset=True)
    if "asset_types" in update_data:
        update_data["asset_types"] = [AssetType(t).value for t in update_data["asset_types"]]
        assets.check_assets(update_data["asset_urls"], update_data["asset_types"])
    for key, value in update_data.items():
        setattr(post, key, value)

    await db.flush()
    await db.refresh(post)
    return post


async def delete_post(db: AsyncSession, access: AccessContext, post: Post) -> None:
    if not access.is_admin():
        raise AuthorizationDenied("Only admins can delete posts")
    await db.delete(post)
    await db.flush()
    logger.info("post_deleted", post_id=str(post.id), actor=access.facts.actor.email)


# --- Workflow ---

async def apply_outcome(db: AsyncSession, post: Post, outcome: workflow.TransitionOutcome) -> Post:
    """Persist a transition only if the post is still in the state it was checked against."""
    stmt = (
        update(Post)
        .where(
            Post.id == outcome.post_id,
            Post.status == outcome.expected_status,
            Post.approval_status.is_not_distinct_from(outcome.expected_approval_status),
        )
        .values(**outcome.changes)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        raise PreconditionFailed("Post was changed by someone else; reload and try again")

    now = utc_now()
    db.add(AuditLog(**outcome.audit.model_dump(), created_at=now))
    if outcome.comment is not None:
        db.add(Comment(**outcome.comment.model_dump(), created_at=now))
    await db.flush()
    await db.refresh(post)
    return post


async def transition_post(
    db: AsyncSession,
    access: AccessContext,
    post: Post,
    action: str,
    decide: Callable[[], workflow.TransitionOutcome],
) -> Post:
    """Run a workflow decision for ``post`` and persist its outcome.

    Rejections propagate unchanged; nothing is written for them.
    """
    log = logger.bind(post_id=str(post.id), action=action, role=access.role.value)
    try:
        outcome = decide()
        post = await apply_outcome(db, post, outcome)
    except AuthorizationDenied as exc:
        record_transition(action, "denied")
        log.warning("post_transition_rejected", reason=exc.detail, status=exc.status_code)
        raise
    except PreconditionFailed as exc:
        record_transition(action, "conflict")
        log.warning("post_transition_rejected", reason=exc.detail, status=exc.status_code)
        raise

    record_transition(action, "applied")
    log.info("post_transition", status=post.status.value, approval_status=_value(post.approval_status))
    return post


def _value(enum_value) -> str | None:
    return enum_value.value if enum_value is not None else None


async def change_status(db: AsyncSession, access: AccessContext, post: Post, target: PostStatus) -> Post:
    return await transition_post(
        db, access, post, "change_status", lambda: workflow.change_status(post, target, access)
    )


async def approve(db: AsyncSession, access: AccessContext, post: Post) -> Post:
    return await transition_post(db, access, post, "approve", lambda: workflow.approve(post, access))


async def request_changes(db: AsyncSession, access: AccessContext, post: Post, reason: str | None) -> Post:
    return await transition_post(
        db, access, post, "request_changes", lambda: workflow.request_changes(post, access, reason)
    )


async def mark_posted(db: AsyncSession, access: AccessContext, post: Post) -> Post:
    return await transition_post(db, access, post, "mark_posted", lambda: workflow.mark_posted(post, access))


def approval_state(post: Post, access: AccessContext) -> ApprovalStateResponse:
    return ApprovalStateResponse(
        post_id=post.id,
        status=post.status,
        approval_status=post.approval_status,
        display=workflow.approval_display(post, access.role),
        allowed_status_targets=workflow.allowed_targets(post, access.role),
    )


# --- Assets ---

def generate_upload_url(access: AccessContext, post: Post, filename: str, content_type: str) -> UploadUrlResponse:
    _require_staff(access)
    workflow.ensure_editable(post)
    path = assets.build_storage_path(post.workspace_id, post.social_account_id, filename)
    base = settings.STORAGE_PUBLIC_URL.rstrip("/")
    bucket = settings.STORAGE_BUCKET
    return UploadUrlResponse(
        upload_url=f"{base}/storage/v1/object/{bucket}/{path}",
        storage_path=path,
        public_url=f"{base}/storage/v1/object/public/{bucket}/{path}",
        asset_type=assets.asset_type_for_mime(content_type),
    )


async def add_asset(
    db: AsyncSession, access: AccessContext, post: Post, url: str, asset_type: AssetType
) -> Post:
    _require_staff(access)
    workflow.ensure_editable(post)
    post.asset_urls, post.asset_types = assets.append_asset(
        list(post.asset_urls), list(post.asset_types), url, asset_type
    )
    await db.flush()
    await db.refresh(post)
    return post


async def remove_asset(db: AsyncSession, access: AccessContext, post: Post, index: int) -> Post:
    _require_staff(access)
    workflow.ensure_editable(post)
    post.asset_urls, post.asset_types = assets.remove_asset(
        list(post.asset_urls), list(post.asset_types), index
    )
    await db.flush()
    await db.refresh(post)
    return post


async def move_asset(
    db: AsyncSession, access: AccessContext, post: Post, from_index: int, to_index: int
) -> Post:
    _require_staff(access)
    workflow.ensure_editable(post)
    post.asset_urls, post.asset_types = assets.move_asset(
        list(post.asset_urls), list(post.asset_types), from_index, to_index
    )
    await db.flush()
    await db.refresh(post)
    return post


async def list_audit_logs(db: AsyncSession, access: AccessContext, post: Post) -> list[AuditLog]:
    _require_staff(access)
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.entity_type == "post", AuditLog.entity_id == post.id)
        .order_by(AuditLog.created_at, AuditLog.id)
    )
    return list(result.scalars().all())
