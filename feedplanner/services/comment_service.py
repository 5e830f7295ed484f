"""Post comment business logic."""
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.exceptions import AuthorizationDenied, NotFound
from feedplanner.models.comment import Comment
from feedplanner.models.post import Post
from feedplanner.schemas.comment import CommentCreate
from feedplanner.services.comment_gate import can_post_comment, can_resolve, resolve_is_internal
from feedplanner.services.role_engine import AccessContext
from feedplanner.services.visibility import filter_comments
from feedplanner.utils.helpers import utc_now

logger = structlog.get_logger()


async def list_comments(db: AsyncSession, access: AccessContext, post: Post) -> list[Comment]:
    """Comments on a post the caller is already allowed to see, oldest first."""
    result = await db.execute(
        select(Comment).where(Comment.post_id == post.id).order_by(Comment.created_at, Comment.id)
    )
    return filter_comments(result.scalars().all(), access.role, access.facts)


async def create_comment(
    db: AsyncSession, access: AccessContext, post: Post, data: CommentCreate
) -> Comment:
    actor = access.facts.actor
    if actor is None or not can_post_comment(access.role):
        raise AuthorizationDenied("You cannot comment on this post")

    comment = Comment(
        post_id=post.id,
        workspace_id=post.workspace_id,
        author_id=actor.id,
        author_email=actor.email,
        author_name=actor.display_name,
        content=data.content.strip(),
        is_internal=resolve_is_internal(access.role, data.is_internal),
        is_resolved=False,
        created_at=utc_now(),
    )
    db.add(comment)
    await db.flush()
    await db.refresh(comment)
    return comment


async def resolve_comment(
    db: AsyncSession, access: AccessContext, post: Post, comment_id: uuid.UUID
) -> Comment:
    """Mark a comment resolved. Resolution is one-way; repeating it changes nothing."""
    if not can_resolve(access.role):
        raise AuthorizationDenied("Only account managers and admins can resolve comments")
    comment = await db.get(Comment, comment_id)
    if comment is None or comment.post_id != post.id:
        raise NotFound("Comment not found")
    if not comment.is_resolved:
        comment.is_resolved = True
        await db.flush()
        await db.refresh(comment)
        logger.info("comment_resolved", comment_id=str(comment.id), post_id=str(post.id))
    return comment
