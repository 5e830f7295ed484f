"""Post comments API."""
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.dependencies import get_access, get_db
from feedplanner.schemas.comment import CommentCreate, CommentResponse
from feedplanner.schemas.common import APIResponse
from feedplanner.services import comment_service, post_service
from feedplanner.services.role_engine import AccessContext

router = APIRouter()


# GET /posts/{id}/comments
@router.get("/{post_id}/comments", response_model=APIResponse)
async def list_comments(
    post_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    comments = await comment_service.list_comments(db, access, post)
    return APIResponse(
        status="success",
        data=[CommentResponse.model_validate(c).model_dump() for c in comments],
    )


# POST /posts/{id}/comments
@router.post("/{post_id}/comments", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: uuid.UUID,
    body: CommentCreate,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    comment = await comment_service.create_comment(db, access, post, body)
    return APIResponse(
        status="success",
        data=CommentResponse.model_validate(comment).model_dump(),
        message="Comment added",
    )


# POST /posts/{id}/comments/{comment_id}/resolve — account manager, admin
@router.post("/{post_id}/comments/{comment_id}/resolve", response_model=APIResponse)
async def resolve_comment(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    comment = await comment_service.resolve_comment(db, access, post, comment_id)
    return APIResponse(
        status="success",
        data=CommentResponse.model_validate(comment).model_dump(),
        message="Comment resolved",
    )
