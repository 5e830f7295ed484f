"""Posts API: CRUD, approval workflow, assets and audit history."""
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.dependencies import get_access, get_db, require_role
from feedplanner.models.post import PostStatus
from feedplanner.schemas.common import APIResponse
from feedplanner.schemas.post import (
    AssetAddRequest,
    AssetMoveRequest,
    AuditLogResponse,
    PostCreate,
    PostFilter,
    PostUpdate,
    RequestChangesRequest,
    StatusChangeRequest,
    UploadUrlRequest,
)
from feedplanner.services import post_service
from feedplanner.services.assets import asset_type_for_mime
from feedplanner.services.role_engine import AccessContext, EffectiveRole

router = APIRouter()

_STAFF = (EffectiveRole.ADMIN, EffectiveRole.ACCOUNT_MANAGER)


# GET /posts
@router.get("", response_model=APIResponse)
async def list_posts(
    workspace_id: uuid.UUID | None = None,
    social_account_id: uuid.UUID | None = None,
    status_filter: PostStatus | None = Query(None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    filters = PostFilter(
        workspace_id=workspace_id, social_account_id=social_account_id, status=status_filter,
        date_from=date_from, date_to=date_to, page=page, per_page=per_page,
    )
    posts, pagination = await post_service.list_posts(db, access, filters)
    return APIResponse(
        status="success",
        data=[post_service.to_response(p, access) for p in posts],
        pagination=pagination,
    )


# POST /posts — account manager, admin
@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: PostCreate,
    access: AccessContext = require_role(*_STAFF),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.create_post(db, access, body)
    return APIResponse(status="success", data=post_service.to_response(post, access), message="Post created")


# GET /posts/{id}
@router.get("/{post_id}", response_model=APIResponse)
async def get_post(
    post_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    return APIResponse(status="success", data=post_service.to_response(post, access))


# PUT /posts/{id} — account manager, admin (editable statuses only)
@router.put("/{post_id}", response_model=APIResponse)
async def update_post(
    post_id: uuid.UUID,
    body: PostUpdate,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.update_post(db, access, post, body)
    return APIResponse(status="success", data=post_service.to_response(post, access))


# DELETE /posts/{id} — admin only
@router.delete("/{post_id}", response_model=APIResponse)
async def delete_post(
    post_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    await post_service.delete_post(db, access, post)
    return APIResponse(status="success", message="Post deleted")


# PATCH /posts/{id}/status — account manager, admin
@router.patch("/{post_id}/status", response_model=APIResponse)
async def change_status(
    post_id: uuid.UUID,
    body: StatusChangeRequest,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.change_status(db, access, post, body.to_status)
    return APIResponse(
        status="success",
        data=post_service.to_response(post, access),
        message=f"Status changed to {body.to_status.value}",
    )


# POST /posts/{id}/approve — client approver, admin
@router.post("/{post_id}/approve", response_model=APIResponse)
async def approve_post(
    post_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.approve(db, access, post)
    return APIResponse(status="success", data=post_service.to_response(post, access), message="Post approved")


# POST /posts/{id}/request-changes — client approver, admin
@router.post("/{post_id}/request-changes", response_model=APIResponse)
async def request_changes(
    post_id: uuid.UUID,
    body: RequestChangesRequest,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.request_changes(db, access, post, body.reason)
    return APIResponse(status="success", data=post_service.to_response(post, access), message="Changes requested")


# POST /posts/{id}/mark-posted — account manager, admin
@router.post("/{post_id}/mark-posted", response_model=APIResponse)
async def mark_posted(
    post_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.mark_posted(db, access, post)
    return APIResponse(status="success", data=post_service.to_response(post, access), message="Post marked as posted")


# GET /posts/{id}/approval
@router.get("/{post_id}/approval", response_model=APIResponse)
async def approval_state(
    post_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    return APIResponse(status="success", data=post_service.approval_state(post, access).model_dump())


# POST /posts/{id}/upload-url — account manager, admin
@router.post("/{post_id}/upload-url", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def get_upload_url(
    post_id: uuid.UUID,
    body: UploadUrlRequest,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    upload = post_service.generate_upload_url(access, post, body.filename, body.content_type)
    return APIResponse(status="success", data=upload.model_dump(), message="Upload URL generated")


# POST /posts/{id}/assets — account manager, admin
@router.post("/{post_id}/assets", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def add_asset(
    post_id: uuid.UUID,
    body: AssetAddRequest,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    asset_type = body.asset_type or asset_type_for_mime(body.content_type)
    post = await post_service.add_asset(db, access, post, body.url, asset_type)
    return APIResponse(status="success", data=post_service.to_response(post, access))


# DELETE /posts/{id}/assets/{index} — account manager, admin
@router.delete("/{post_id}/assets/{index}", response_model=APIResponse)
async def remove_asset(
    post_id: uuid.UUID,
    index: int,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.remove_asset(db, access, post, index)
    return APIResponse(status="success", data=post_service.to_response(post, access))


# PATCH /posts/{id}/assets/order — account manager, admin
@router.patch("/{post_id}/assets/order", response_model=APIResponse)
async def move_asset(
    post_id: uuid.UUID,
    body: AssetMoveRequest,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    post = await post_service.move_asset(db, access, post, body.from_index, body.to_index)
    return APIResponse(status="success", data=post_service.to_response(post, access))


# GET /posts/{id}/audit-logs — account manager, admin
@router.get("/{post_id}/audit-logs", response_model=APIResponse)
async def list_audit_logs(
    post_id: uuid.UUID,
    access: AccessContext = require_role(*_STAFF),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_visible_post(db, access, post_id)
    logs = await post_service.list_audit_logs(db, access, post)
    return APIResponse(
        status="success",
        data=[AuditLogResponse.model_validate(log).model_dump() for log in logs],
    )
