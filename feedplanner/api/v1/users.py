"""Team administration API (admin only)."""
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.dependencies import get_db, require_role
from feedplanner.schemas.common import APIResponse
from feedplanner.schemas.user import UserCreate, UserRoleUpdate
from feedplanner.services import user_service
from feedplanner.services.role_engine import AccessContext, EffectiveRole

router = APIRouter()


# GET /users — admin only
@router.get("", response_model=APIResponse)
async def list_users(
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    users = await user_service.list_users(db, access)
    return APIResponse(status="success", data=[u.model_dump() for u in users])


# POST /users — admin only
@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.create_user(db, access, body)
    return APIResponse(status="success", data=user.model_dump(), message="User invited")


# PATCH /users/{id}/role — admin only
@router.patch("/{user_id}/role", response_model=APIResponse)
async def change_role(
    user_id: uuid.UUID,
    body: UserRoleUpdate,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.set_global_role(db, access, user_id, body.role)
    return APIResponse(
        status="success",
        data=user.model_dump(),
        message=f"Role changed to {body.role.value}",
    )
