"""Workspaces API: workspaces, members, social accounts, brand guidelines."""
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.dependencies import get_access, get_db, require_role
from feedplanner.schemas.common import APIResponse
from feedplanner.schemas.workspace import (
    AccountCreate,
    AccountResponse,
    BrandGuidelinesResponse,
    BrandGuidelinesUpdate,
    MemberUpsert,
    WorkspaceActiveUpdate,
    WorkspaceCreate,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from feedplanner.services import workspace_service
from feedplanner.services.role_engine import AccessContext, EffectiveRole

router = APIRouter()


# GET /workspaces
@router.get("", response_model=APIResponse)
async def list_workspaces(
    include_archived: bool = True,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    workspaces = await workspace_service.list_workspaces(db, access, include_archived)
    return APIResponse(
        status="success",
        data=[WorkspaceResponse.model_validate(w).model_dump() for w in workspaces],
    )


# POST /workspaces — admin only
@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    body: WorkspaceCreate,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.create_workspace(db, access, body)
    return APIResponse(
        status="success",
        data=WorkspaceResponse.model_validate(workspace).model_dump(),
        message="Workspace created",
    )


# GET /workspaces/{id}
@router.get("/{workspace_id}", response_model=APIResponse)
async def get_workspace(
    workspace_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    return APIResponse(status="success", data=WorkspaceResponse.model_validate(workspace).model_dump())


# PUT /workspaces/{id} — admin only
@router.put("/{workspace_id}", response_model=APIResponse)
async def update_workspace(
    workspace_id: uuid.UUID,
    body: WorkspaceUpdate,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    workspace = await workspace_service.update_workspace(db, access, workspace, body)
    return APIResponse(status="success", data=WorkspaceResponse.model_validate(workspace).model_dump())


# PATCH /workspaces/{id}/active — admin only
@router.patch("/{workspace_id}/active", response_model=APIResponse)
async def set_active(
    workspace_id: uuid.UUID,
    body: WorkspaceActiveUpdate,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    workspace = await workspace_service.set_workspace_active(db, access, workspace, body.is_active)
    return APIResponse(
        status="success",
        data=WorkspaceResponse.model_validate(workspace).model_dump(),
        message="Workspace restored" if body.is_active else "Workspace archived",
    )


# GET /workspaces/{id}/members — account manager, admin
@router.get("/{workspace_id}/members", response_model=APIResponse)
async def list_members(
    workspace_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    members = await workspace_service.list_members(db, access, workspace)
    return APIResponse(status="success", data=[m.model_dump() for m in members])


# PUT /workspaces/{id}/members — admin only
@router.put("/{workspace_id}/members", response_model=APIResponse)
async def upsert_member(
    workspace_id: uuid.UUID,
    body: MemberUpsert,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    member = await workspace_service.upsert_member(db, access, workspace, body.user_id, body.role)
    return APIResponse(
        status="success",
        data={
            "workspace_id": str(member.workspace_id),
            "user_id": str(member.user_id),
            "role": member.role.value,
        },
        message="Member saved",
    )


# DELETE /workspaces/{id}/members/{user_id} — admin only
@router.delete("/{workspace_id}/members/{user_id}", response_model=APIResponse)
async def remove_member(
    workspace_id: uuid.UUID,
    user_id: uuid.UUID,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    await workspace_service.remove_member(db, access, workspace, user_id)
    return APIResponse(status="success", message="Member removed")


# GET /workspaces/{id}/accounts
@router.get("/{workspace_id}/accounts", response_model=APIResponse)
async def list_accounts(
    workspace_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    accounts = await workspace_service.list_accounts(db, access, workspace.id)
    return APIResponse(
        status="success",
        data=[AccountResponse.model_validate(a).model_dump() for a in accounts],
    )


# POST /workspaces/{id}/accounts — admin only
@router.post("/{workspace_id}/accounts", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    workspace_id: uuid.UUID,
    body: AccountCreate,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    account = await workspace_service.create_account(db, access, workspace, body)
    return APIResponse(
        status="success",
        data=AccountResponse.model_validate(account).model_dump(),
        message="Account added",
    )


# DELETE /workspaces/{id}/accounts/{account_id} — admin only
@router.delete("/{workspace_id}/accounts/{account_id}", response_model=APIResponse)
async def delete_account(
    workspace_id: uuid.UUID,
    account_id: uuid.UUID,
    access: AccessContext = require_role(EffectiveRole.ADMIN),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    await workspace_service.delete_account(db, access, workspace, account_id)
    return APIResponse(status="success", message="Account removed")


# GET /workspaces/{id}/brand-guidelines
@router.get("/{workspace_id}/brand-guidelines", response_model=APIResponse)
async def get_brand_guidelines(
    workspace_id: uuid.UUID,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    guidelines = await workspace_service.get_brand_guidelines(db, workspace)
    data = BrandGuidelinesResponse.model_validate(guidelines).model_dump() if guidelines else None
    return APIResponse(status="success", data=data)


# PUT /workspaces/{id}/brand-guidelines — account manager, admin
@router.put("/{workspace_id}/brand-guidelines", response_model=APIResponse)
async def save_brand_guidelines(
    workspace_id: uuid.UUID,
    body: BrandGuidelinesUpdate,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    workspace = await workspace_service.get_visible_workspace(db, access, workspace_id)
    guidelines = await workspace_service.save_brand_guidelines(db, access, workspace, body)
    return APIResponse(
        status="success",
        data=BrandGuidelinesResponse.model_validate(guidelines).model_dump(),
        message="Brand guidelines saved",
    )
