"""Social accounts API: the caller's visible accounts."""
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.dependencies import get_access, get_db
from feedplanner.schemas.common import APIResponse
from feedplanner.schemas.workspace import AccountResponse
from feedplanner.services import workspace_service
from feedplanner.services.role_engine import AccessContext

router = APIRouter()


# GET /accounts
@router.get("", response_model=APIResponse)
async def list_accounts(
    workspace_id: uuid.UUID | None = None,
    access: AccessContext = Depends(get_access),
    db: AsyncSession = Depends(get_db),
):
    accounts = await workspace_service.list_accounts(db, access, workspace_id)
    return APIResponse(
        status="success",
        data=[AccountResponse.model_validate(a).model_dump() for a in accounts],
    )
