"""Auth API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.config import settings
from feedplanner.dependencies import get_access, get_db, get_token_payload
from feedplanner.schemas.auth import LoginRequest, MeResponse, TokenResponse
from feedplanner.schemas.common import APIResponse
from feedplanner.services.auth_service import authenticate_user, create_access_token, revoke_token
from feedplanner.services.role_engine import AccessContext

router = APIRouter()


# POST /auth/login
@router.post("/login", response_model=APIResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, body.email, body.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return APIResponse(
        status="success",
        data=TokenResponse(
            access_token=create_access_token(str(user.id), user.email),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        ).model_dump(),
    )


# POST /auth/logout
@router.post("/logout", response_model=APIResponse)
async def logout(payload: dict = Depends(get_token_payload)):
    await revoke_token(payload)
    return APIResponse(status="success", message="Logged out successfully")


# GET /auth/me
@router.get("/me", response_model=APIResponse)
async def me(access: AccessContext = Depends(get_access)):
    facts = access.facts
    return APIResponse(
        status="success",
        data=MeResponse(
            id=facts.actor.id,
            email=facts.actor.email,
            display_name=facts.actor.display_name,
            global_role=facts.global_role,
            role=access.role,
            capabilities=access.capabilities(),
            client_workspace_id=access.client_workspace_id(),
            memberships=list(facts.memberships),
            visible_accounts=list(facts.visible_accounts),
        ).model_dump(),
    )
