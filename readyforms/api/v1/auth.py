import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.config import Settings
from readyforms.core.auth.service import AuthService
from readyforms.db.models.user import User
from readyforms.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest, TokenPair
from readyforms.schemas.common import MessageResponse
from readyforms.schemas.user import PreferencesUpdateRequest
from readyforms.schemas.user import User as UserSchema
from readyforms.utils.exceptions import ReadyFormsException
from readyforms.utils.security import TokenRevocationStore

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/register", response_model=TokenPair, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_app_settings),
    requested_by: Optional[User] = Depends(deps.get_optional_user),
):
    service = AuthService(db, settings)
    return await service.register(data, requested_by=requested_by)


@router.post("/login", response_model=TokenPair)
async def login(
    data: LoginRequest,
    http_request: Request,
    db: AsyncSession = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_app_settings),
):
    service = AuthService(db, settings)
    client_host = (http_request.client.host if http_request.client else None) or "unknown"
    try:
        tokens = await service.login(data)
    except ReadyFormsException as exc:
        logger.warning("auth.login failed email=%s ip=%s error=%s", data.email, client_host, exc.code)
        raise
    logger.info("auth.login success user_id=%s ip=%s", tokens.user.id, client_host)
    return tokens


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    data: RefreshRequest,
    db: AsyncSession = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_app_settings),
    revocations: TokenRevocationStore = Depends(deps.get_revocations),
):
    service = AuthService(db, settings, revocations)
    return await service.refresh(data.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    payload: dict = Depends(deps.get_token_payload),
    db: AsyncSession = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_app_settings),
    revocations: TokenRevocationStore = Depends(deps.get_revocations),
):
    service = AuthService(db, settings, revocations)
    await service.logout(payload)
    logger.info("auth.logout user_id=%s", payload.get("sub"))
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserSchema)
async def me(current_user: User = Depends(deps.get_current_user)):
    return current_user


@router.put("/preferences", response_model=UserSchema)
async def update_preferences(
    data: PreferencesUpdateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_app_settings),
):
    service = AuthService(db, settings)
    return await service.update_preferences(current_user, data)
