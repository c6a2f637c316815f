from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.config import Settings
from readyforms.core.locking import optimistic_update
from readyforms.db.models.user import User
from readyforms.schemas.auth import LoginRequest, RegisterRequest, TokenPair
from readyforms.schemas.user import PreferencesUpdateRequest
from readyforms.schemas.user import User as UserSchema
from readyforms.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
)
from readyforms.utils.security import (
    TokenRevocationStore,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    def __init__(self, session: AsyncSession, settings: Settings, revocations: TokenRevocationStore | None = None):
        self.session = session
        self.settings = settings
        self.revocations = revocations

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(func.lower(User.email) == normalize_email(email)))
        return result.scalar_one_or_none()

    def _may_grant_admin(self, requested_by: User | None) -> bool:
        if requested_by is not None and requested_by.is_admin:
            return True
        return bool(self.settings.ALLOW_ADMIN_CREATION) or self.settings.is_dev

    def _token_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(self.settings, user.id, claims={"adm": bool(user.is_admin)}),
            refresh_token=create_refresh_token(self.settings, user.id),
            expires_in=int(self.settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES) * 60,
            user=UserSchema.model_validate(user),
        )

    async def register(self, data: RegisterRequest, *, requested_by: User | None = None) -> TokenPair:
        email = normalize_email(data.email)
        if await self.get_user_by_email(email) is not None:
            raise ConflictException("User already exists with this email")

        user = User(
            name=data.name,
            email=email,
            password_hash=await asyncio.to_thread(hash_password, data.password, rounds=self.settings.BCRYPT_ROUNDS),
            language=data.language,
            theme=data.theme,
            is_admin=bool(data.is_admin and self._may_grant_admin(requested_by)),
            blocked=False,
            last_login_at=datetime.now(timezone.utc),
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race against the unique email constraint.
            await self.session.rollback()
            raise ConflictException("User already exists with this email")
        await self.session.refresh(user)
        logger.info("auth.register user_id=%s admin=%s", user.id, user.is_admin)
        return self._token_pair(user)

    async def login(self, data: LoginRequest) -> TokenPair:
        user = await self.get_user_by_email(data.email)
        if user is None or not await asyncio.to_thread(verify_password, data.password, user.password_hash):
            raise UnauthorizedException("Invalid credentials")
        if user.blocked:
            raise ForbiddenException("Your account is blocked. Please contact administrator.")

        # Table-level UPDATE bypasses the version counter: logging in is not
        # an edit of the user record.
        await self.session.execute(
            update(User.__table__)
            .where(User.__table__.c.id == user.id)
            .values(last_login_at=datetime.now(timezone.utc))
        )
        await self.session.commit()
        await self.session.refresh(user)
        return self._token_pair(user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        payload = await decode_token(
            self.settings, refresh_token, revocations=self.revocations, expected_type="refresh"
        )
        if not payload:
            raise UnauthorizedException("Invalid refresh token")

        user = await self.get_user(payload.get("sub"))
        if user is None:
            raise UnauthorizedException("User not found")
        if user.blocked:
            raise ForbiddenException("User is blocked, access denied")

        # Refresh tokens are single use.
        if self.revocations is not None:
            await self.revocations.revoke(payload.get("jti") or "", exp=payload.get("exp"))
        return self._token_pair(user)

    async def logout(self, payload: dict) -> None:
        if self.revocations is not None:
            await self.revocations.revoke(payload.get("jti") or "", exp=payload.get("exp"))

    async def get_user(self, user_id) -> User | None:
        try:
            uid = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
        except (TypeError, ValueError):
            return None
        return await self.session.get(User, uid)

    async def update_preferences(self, user: User, data: PreferencesUpdateRequest) -> User:
        patch = data.model_dump(exclude_none=True, exclude={"version"})
        try:
            updated = await optimistic_update(self.session, User, user.id, data.version, patch)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return updated
