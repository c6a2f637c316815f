import asyncio
import time
from typing import AsyncGenerator, Optional

from fastapi import Depends, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.config import Settings
from readyforms.core.auth.service import AuthService
from readyforms.db.models.user import User
from readyforms.utils.exceptions import ForbiddenException, TooManyRequestsException, UnauthorizedException
from readyforms.utils.security import TokenRevocationStore, decode_token

reusable_oauth2 = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
optional_oauth2 = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_revocations(request: Request) -> TokenRevocationStore:
    return request.app.state.revocations


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        yield session


class RateLimitState:
    """Fixed-window counters per client host, used when Redis is off."""

    def __init__(self):
        self.lock = asyncio.Lock()
        self.counters: dict[tuple[int, str], int] = {}


async def rate_limit(request: Request) -> None:
    settings: Settings = request.app.state.settings
    if not settings.RATE_LIMIT_ENABLED:
        return

    client_host = (request.client.host if request.client else None) or "unknown"
    window_seconds = max(1, int(settings.RATE_LIMIT_WINDOW_SECONDS))
    limit = max(1, int(settings.RATE_LIMIT_REQUESTS_PER_WINDOW))

    redis_client = getattr(request.app.state, "redis", None)
    if settings.REDIS_ENABLED and redis_client is not None:
        bucket = int(time.time() // window_seconds)
        key = f"rl:{client_host}:{bucket}"
        current = await redis_client.incr(key)
        if current == 1:
            await redis_client.expire(key, window_seconds + 1)
    else:
        state: RateLimitState = request.app.state.rate_limit
        bucket = int(time.monotonic() // window_seconds)
        async with state.lock:
            current = state.counters.get((bucket, client_host), 0) + 1
            state.counters[(bucket, client_host)] = current
            state.counters.pop((bucket - 1, client_host), None)

    if current > limit:
        raise TooManyRequestsException(details={"window_seconds": window_seconds, "limit": limit})


async def _user_from_token(
    token: str,
    db: AsyncSession,
    settings: Settings,
    revocations: TokenRevocationStore,
) -> User:
    payload = await decode_token(settings, token, revocations=revocations)
    if not payload:
        raise UnauthorizedException("Could not validate credentials")

    user = await AuthService(db, settings).get_user(payload.get("sub"))
    if user is None:
        raise UnauthorizedException("User not found")
    if user.blocked:
        raise ForbiddenException("User is blocked, access denied")
    return user


async def get_token_payload(
    token: str = Depends(reusable_oauth2),
    settings: Settings = Depends(get_app_settings),
    revocations: TokenRevocationStore = Depends(get_revocations),
) -> dict:
    payload = await decode_token(settings, token, revocations=revocations)
    if not payload:
        raise UnauthorizedException("Could not validate credentials")
    return payload


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(reusable_oauth2),
    settings: Settings = Depends(get_app_settings),
    revocations: TokenRevocationStore = Depends(get_revocations),
) -> User:
    return await _user_from_token(token, db, settings, revocations)


async def get_optional_user(
    db: AsyncSession = Depends(get_db),
    token: Optional[str] = Depends(optional_oauth2),
    settings: Settings = Depends(get_app_settings),
    revocations: TokenRevocationStore = Depends(get_revocations),
) -> Optional[User]:
    if not token:
        return None
    return await _user_from_token(token, db, settings, revocations)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise ForbiddenException("Admin privileges required")
    return current_user


class Pagination:
    def __init__(self, page: int, limit: int):
        self.page = page
        self.limit = limit


def get_pagination(
    request: Request,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
) -> Pagination:
    settings: Settings = request.app.state.settings
    size = limit or settings.DEFAULT_PAGE_SIZE
    return Pagination(page=page, limit=min(size, settings.MAX_PAGE_SIZE))
