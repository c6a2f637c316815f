from __future__ import annotations

import asyncio
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from readyforms.config import Settings


def hash_password(plain: str, *, rounds: int = 12) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def _exp_to_epoch_seconds(exp: Any) -> int:
    if isinstance(exp, (int, float)):
        return int(exp)
    if isinstance(exp, datetime):
        return int(exp.replace(tzinfo=timezone.utc).timestamp())
    return 0


class TokenRevocationStore:
    """Revoked JWT ids, kept until the token would have expired anyway.

    Uses Redis when a client is supplied, otherwise an in-process dict
    (sufficient for a single worker).
    """

    def __init__(self, redis_client=None, *, default_ttl_seconds: int = 7 * 24 * 3600):
        self._redis = redis_client
        self._default_ttl = default_ttl_seconds
        self._lock = asyncio.Lock()
        self._revoked: dict[str, int] = {}

    async def revoke(self, jti: str, *, exp: Any) -> None:
        if not jti:
            return

        exp_epoch = _exp_to_epoch_seconds(exp)
        now_epoch = int(time.time())
        if exp_epoch and exp_epoch <= now_epoch:
            return

        if self._redis is not None:
            ttl = exp_epoch - now_epoch if exp_epoch else self._default_ttl
            await self._redis.set(f"jwt:jti:revoked:{jti}", "1", ex=max(1, int(ttl)))
            return

        async with self._lock:
            self._revoked[jti] = exp_epoch

    async def is_revoked(self, jti: str) -> bool:
        if not jti:
            return False

        if self._redis is not None:
            return bool(await self._redis.exists(f"jwt:jti:revoked:{jti}"))

        now_epoch = int(time.time())
        async with self._lock:
            exp_epoch = self._revoked.get(jti)
            if exp_epoch is None:
                return False
            if exp_epoch and exp_epoch <= now_epoch:
                self._revoked.pop(jti, None)
                return False
            return True


def _encode(settings: Settings, subject: Any, *, token_type: str, expires_in: timedelta, claims: dict | None) -> str:
    payload = {
        "exp": datetime.now(timezone.utc) + expires_in,
        "sub": str(subject),
        "type": token_type,
        "jti": uuid.uuid4().hex,
    }
    if claims:
        payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(settings: Settings, subject: Any, *, claims: dict | None = None) -> str:
    return _encode(
        settings,
        subject,
        token_type="access",
        expires_in=timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        claims=claims,
    )


def create_refresh_token(settings: Settings, subject: Any) -> str:
    return _encode(
        settings,
        subject,
        token_type="refresh",
        expires_in=timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        claims=None,
    )


async def decode_token(
    settings: Settings,
    token: str,
    *,
    revocations: TokenRevocationStore | None = None,
    expected_type: str = "access",
) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub", "type"]},
        )
    except jwt.PyJWTError:
        return None

    if payload.get("type") != expected_type:
        return None

    jti = payload.get("jti")
    if revocations is not None and isinstance(jti, str) and jti:
        if await revocations.is_revoked(jti):
            return None
    return payload
