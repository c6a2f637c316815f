"""Optimistic locking for versioned rows.

Every versioned model maps its ``version`` column as the mapper's
``version_id_col``. The ORM then writes

    UPDATE t SET ..., version = :v + 1 WHERE t.id = :id AND t.version = :v
    DELETE FROM t WHERE t.id = :id AND t.version = :v

and raises ``StaleDataError`` when the statement matches no row. These
helpers pin ``:v`` to the version the client last saw and translate the
mismatch into ``OptimisticLockError``.

The helpers never commit, retry or log: the caller owns the transaction and
decides how a conflict is reported (see ``handle_optimistic_lock_error``).
"""
from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from sqlalchemy import func, inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from readyforms.utils.error_codes import ERROR_MESSAGES, ErrorCode

ModelT = TypeVar("ModelT")

_PROTECTED_ATTRS = frozenset({"id", "version", "created_at", "updated_at"})


class OptimisticLockError(Exception):
    """The row is gone or its version differs from the one the caller holds.

    A missing row and a stale version are reported the same way; when the
    row still exists ``current_version`` carries its persisted version.
    """

    status_code = 409
    code = ErrorCode.OPTIMISTIC_LOCK_ERROR.value

    def __init__(
        self,
        message: str | None = None,
        *,
        resource: str,
        record_id: Any,
        expected_version: int,
        current_version: int | None = None,
    ):
        self.message = message or ERROR_MESSAGES[ErrorCode.OPTIMISTIC_LOCK_ERROR]
        self.resource = resource
        self.record_id = record_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "error": self.code,
            "details": {
                "resource": self.resource,
                "id": str(self.record_id),
                "expected_version": self.expected_version,
                "current_version": self.current_version,
            },
        }


def _resource_name(model: type) -> str:
    return getattr(model, "__tablename__", model.__name__)


def _check_patch(model: type, patch: Mapping[str, Any]) -> None:
    columns = {attr.key for attr in sa_inspect(model).column_attrs}
    unknown = [k for k in patch if k not in columns or k in _PROTECTED_ATTRS]
    if unknown:
        raise ValueError(f"Cannot patch {model.__name__} attributes: {', '.join(sorted(unknown))}")


async def _load_expected(session: AsyncSession, model: type[ModelT], record_id: Any, expected_version: int) -> ModelT:
    record = await session.get(model, record_id, populate_existing=True)
    if record is None:
        raise OptimisticLockError(
            resource=_resource_name(model),
            record_id=record_id,
            expected_version=expected_version,
        )
    if record.version != expected_version:
        raise OptimisticLockError(
            resource=_resource_name(model),
            record_id=record_id,
            expected_version=expected_version,
            current_version=record.version,
        )
    return record


async def optimistic_update(
    session: AsyncSession,
    model: type[ModelT],
    record_id: Any,
    expected_version: int,
    patch: Mapping[str, Any],
) -> ModelT:
    """Apply ``patch`` to the row if it is still at ``expected_version``.

    Returns the refreshed record; its ``version`` is ``expected_version + 1``.
    """
    _check_patch(model, patch)
    record = await _load_expected(session, model, record_id, expected_version)

    for key, value in patch.items():
        setattr(record, key, value)
    # Always dirty the row so an empty or no-op patch still bumps the version.
    record.updated_at = func.now()

    try:
        await session.flush()
    except StaleDataError as exc:
        raise OptimisticLockError(
            resource=_resource_name(model),
            record_id=record_id,
            expected_version=expected_version,
        ) from exc

    await session.refresh(record)
    return record


async def optimistic_delete(
    session: AsyncSession,
    model: type,
    record_id: Any,
    expected_version: int,
) -> int:
    """Delete the row if it is still at ``expected_version``; returns 1."""
    record = await _load_expected(session, model, record_id, expected_version)

    await session.delete(record)
    try:
        await session.flush()
    except StaleDataError as exc:
        raise OptimisticLockError(
            resource=_resource_name(model),
            record_id=record_id,
            expected_version=expected_version,
        ) from exc
    return 1


def handle_optimistic_lock_error(error: BaseException, respond: Callable[[int, dict], Any]) -> bool:
    """Report ``error`` through ``respond(status_code, body)`` if it is a lock conflict.

    Returns False, without calling ``respond``, for any other error so the
    caller can fall back to its generic handling.
    """
    if not isinstance(error, OptimisticLockError):
        return False
    respond(error.status_code, error.to_dict())
    return True
