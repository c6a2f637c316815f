from __future__ import annotations

import os
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine.url import make_url

router = APIRouter()

_START_TIME = time.time()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _app_version() -> str:
    return (os.getenv("READYFORMS_APP_VERSION") or os.getenv("APP_VERSION") or "").strip() or "dev"


@router.get("/health")
async def health_check(request: Request):
    return {
        "status": "ok",
        "version": _app_version(),
        "environment": request.app.state.settings.ENV,
        "uptime_seconds": int(max(0.0, time.time() - _START_TIME)),
        "timestamp": _utc_now_iso(),
    }


@router.get("/healthz")
async def healthz_check():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db_check(request: Request):
    dialect = make_url(request.app.state.settings.DATABASE_URL).get_backend_name()
    try:
        t0 = time.perf_counter()
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        latency_ms = int(round((time.perf_counter() - t0) * 1000.0))
        return {
            "status": "ok",
            "db": {"dialect": dialect, "reachable": True, "latency_ms": latency_ms},
            "timestamp": _utc_now_iso(),
        }
    except Exception as exc:
        return JSONResponse(
            status_code=503,
            content={
                "status": "error",
                "db": {"dialect": dialect, "reachable": False, "latency_ms": None},
                "details": str(exc),
                "timestamp": _utc_now_iso(),
            },
        )


@router.get("/health/ping")
async def ping():
    return {"status": "ok", "message": "pong", "timestamp": _utc_now_iso()}
