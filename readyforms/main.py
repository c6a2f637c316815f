from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncEngine

from readyforms.api.deps import RateLimitState
from readyforms.api.router import api_router
from readyforms.api.v1 import health
from readyforms.config import Settings, get_settings
from readyforms.core.locking import OptimisticLockError, handle_optimistic_lock_error
from readyforms.db.session import create_db_engine, create_session_factory
from readyforms.utils.error_codes import ERROR_MESSAGES, ErrorCode
from readyforms.utils.exceptions import ReadyFormsException
from readyforms.utils.metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_TOTAL,
    OPTIMISTIC_LOCK_CONFLICTS_TOTAL,
    RouteLabeler,
    render_metrics,
)
from readyforms.utils.request_id import current_request_id, new_request_id, request_id_var, validate_request_id
from readyforms.utils.security import TokenRevocationStore


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    if settings.REDIS_ENABLED:
        import redis.asyncio as redis

        client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        try:
            await client.ping()
        except Exception as exc:
            await client.aclose()
            raise RuntimeError("Redis enabled but unavailable") from exc

        app.state.redis = client
        app.state.revocations = TokenRevocationStore(client)

    try:
        yield
    finally:
        client = getattr(app.state, "redis", None)
        if client is not None:
            try:
                await client.aclose()
            finally:
                app.state.redis = None
                app.state.revocations = TokenRevocationStore()

        # Ensure DB connections/threads are cleaned up when the app shuts down.
        await app.state.engine.dispose()


async def request_id_middleware(request: Request, call_next):
    rid = validate_request_id(request.headers.get("X-Request-ID")) or new_request_id()
    token = request_id_var.set(rid)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)

    response.headers["X-Request-ID"] = rid
    return response


async def metrics_middleware(request: Request, call_next):
    if not request.app.state.settings.METRICS_ENABLED:
        return await call_next(request)

    start = time.perf_counter()
    response = await call_next(request)
    elapsed_s = time.perf_counter() - start

    path = request.scope["path"]
    root_path = request.scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        path = path[len(root_path):]
    path_label = request.app.state.route_labels.label(request.method, path)
    HTTP_REQUESTS_TOTAL.labels(method=request.method, path=path_label, status=str(response.status_code)).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(method=request.method, path=path_label).observe(elapsed_s)
    return response


async def readyforms_exception_handler(request: Request, exc: ReadyFormsException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def optimistic_lock_exception_handler(request: Request, exc: OptimisticLockError):
    logger.warning(
        "optimistic_lock.conflict resource=%s id=%s expected=%s current=%s path=%s",
        exc.resource,
        exc.record_id,
        exc.expected_version,
        exc.current_version,
        request.url.path,
    )
    OPTIMISTIC_LOCK_CONFLICTS_TOTAL.labels(resource=exc.resource).inc()

    rendered: list[JSONResponse] = []
    handle_optimistic_lock_error(
        exc, lambda status_code, body: rendered.append(JSONResponse(status_code=status_code, content=body))
    )
    return rendered[0]


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "message": ERROR_MESSAGES[ErrorCode.VALIDATION_ERROR],
            "error": ErrorCode.VALIDATION_ERROR.value,
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request.unhandled path=%s request_id=%s", request.url.path, current_request_id())
    return JSONResponse(
        status_code=500,
        content={
            "message": ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR],
            "error": ErrorCode.INTERNAL_ERROR.value,
            "details": {},
        },
    )


async def metrics_endpoint():
    payload, content_type = render_metrics()
    return Response(content=payload, media_type=content_type)


def create_app(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    """Build the application around its own engine and session factory."""
    settings = settings or get_settings()
    logging.getLogger("readyforms").setLevel(settings.LOG_LEVEL.upper())

    app = FastAPI(title="ReadyForms API", debug=settings.DEBUG, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine or create_db_engine(settings)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.redis = None
    app.state.revocations = TokenRevocationStore()
    app.state.rate_limit = RateLimitState()
    app.state.route_labels = RouteLabeler(app)

    origins = settings.cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # Local dev servers on any port, but only on localhost.
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.middleware("http")(metrics_middleware)
    app.middleware("http")(request_id_middleware)

    app.add_exception_handler(ReadyFormsException, readyforms_exception_handler)
    app.add_exception_handler(OptimisticLockError, optimistic_lock_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix="/api/v1")
    app.include_router(health.router, tags=["Health"])

    if settings.METRICS_ENABLED:
        app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)

    return app


app = create_app()
