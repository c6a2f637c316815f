from fastapi import APIRouter, Depends

from readyforms.api import deps
from readyforms.api.v1 import admin, auth, comments, dashboard, health, likes, responses, tags, templates, topics

api_router = APIRouter()

_http_deps = [Depends(deps.rate_limit)]

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"], dependencies=_http_deps)
api_router.include_router(templates.router, prefix="/templates", tags=["Templates"], dependencies=_http_deps)
api_router.include_router(topics.router, prefix="/topics", tags=["Topics"], dependencies=_http_deps)
api_router.include_router(tags.router, prefix="/tags", tags=["Tags"], dependencies=_http_deps)
api_router.include_router(comments.router, prefix="/comments", tags=["Comments"], dependencies=_http_deps)
api_router.include_router(responses.router, prefix="/responses", tags=["Responses"], dependencies=_http_deps)
api_router.include_router(likes.router, prefix="/likes", tags=["Likes"], dependencies=_http_deps)
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"], dependencies=_http_deps)
api_router.include_router(admin.router, tags=["Admin"], dependencies=_http_deps)
api_router.include_router(health.router, tags=["Health"])
