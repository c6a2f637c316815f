from __future__ import annotations

import re
from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.routing import compile_path


HTTP_REQUESTS_TOTAL = Counter(
    "readyforms_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "readyforms_http_request_duration_seconds",
    "HTTP request duration (seconds)",
    ["method", "path"],
)

OPTIMISTIC_LOCK_CONFLICTS_TOTAL = Counter(
    "readyforms_optimistic_lock_conflicts_total",
    "Versioned writes rejected because the client version was stale",
    ["resource"],
)

FORM_RESPONSES_TOTAL = Counter(
    "readyforms_form_responses_total",
    "Submitted form responses",
    ["quiz"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


UNMATCHED_PATH = "__unmatched__"


class RouteLabeler:
    """Resolve a request to the route template it was served under.

    Templates come from the OpenAPI path table plus the application's own
    top-level routes, so routes of included routers carry their full prefix.
    Unknown paths collapse into ``UNMATCHED_PATH`` to bound label cardinality.
    """

    def __init__(self, app: Any):
        self.app = app
        self._table: list[tuple[re.Pattern, frozenset[str], str]] | None = None

    def _build(self) -> list[tuple[re.Pattern, frozenset[str], str]]:
        table = []
        for template, operations in self.app.openapi().get("paths", {}).items():
            methods = frozenset(m.upper() for m in operations)
            table.append((compile_path(template)[0], methods, template))
        for route in self.app.routes:
            template = getattr(route, "path", None)
            methods = getattr(route, "methods", None)
            if isinstance(template, str) and methods:
                table.append((compile_path(template)[0], frozenset(methods), template))
        return table

    def label(self, method: str, path: str) -> str:
        if self._table is None:
            self._table = self._build()
        for regex, methods, template in self._table:
            if method in methods and regex.match(path):
                return template
        return UNMATCHED_PATH
