from __future__ import annotations

import logging
import re
import time
from typing import Callable, Optional
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("simple_ksef.api")

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids end up in log lines; anything else gets replaced.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def accepted_request_id(raw: Optional[str]) -> str:
    if raw and _REQUEST_ID_RE.match(raw):
        return raw
    return uuid4().hex


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlates each request with an id and writes one access record.

    Request bodies carry taxpayer names and addresses and are never logged.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        start = time.perf_counter()
        status_code = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
        finally:
            _log_request(request, rid, status_code, start)

        response.headers[REQUEST_ID_HEADER] = rid
        return response


def _log_request(request: Request, rid: str, status_code: int, start: float) -> None:
    duration_ms = int((time.perf_counter() - start) * 1000)
    level = logging.WARNING if status_code >= 500 else logging.INFO
    log.log(
        level,
        "%s %s -> %d (%d ms)",
        request.method,
        request.url.path,
        status_code,
        duration_ms,
        extra={
            "request_id": rid,
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": duration_ms,
        },
    )
