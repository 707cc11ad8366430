import re
import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids are echoed into logs and headers; keep them tame.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware:
    """Extracts or generates a correlation ID for each request.

    Reads ``X-Request-ID`` from the incoming request.  If absent or
    malformed, generates a new UUID4.  The ID is bound into structlog's
    context vars so every log line of the request carries it (including
    the order audit lines and ``api.internal_error``), exposed as
    ``request.correlation_id``, and returned via the ``X-Request-ID``
    response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        cid = supplied if _VALID_REQUEST_ID.match(supplied) else str(uuid.uuid4())
        request.correlation_id = cid

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        logger.info(
            "request.started",
            method=request.method,
            path=request.path,
        )

        response = self.get_response(request)

        logger.info(
            "request.finished",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

        response[REQUEST_ID_HEADER] = cid
        return response
