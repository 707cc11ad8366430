"""Project-wide DRF exception handler.

Domain exceptions are translated by the views themselves.  Anything that
reaches this handler and is not a DRF ``APIException`` is a storage or
programming failure: it is logged with the request's correlation id and
answered with a generic 500 body so no internals leak to the client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error."


def api_exception_handler(
    exc: Exception, context: Dict[str, Any]
) -> Optional[Response]:
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.error(
        "api.internal_error",
        view=type(view).__name__ if view is not None else None,
        error_type=type(exc).__name__,
        storage_failure=isinstance(exc, DatabaseError),
        exc_info=exc,
    )
    return Response(
        {"detail": INTERNAL_ERROR_DETAIL},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
