# core/api/exception_handler.py

"""
DRF EXCEPTION HANDLER

Maps engine errors (core.exceptions.EngineError) to API responses:
    {"detail": "...", "field": "...", "entity_id": "..."}
with the error class's status code. Everything else goes through DRF's
default handler.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import EngineError, UpstreamError

logger = logging.getLogger(__name__)


def engine_exception_handler(exc, context):
    if isinstance(exc, EngineError):
        view = context.get("view")
        log = logger.warning if isinstance(exc, UpstreamError) else logger.info
        log(
            "Engine error surfaced to client",
            extra={
                "error": exc.__class__.__name__,
                "detail": exc.message,
                "field": exc.field,
                "entity_id": str(exc.entity_id) if exc.entity_id is not None else None,
                "view": view.__class__.__name__ if view is not None else None,
            },
        )
        return Response(exc.as_dict(), status=exc.status_code)

    return exception_handler(exc, context)
