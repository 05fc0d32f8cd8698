"""Request logging for the scoring API.

Every request produces one coloured console line. Failed pipeline requests
also carry the failure category that the exception handler stored on
``request.state``, so a 502 can be told apart as a capability or a contract
failure without opening the pipeline log.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("callscore.middleware.structured")

_STATUS_COLOURS = (
    (500, "\u001b[31m"),
    (400, "\u001b[33m"),
    (200, "\u001b[32m"),
)
_DEFAULT_COLOUR = "\u001b[36m"
_RESET = "\u001b[0m"


def _colour_for(status_code: int) -> str:
    for floor, colour in _STATUS_COLOURS:
        if status_code >= floor:
            return colour
    return _DEFAULT_COLOUR


def format_request_line(entry: dict[str, Any]) -> str:
    """Render ``METHOD path status duration`` plus upload size and failure category."""

    line = (
        f"{entry['method']} {entry['path']} {entry['status_code']} "
        f"{entry['duration_ms']:.1f}ms"
    )
    if entry.get("upload_bytes"):
        line += f" upload={entry['upload_bytes']}B"
    if entry.get("category"):
        line += f" category={entry['category']}"
    return f"{_colour_for(entry['status_code'])}{line}{_RESET}"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one log line per HTTP request."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        entry: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "upload_bytes": request.headers.get("content-length"),
        }

        try:
            response = await call_next(request)
        except Exception as exc:  # pragma: no cover - re-raised
            entry.update(status_code=500, category="unhandled", error=repr(exc))
            entry["duration_ms"] = (time.perf_counter() - start_time) * 1000
            logger.exception(format_request_line(entry))
            raise

        entry["status_code"] = response.status_code
        entry["duration_ms"] = (time.perf_counter() - start_time) * 1000
        entry["category"] = getattr(request.state, "error_category", None)
        logger.info(format_request_line(entry))
        logger.debug(json.dumps(entry, default=str, separators=(",", ":")))
        return response


__all__ = ["StructuredLoggingMiddleware", "format_request_line"]
