"""
Uniform JSON envelopes for route handlers.

Success payloads are returned as-is; every failure is `{"error": "<message>"}`
with an explicit status code.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger("content-admin")

NOT_IMPLEMENTED_MSG = "Not implemented yet"


def api_success(data: Any, status: int = 200) -> JSONResponse:
    return JSONResponse(jsonable_encoder(data), status_code=status)


def api_error(error: BaseException | None, message: str, status: int = 500) -> JSONResponse:
    """Log `error` with context, then return the generic `message` to the caller."""
    if error is not None:
        logger.error("%s: %s", message, error, exc_info=error)
    else:
        logger.error(message)
    return JSONResponse({"error": message}, status_code=status)


def api_bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=400)


def api_not_found(resource: str) -> JSONResponse:
    return JSONResponse({"error": f"{resource} not found"}, status_code=404)


def api_not_implemented() -> JSONResponse:
    return JSONResponse({"error": NOT_IMPLEMENTED_MSG}, status_code=501)
