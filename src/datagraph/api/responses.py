"""
Responses - Standard success and error envelopes for the HTTP API.
"""

from __future__ import annotations

import traceback
from typing import Any

from aiohttp import web

from datagraph.core.errors import ErrorKind, GraphAccessError, GraphError


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.UNSUPPORTED_LOGIC_TYPE: 400,
    ErrorKind.EVALUATION_FAILED: 500,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.TIMEOUT: 504,
}


def success(data: Any, status: int = 200) -> web.Response:
    """Generate a standardized JSON success response."""
    return web.json_response(data, status=status, headers=CORS_HEADERS)


def raw(body: str, content_type: str) -> web.Response:
    """Serve a body verbatim with its declared content type."""
    return web.Response(
        body=body.encode("utf-8"),
        status=200,
        headers={**CORS_HEADERS, "Content-Type": content_type},
    )


def error_status(exc: Exception) -> int:
    if isinstance(exc, GraphError):
        return STATUS_BY_KIND.get(exc.kind, 500)
    if isinstance(exc, GraphAccessError):
        return STATUS_BY_KIND[ErrorKind.UPSTREAM_FAILURE]
    if isinstance(exc, ValueError):
        return 400
    return 500


def error_response(exc: Exception, stage: str = "dev") -> web.Response:
    """
    Generate a standardized error response.

    Outside production the body includes the stack trace.
    """
    status = error_status(exc)
    if isinstance(exc, GraphError):
        error: dict[str, Any] = exc.to_dict()
    elif isinstance(exc, GraphAccessError):
        error = {"kind": ErrorKind.UPSTREAM_FAILURE.value, "message": str(exc)}
    elif isinstance(exc, ValueError):
        error = {"kind": "bad_request", "message": str(exc)}
    else:
        error = {"kind": "internal_error", "message": str(exc) or "Internal Server Error"}

    if stage != "prod":
        error["stack"] = "".join(traceback.format_exception(exc))

    return web.json_response({"error": error}, status=status, headers=CORS_HEADERS)
