from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify
from werkzeug.exceptions import HTTPException

from agritech.utils.time import iso_now

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Generic user-facing messages; never leak internals
# ---------------------------------------------------------------------------
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    413: "Request payload too large",
    422: "Unprocessable entity",
    500: "An internal error occurred",
    503: "Service temporarily unavailable",
}


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
) -> Response:
    """Return a generic error response while logging the real exception.

    Parameters
    ----------
    exc:
        The caught exception. Logged server-side, **never** sent to the
        client.
    status:
        HTTP status code for the response (determines the generic message).
    context:
        Optional human-readable context string logged alongside *exc*,
        e.g. ``"creating diagnosis"``.
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    message = _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])
    return error_response(message, status)


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    payload: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(
    message: str,
    status: int = 500,
    *,
    details: dict | None = None,
) -> Response:
    payload: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    if details:
        payload.update(details)
    response_body: dict[str, Any] = {
        "ok": False,
        "data": None,
        "error": payload,
        "message": message,
    }
    if details:
        response_body["details"] = details
    response = jsonify(response_body)
    response.status_code = status
    return response


def domain_error_response(exc: BaseException, *, context: str = "") -> Response:
    """Map an :class:`AgriTechError` to its HTTP response.

    4xx and 503 messages were written for the caller and are surfaced with
    their detail; any other 5xx is logged and answered generically.
    """
    from agritech.domain.exceptions import AgriTechError, ServiceUnavailableError

    if not isinstance(exc, AgriTechError):
        return safe_error(exc, 500, context=context)

    status = exc.http_status
    if isinstance(exc, ServiceUnavailableError):
        _log.warning("API error [%s] %s: %s", status, context, exc)
        return error_response(str(exc), status, details={"service": exc.service})
    if status >= 500:
        return safe_error(exc, status, context=context)
    return error_response(str(exc) or _GENERIC_MESSAGES.get(status, "Request failed"), status, details=exc.detail)


# ---------------------------------------------------------------------------
# Route decorator
# ---------------------------------------------------------------------------


def safe_route(
    error_message: str = "An internal error occurred",
    *,
    error_status: int = 500,
) -> Callable:
    """Decorator that wraps a Flask route handler with standardized error handling.

    Catches :class:`~agritech.domain.exceptions.AgriTechError` subclasses and
    maps them to the correct HTTP status via ``exc.http_status``. Any other
    ``Exception`` is logged and returns a generic 500.

    Usage::

        @soil_api.post("/analyze")
        @safe_route("Failed to analyze soil")
        def analyze_soil():
            ...
    """
    from agritech.domain.exceptions import AgriTechError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except HTTPException:
                # Werkzeug errors (413, 405...) are answered by the app-wide handler
                raise
            except AgriTechError as exc:
                return domain_error_response(exc, context=error_message)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator
