"""Centralized exception hierarchy for the AgriTech gateway.

All domain and service exceptions inherit from :class:`AgriTechError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``agritech/utils/http.safe_route``) maps
these to the correct HTTP status codes automatically.

Hierarchy
---------
::

    AgriTechError (base, 500)
    ├── ValidationError            (400, bad input from caller)
    │   └── PayloadTooLargeError   (413, upload over the size limit)
    ├── NotFoundError              (404, entity does not exist)
    ├── ServiceError               (500, business-logic failure)
    │   └── RepositoryError        (500, database / persistence)
    └── ServiceUnavailableError    (503, AI endpoint unreachable)
"""

from __future__ import annotations


class AgriTechError(Exception):
    """Base exception for all AgriTech application errors.

    Parameters
    ----------
    message:
        Human-readable description. Surfaced to the HTTP client for 4xx
        errors and for :class:`ServiceUnavailableError`; logged only for
        other 5xx errors.
    detail:
        Optional machine-readable context dict attached to the error.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(AgriTechError):
    """Caller supplied invalid or incomplete input (HTTP 400).

    ``detail["errors"]`` holds a list of ``{"field": ..., "message": ...}``
    entries when the failure can be pinned to specific fields.
    """

    http_status: int = 400

    @classmethod
    def from_pydantic(cls, exc, message: str = "Invalid request") -> "ValidationError":
        errors = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            errors.append({"field": loc or None, "message": err.get("msg", "invalid value")})
        return cls(message, detail={"errors": errors})


class NotFoundError(AgriTechError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class PayloadTooLargeError(ValidationError):
    """Uploaded content exceeds the configured size limit (HTTP 413)."""

    http_status: int = 413


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(AgriTechError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class ServiceUnavailableError(AgriTechError):
    """A downstream AI microservice could not be reached (HTTP 503).

    Timeouts, refused connections, DNS failures and non-2xx answers all
    collapse into this one condition. It carries no retry guidance; the
    caller decides between a fallback and surfacing the 503.
    """

    http_status: int = 503

    def __init__(self, service: str, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message or f"AI service '{service}' is unavailable", detail=detail)
        self.service = service
