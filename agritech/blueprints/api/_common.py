"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from agritech.blueprints.api._common import (
        get_container, get_json, parse_body, success, fail,
        get_diagnosis_service, get_soil_service, ...
    )

This module centralizes:
- Service container access
- Request parsing into pydantic models
- Standardized response helpers
- Common service accessors
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Type, TypeVar

from flask import current_app, request, session
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from agritech.domain.exceptions import ValidationError
from agritech.utils.http import error_response, success_response

logger = logging.getLogger("api._common")

ModelT = TypeVar("ModelT", bound=BaseModel)

# ============================================================================
# User Session Utilities
# ============================================================================


def get_user_id() -> str:
    """Current user ID from the session, or the configured anonymous id."""
    user_id = session.get("user_id")
    if user_id:
        return str(user_id)
    return current_app.config.get("DEFAULT_USER_ID", "anonymous")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================

def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================

def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def parse_body(model: Type[ModelT], data: Mapping[str, Any] | None = None) -> ModelT:
    """
    Validate request data against a pydantic model.

    Args:
        model: Schema class
        data: Raw values (defaults to the JSON body)

    Raises:
        ValidationError: With per-field errors, answered as HTTP 400
    """
    raw = get_json() if data is None else dict(data)
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


# ============================================================================
# RESPONSE HELPERS
# ============================================================================

def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)


# ============================================================================
# SERVICE ACCESSORS
# ============================================================================

def get_diagnosis_service():
    return get_container().diagnosis_service


def get_soil_service():
    return get_container().soil_service


def get_assistant_service():
    return get_container().assistant_service


def get_upload_storage():
    return get_container().upload_storage
