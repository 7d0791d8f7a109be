"""
Health API Blueprint
====================

Routes:
- GET /health      - Liveness plus database status and configured AI endpoints
- GET /health/ping - Basic liveness check
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from agritech.blueprints.api._common import get_container as _container, success as _success
from agritech.utils.http import safe_route
from agritech.utils.time import iso_now

logger = logging.getLogger("health_api")

health_api = Blueprint("health_api", __name__)


@health_api.get("")
@safe_route("Failed to get health status")
def get_health() -> Response:
    """
    Returns:
        {
            "status": "ok|degraded",
            "database": "ok|error",
            "aiServices": {"disease-detection": "http://...", ...},
            "timestamp": "2026-..."
        }

    AI endpoints are reported as configured, not probed.
    """
    container = _container()
    database_ok = container.database.ping()
    return _success(
        {
            "status": "ok" if database_ok else "degraded",
            "database": "ok" if database_ok else "error",
            "aiServices": container.ai_client.endpoints,
            "timestamp": iso_now(),
        }
    )


@health_api.get("/ping")
@safe_route("Failed to handle ping request")
def ping() -> Response:
    return _success({"status": "ok", "timestamp": iso_now()})
