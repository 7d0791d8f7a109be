from __future__ import annotations

import atexit
import logging
import os
import threading
from typing import Any

from flask import Flask, Response, send_from_directory
from werkzeug.exceptions import HTTPException

from agritech.blueprints.api.assistant import assistant_api
from agritech.blueprints.api.diagnosis import diagnosis_api
from agritech.blueprints.api.docs import docs_api
from agritech.blueprints.api.health import health_api
from agritech.blueprints.api.soil import soil_api
from agritech.config import load_config, setup_logging
from agritech.extensions import init_extensions
from agritech.middleware.security_headers import init_security_headers
from agritech.services.utilities.upload_storage import PUBLIC_URL_PREFIX

# Stored images never change once written
UPLOAD_CACHE_SECONDS = 86400


def create_app(config_overrides: dict[str, Any] | None = None) -> Flask:
    config = load_config()
    if config_overrides:
        for key, value in config_overrides.items():
            setattr(config, key.lower(), value)
        # Re-run validation and normalisation on the overridden values
        config.__post_init__()

    setup_logging(debug=config.DEBUG, level=config.log_level, log_file=config.log_file)

    flask_app = Flask(__name__, static_folder=None)
    flask_app.config.update(config.as_flask_config())
    flask_app.config["SESSION_COOKIE_HTTPONLY"] = True
    flask_app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    flask_app.config["SESSION_COOKIE_SECURE"] = config.environment == "production"
    # Keep non-ASCII crop names and answers readable in JSON bodies
    flask_app.json.ensure_ascii = False

    init_extensions(flask_app, config.cors_origins)

    from agritech.services.container import ServiceContainer

    container = ServiceContainer.build(config)
    flask_app.config["CONTAINER"] = container

    # ── Graceful shutdown ───────────────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    atexit.register(_graceful_shutdown, "atexit")
    flask_app.extensions["agritech_shutdown"] = _graceful_shutdown

    # Initialize security response headers (nosniff, frame options, referrer policy)
    init_security_headers(flask_app, enable_hsts=config.enable_hsts)

    # Global JSON error handler. Every route is an API route, so unhandled
    # exceptions get the envelope instead of an HTML page or a stack trace.
    # Domain exceptions carry their own ``http_status``.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        from agritech.domain.exceptions import AgriTechError
        from agritech.utils.http import domain_error_response, error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, AgriTechError):
            return domain_error_response(exc, context=type(exc).__name__)

        return safe_error(exc, 500, context="unhandled")

    @flask_app.errorhandler(413)
    def _handle_too_large(_exc):
        from agritech.utils.http import error_response

        return error_response("Request payload too large", 413)

    # ── API prefix ─────────────────────────────────────────────────
    prefix = config.url_prefix
    flask_app.register_blueprint(diagnosis_api, url_prefix=f"{prefix}/diagnosis")
    flask_app.register_blueprint(soil_api, url_prefix=f"{prefix}/soil")
    flask_app.register_blueprint(assistant_api, url_prefix=f"{prefix}/assistant")
    flask_app.register_blueprint(health_api, url_prefix=f"{prefix}/health")
    flask_app.register_blueprint(docs_api, url_prefix=f"{prefix}/docs")

    # Public image URLs returned in diagnoses (``/uploads/<filename>``)
    upload_dir = os.path.abspath(config.upload_destination)

    @flask_app.get(f"{PUBLIC_URL_PREFIX}/<path:filename>")
    def serve_upload(filename: str) -> Response:
        return send_from_directory(upload_dir, filename, max_age=UPLOAD_CACHE_SECONDS)

    for bp_name in flask_app.blueprints:
        logging.info(" Registered blueprint: %s", bp_name)

    logger = logging.getLogger(__name__)
    logger.info("AgriTech gateway initialized (API prefix %s).", prefix or "/")

    return flask_app


__all__ = ["create_app"]
