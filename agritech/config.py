"""
Configuration for the AgriTech gateway
======================================
Main application runtime settings and downstream AI service endpoints.
All values default from environment variables so the same build runs in
development, CI and production.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

DEFAULT_SECRET_KEY = "AgriTechDevSecretKey"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("AGRITECH_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("AGRITECH_SECRET_KEY", DEFAULT_SECRET_KEY))
    database_path: str = field(default_factory=lambda: os.getenv("AGRITECH_DATABASE_PATH", "database/agritech.db"))

    # HTTP surface
    api_prefix: str = field(default_factory=lambda: os.getenv("AGRITECH_API_PREFIX", "api/v1"))
    cors_origins: list[str] = field(default_factory=lambda: _env_list("AGRITECH_CORS_ORIGINS", "*"))
    enable_hsts: bool = field(default_factory=lambda: _env_bool("AGRITECH_ENABLE_HSTS", False))

    # Uploads (stored on local disk)
    upload_destination: str = field(default_factory=lambda: os.getenv("AGRITECH_UPLOAD_DESTINATION", "./uploads"))
    max_file_size: int = field(default_factory=lambda: _env_int("AGRITECH_MAX_FILE_SIZE", 5 * 1024 * 1024))
    allowed_image_types: list[str] = field(
        default_factory=lambda: _env_list("AGRITECH_ALLOWED_IMAGE_TYPES", "image/jpeg,image/png,image/jpg")
    )

    # Downstream AI microservices
    ai_disease_detection_url: str = field(
        default_factory=lambda: os.getenv("AI_DISEASE_DETECTION_URL", "http://localhost:8001")
    )
    ai_soil_analysis_url: str = field(default_factory=lambda: os.getenv("AI_SOIL_ANALYSIS_URL", "http://localhost:8002"))
    ai_assistant_url: str = field(default_factory=lambda: os.getenv("AI_ASSISTANT_URL", "http://localhost:8003"))
    ai_service_timeout_ms: int = field(default_factory=lambda: _env_int("AI_SERVICE_TIMEOUT", 30000))

    # Identity placeholder until the authentication collaborator sets a session user
    default_user_id: str = field(default_factory=lambda: os.getenv("AGRITECH_DEFAULT_USER_ID", "anonymous"))

    DEBUG: bool = field(default_factory=lambda: _env_bool("AGRITECH_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("AGRITECH_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("AGRITECH_LOG_FILE", "logs/agritech.log"))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.environment == "production" and self.secret_key == DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set AGRITECH_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        if self.ai_service_timeout_ms <= 0:
            raise ValueError("AI_SERVICE_TIMEOUT must be a positive number of milliseconds.")
        self.api_prefix = self.api_prefix.strip("/")

    @property
    def url_prefix(self) -> str:
        """Blueprint URL prefix derived from ``api_prefix`` (e.g. ``/api/v1``)."""
        return f"/{self.api_prefix}" if self.api_prefix else ""

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DATABASE_PATH": self.database_path,
            "UPLOAD_DESTINATION": self.upload_destination,
            # Multipart bodies carry form fields next to the image, leave some headroom
            "MAX_CONTENT_LENGTH": self.max_file_size + 1024 * 1024,
            "DEFAULT_USER_ID": self.default_user_id,
            "API_URL_PREFIX": self.url_prefix,
            "DEBUG": self.DEBUG,
        }


def load_config() -> AppConfig:
    """Load configuration from the current environment."""
    return AppConfig()


def setup_logging(debug: bool = False, *, level: str | None = None, log_file: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName((level or "INFO").upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(log_level)

    # Avoid duplicate handlers when create_app is called multiple times (tests)
    has_console = any(getattr(h, "name", "") == "agritech_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "agritech_file" for h in root.handlers)
    added_handler = False

    # Console handler (UTF-8 so French/Wolof/Pulaar text does not break on Windows terminals)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "agritech_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file and log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "agritech_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"agritech_console", "agritech_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("AGRITECH_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
    # requests/urllib3 log every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
