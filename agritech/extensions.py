"""Flask Extension Instances and Initialisation."""

import logging

from flask import Flask
from flask_compress import Compress
from flask_cors import CORS

# Flask-Compress instance: compresses JSON responses with gzip/brotli
compress = Compress()
cors = CORS()


def init_extensions(app: Flask, cors_origins: list[str] | str) -> None:
    """Initialise Flask extension objects."""
    origins = cors_origins if cors_origins else "*"

    # Diagnosis history pages can be large; clients are often on mobile data
    app.config.setdefault(
        "COMPRESS_MIMETYPES",
        [
            "text/plain",
            "application/json",
        ],
    )
    app.config.setdefault("COMPRESS_MIN_SIZE", 256)  # Don't compress tiny responses
    compress.init_app(app)

    cors.init_app(app, resources={r"/*": {"origins": origins}})
    logging.info("CORS initialized with origins: %s", origins)
