"""WSGI entry point for the AgriTech gateway.

``agritech_server:app`` is the WSGI callable for production servers;
``main()`` runs the Flask development server and backs the
``agritech-backend`` console script.
"""
from __future__ import annotations

import logging
import os

from agritech import create_app

app = create_app()


def _env_flag_true(name: str) -> bool:
    v = os.getenv(name)
    return bool(v and v.lower() in ("1", "true", "yes", "on"))


def main() -> int:
    host = os.getenv("AGRITECH_HOST", "0.0.0.0")
    port = int(os.getenv("AGRITECH_PORT", "3000"))
    debug = _env_flag_true("AGRITECH_DEBUG")

    logging.info("Starting server on %s:%s", host, port)

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
