"""API documentation blueprint: serves the OpenAPI document and Swagger UI.

- GET /docs              - Swagger UI
- GET /docs/openapi.json - raw OpenAPI document
"""

from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, url_for

from agritech.utils.http import safe_route

docs_api = Blueprint("docs_api", __name__)

# The page pulls swagger-ui from unpkg, which the API-wide policy forbids
_DOCS_CSP = (
    "default-src 'none'; "
    "script-src 'unsafe-inline' https://unpkg.com; "
    "style-src 'unsafe-inline' https://unpkg.com; "
    "img-src 'self' data: https://unpkg.com; "
    "connect-src 'self'"
)

_SWAGGER_HTML = """\
<!DOCTYPE html>
<html lang="fr">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>AgriTech API Documentation</title>
  <link
    rel="stylesheet"
    href="https://unpkg.com/swagger-ui-dist@5.18.2/swagger-ui.css"
    crossorigin="anonymous"
  />
  <style>
    body {{ margin: 0; background: #fafafa; }}
    .topbar {{ display: none !important; }}
  </style>
</head>
<body>
  <div id="swagger-ui"></div>
  <script
    src="https://unpkg.com/swagger-ui-dist@5.18.2/swagger-ui-bundle.js"
    crossorigin="anonymous"
  ></script>
  <script>
    SwaggerUIBundle({{
      url: '{spec_url}',
      dom_id: '#swagger-ui',
      deepLinking: true,
    }});
  </script>
</body>
</html>
"""


@docs_api.get("")
@safe_route("Failed to serve API documentation")
def swagger_ui() -> Response:
    """Serve the Swagger UI single-page application."""
    html = _SWAGGER_HTML.format(spec_url=url_for("docs_api.openapi_spec"))
    return html, 200, {"Content-Type": "text/html; charset=utf-8", "Content-Security-Policy": _DOCS_CSP}


@docs_api.get("/openapi.json")
@safe_route("Failed to generate OpenAPI document")
def openapi_spec() -> Response:
    """Return the OpenAPI document for the gateway as JSON."""
    from agritech.utils.openapi import generate_openapi_spec

    return jsonify(generate_openapi_spec(current_app, current_app.config.get("API_URL_PREFIX", "")))
