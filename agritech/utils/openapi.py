"""OpenAPI 3.1 spec generator: discovers Flask routes and Pydantic schemas.

The document is generated from:
  • Flask's ``url_map``  (paths, methods, path-parameter types)
  • Route-function docstrings (summary / description)
  • Pydantic v2 ``model_json_schema()`` for every model exported by
    :mod:`agritech.schemas` (request bodies reference them by ``$ref``)
"""

from __future__ import annotations

import inspect
import re
from typing import Any

from flask import Flask
from pydantic import BaseModel

import agritech.schemas as schema_pkg

_PARAM_RE = re.compile(r"<(?:(\w+):)?(\w+)>")
"""Matches Flask path-parameter syntax  ``<type:name>`` or ``<name>``."""

_FLASK_TYPE_MAP: dict[str, dict[str, Any]] = {
    "int": {"type": "integer"},
    "float": {"type": "number", "format": "float"},
    "string": {"type": "string"},
    "path": {"type": "string"},
    "uuid": {"type": "string", "format": "uuid"},
    "": {"type": "string"},  # default when no converter is given
}

_TAG_DISPLAY: dict[str, str] = {
    "diagnosis_api": "Diagnosis",
    "soil_api": "Soil",
    "assistant_api": "Assistant",
    "health_api": "Health",
}

# endpoint -> (content type, request schema, success status)
_OPERATIONS: dict[str, tuple[str, str, str]] = {
    "diagnosis_api.create_crop_disease_diagnosis": ("multipart/form-data", "CreateDiagnosisRequest", "201"),
    "soil_api.analyze_soil": ("application/json", "SoilAnalysisRequest", "200"),
    "assistant_api.ask_assistant": ("application/json", "AskAssistantRequest", "200"),
}

_IMAGE_PART: dict[str, Any] = {
    "type": "object",
    "required": ["image"],
    "properties": {"image": {"type": "string", "format": "binary"}},
}

# endpoint -> response schema
_RESPONSES: dict[str, str] = {
    "diagnosis_api.create_crop_disease_diagnosis": "DiagnosisRecord",
    "diagnosis_api.get_diagnosis": "DiagnosisRecord",
    "diagnosis_api.get_diagnosis_statistics": "DiagnosisStatistics",
    "soil_api.analyze_soil": "SoilAnalysisResult",
    "assistant_api.ask_assistant": "AssistantResult",
}


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _envelope(data_schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "ok": {"type": "boolean"},
            "data": data_schema,
            "error": {"type": ["object", "null"]},
        },
    }


def _flask_path_to_openapi(rule_path: str, prefix: str) -> str:
    """``/api/v1/diagnosis/<diagnosis_id>``  →  ``/diagnosis/{diagnosis_id}``."""
    path = rule_path
    if prefix and path.startswith(prefix):
        path = path[len(prefix):] or "/"
    return _PARAM_RE.sub(r"{\2}", path)


def _path_parameters(rule) -> list[dict[str, Any]]:
    params: list[dict[str, Any]] = []
    for match in _PARAM_RE.finditer(rule.rule):
        converter = match.group(1) or ""
        params.append(
            {
                "name": match.group(2),
                "in": "path",
                "required": True,
                "schema": dict(_FLASK_TYPE_MAP.get(converter, {"type": "string"})),
            }
        )
    return params


def _extract_summary_description(view_func) -> tuple[str, str]:
    """Return ``(summary, description)`` from a view function's docstring."""
    if not view_func or not view_func.__doc__:
        return "", ""
    lines = view_func.__doc__.strip().splitlines()
    summary = lines[0].strip().rstrip(".")
    desc_lines = [ln.strip() for ln in lines[1:] if ln.strip()]
    return summary, "\n".join(desc_lines)


def collect_schemas() -> dict[str, Any]:
    """JSON Schema for every Pydantic model exported by ``agritech.schemas``."""
    schemas: dict[str, Any] = {}
    for name in dir(schema_pkg):
        obj = getattr(schema_pkg, name, None)
        if not (inspect.isclass(obj) and issubclass(obj, BaseModel)):
            continue
        json_schema = obj.model_json_schema(ref_template="#/components/schemas/{model}")
        # Flatten $defs into top-level components
        defs = json_schema.pop("$defs", {})
        schemas[name] = json_schema
        for def_name, def_schema in defs.items():
            schemas.setdefault(def_name, def_schema)
    return schemas


def generate_openapi_spec(app: Flask, prefix: str) -> dict[str, Any]:
    """Return a complete OpenAPI 3.1 dict for the routes under *prefix*."""
    spec: dict[str, Any] = {
        "openapi": "3.1.0",
        "info": {
            "title": "AgriTech Gateway API",
            "version": "1.0.0",
            "description": (
                "Crop-disease diagnosis, soil analysis and a farming assistant "
                "backed by external AI services."
            ),
        },
        "servers": [{"url": prefix or "/", "description": "API v1 (current)"}],
        "tags": [],
        "paths": {},
        "components": {"schemas": {}},
    }

    seen_tags: dict[str, str] = {}
    paths: dict[str, dict[str, Any]] = {}
    docs_prefix = f"{prefix}/docs"

    for rule in app.url_map.iter_rules():
        if not rule.rule.startswith(prefix or "/") or rule.rule.startswith(docs_prefix):
            continue

        openapi_path = _flask_path_to_openapi(rule.rule, prefix)
        parts = rule.endpoint.split(".")
        tag_key = parts[0] if len(parts) > 1 else "default"
        seen_tags.setdefault(tag_key, _TAG_DISPLAY.get(tag_key, tag_key.replace("_", " ").title()))

        view_func = app.view_functions.get(rule.endpoint)
        summary, description = _extract_summary_description(view_func)
        success_status = _OPERATIONS.get(rule.endpoint, ("", "", "200"))[2]
        response_schema = _RESPONSES.get(rule.endpoint)

        for method in sorted(rule.methods - {"HEAD", "OPTIONS"}):
            method_lower = method.lower()
            operation: dict[str, Any] = {
                "tags": [seen_tags[tag_key]],
                "summary": summary or rule.endpoint.replace(".", " ").replace("_", " ").title(),
                "operationId": f"{method_lower}_{rule.endpoint.replace('.', '_')}",
                "responses": {
                    success_status: {
                        "description": "Successful response",
                        "content": {
                            "application/json": {
                                "schema": _envelope(_ref(response_schema) if response_schema else {"type": "object"})
                            }
                        },
                    },
                    "400": {"description": "Bad request"},
                    "404": {"description": "Not found"},
                    "500": {"description": "Internal server error"},
                },
            }
            if description:
                operation["description"] = description

            params = _path_parameters(rule)
            if params:
                operation["parameters"] = params

            if rule.endpoint in _OPERATIONS:
                content_type, schema_name, _status = _OPERATIONS[rule.endpoint]
                body_schema: dict[str, Any] = _ref(schema_name)
                if content_type == "multipart/form-data":
                    body_schema = {"allOf": [body_schema, _IMAGE_PART]}
                    # Diagnosis has no offline fallback
                    operation["responses"]["413"] = {"description": "Image file is too large"}
                    operation["responses"]["503"] = {"description": "Disease detection service unavailable"}
                operation["requestBody"] = {"required": True, "content": {content_type: {"schema": body_schema}}}

            paths.setdefault(openapi_path, {})[method_lower] = operation

    spec["paths"] = dict(sorted(paths.items()))
    spec["tags"] = sorted(
        [{"name": display, "description": f"Endpoints for {display}"} for display in seen_tags.values()],
        key=lambda t: t["name"],
    )
    spec["components"]["schemas"] = collect_schemas()
    return spec
