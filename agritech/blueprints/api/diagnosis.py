"""
Diagnosis API Routes

Crop-disease diagnosis: image submission, history, statistics and lookup.

Routes:
- POST /diagnosis/crop-disease   - Multipart image + crop context, returns the stored diagnosis
- GET  /diagnosis/history        - Caller's diagnoses, newest first
- GET  /diagnosis/stats/overview - Aggregates over the caller's diagnoses
- GET  /diagnosis/<diagnosis_id> - Single diagnosis
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from agritech.blueprints.api._common import (
    fail as _fail,
    get_diagnosis_service as _diagnosis_service,
    get_upload_storage as _upload_storage,
    get_user_id,
    parse_body,
    success as _success,
)
from agritech.domain.exceptions import NotFoundError
from agritech.schemas.diagnosis import CreateDiagnosisRequest, DiagnosisFilter
from agritech.utils.http import safe_route

logger = logging.getLogger(__name__)

diagnosis_api = Blueprint("diagnosis_api", __name__)


@diagnosis_api.post("/crop-disease")
@safe_route("Failed to create diagnosis")
def create_crop_disease_diagnosis() -> Response:
    """
    Submit a crop image for disease detection.

    Multipart form:
        image: JPEG/PNG file (required, max MAX_FILE_SIZE)
        cropType | crop_type: "Mil (Souna)"
        cropAgeDays | crop_age_days: 45
        region: "Thiès"
        symptoms: "Taches jaunes sur feuilles, Feuilles sèches"
        language: fr | wo | ff (default fr)

    Returns:
        201 with the stored diagnosis; 503 when the detection service is down.
    """
    payload = parse_body(CreateDiagnosisRequest, request.form.to_dict())

    storage = _upload_storage()
    image = storage.save(request.files.get("image"))
    try:
        record = _diagnosis_service().create_diagnosis(payload, image, get_user_id())
    except Exception:
        # No diagnosis was stored, so the image would be orphaned
        storage.delete(image.path)
        raise

    return _success(record.to_response(), 201)


@diagnosis_api.get("/history")
@safe_route("Failed to get diagnosis history")
def get_diagnosis_history() -> Response:
    """
    Caller's diagnoses, newest first.

    Query params:
        cropType, region: exact-match filters
        limit: 1..100 (default 20)
        offset: >= 0 (default 0)
    """
    filters = parse_body(DiagnosisFilter, request.args.to_dict())
    records = _diagnosis_service().get_user_diagnoses(get_user_id(), filters)
    return _success([record.to_response() for record in records])


@diagnosis_api.get("/stats/overview")
@safe_route("Failed to get diagnosis statistics")
def get_diagnosis_statistics() -> Response:
    stats = _diagnosis_service().get_statistics(get_user_id())
    return _success(stats.to_response())


@diagnosis_api.get("/<diagnosis_id>")
@safe_route("Failed to get diagnosis")
def get_diagnosis(diagnosis_id: str) -> Response:
    record = _diagnosis_service().get_diagnosis_by_id(diagnosis_id)
    if record is None:
        raise NotFoundError(f"Diagnosis {diagnosis_id} not found")
    return _success(record.to_response())


@diagnosis_api.errorhandler(413)
def _image_too_large(_exc) -> Response:
    return _fail("Image file is too large", 413)
