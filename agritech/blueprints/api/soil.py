"""
Soil Analysis API Routes

- POST /soil/analyze - Soil quality, recommendations, suitable crops and fertilizer needs.
  Always answers 200 for valid input: the offline rules cover an unavailable AI service.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from agritech.blueprints.api._common import get_soil_service as _soil_service, parse_body, success as _success
from agritech.schemas.soil import SoilAnalysisRequest
from agritech.utils.http import safe_route

logger = logging.getLogger(__name__)

soil_api = Blueprint("soil_api", __name__)


@soil_api.post("/analyze")
@safe_route("Failed to analyze soil")
def analyze_soil() -> Response:
    """
    Request body:
    {
        "ph": 6.5,
        "nitrogen": 45,
        "phosphorus": 30,
        "potassium": 120,
        "temperature": 28,
        "humidity": 35,
        "region": "Thiès",
        "cropType": "Arachide",   // Optional
        "language": "fr"          // Optional
    }
    """
    payload = parse_body(SoilAnalysisRequest)
    result = _soil_service().analyze_soil(payload)
    return _success(result.to_response())
