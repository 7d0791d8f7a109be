"""
Soil Service
============
Soil analysis through the AI service, with the rule-based assessment from
:mod:`agritech.domain.soil_rules` when the service is unavailable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agritech.domain.exceptions import ServiceUnavailableError
from agritech.domain.soil_rules import basic_soil_recommendations
from agritech.schemas.soil import SoilAnalysisRequest, SoilAnalysisResult

if TYPE_CHECKING:
    from agritech.services.ai.ai_service_client import AIServiceClient

logger = logging.getLogger(__name__)


class SoilService:
    def __init__(self, ai_client: "AIServiceClient"):
        self.ai_client = ai_client

    def analyze_soil(self, request: SoilAnalysisRequest) -> SoilAnalysisResult:
        """Always returns a result; AI unavailability degrades to the offline rules."""
        try:
            return self.ai_client.analyze_soil(request)
        except ServiceUnavailableError as exc:
            logger.warning("Soil analysis falling back to offline rules: %s", exc)
            return basic_soil_recommendations(
                request.ph,
                request.nitrogen,
                request.phosphorus,
                request.potassium,
            )
