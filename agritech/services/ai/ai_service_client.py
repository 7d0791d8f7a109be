"""
AI Service Client
=================

Single point of outbound contact with the three AI microservices:

- disease detection  ``POST {AI_DISEASE_DETECTION_URL}/detect``  (multipart)
- soil analysis      ``POST {AI_SOIL_ANALYSIS_URL}/analyze``     (JSON)
- assistant Q&A      ``POST {AI_ASSISTANT_URL}/ask``             (JSON)

Each endpoint owns its own ``requests.Session`` so connection pools are
never shared: a hung or failing endpoint cannot starve the other two.

Every transport failure (timeout, refused connection, DNS error, non-2xx
status, undecodable or malformed body) is raised as
:class:`~agritech.domain.exceptions.ServiceUnavailableError`. There is no
retry; callers decide between a fallback and surfacing the error.
"""

from __future__ import annotations

import json
import logging
import mimetypes
import os
from typing import Any, Sequence, Type, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from agritech.domain.exceptions import ServiceUnavailableError
from agritech.enums import DEFAULT_LANGUAGE
from agritech.schemas.assistant import AssistantResult
from agritech.schemas.diagnosis import DiseaseDetectionResult
from agritech.schemas.soil import SoilAnalysisRequest, SoilAnalysisResult

logger = logging.getLogger(__name__)

DISEASE_DETECTION = "disease-detection"
SOIL_ANALYSIS = "soil-analysis"
ASSISTANT = "assistant"

DEFAULT_TIMEOUT_MS = 30000

ModelT = TypeVar("ModelT", bound=BaseModel)


class AIServiceClient:
    """Thin HTTP client over the disease, soil and assistant AI endpoints."""

    def __init__(
        self,
        disease_detection_url: str,
        soil_analysis_url: str,
        assistant_url: str,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._base_urls = {
            DISEASE_DETECTION: (disease_detection_url or "").rstrip("/"),
            SOIL_ANALYSIS: (soil_analysis_url or "").rstrip("/"),
            ASSISTANT: (assistant_url or "").rstrip("/"),
        }
        self._sessions = {service: requests.Session() for service in self._base_urls}
        self.timeout = timeout_ms / 1000.0

        logger.info(
            "AIServiceClient initialized (disease=%s, soil=%s, assistant=%s, timeout=%.1fs)",
            self._base_urls[DISEASE_DETECTION] or "-",
            self._base_urls[SOIL_ANALYSIS] or "-",
            self._base_urls[ASSISTANT] or "-",
            self.timeout,
        )

    @property
    def endpoints(self) -> dict[str, str]:
        """Configured base URL per service name."""
        return dict(self._base_urls)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def detect_disease(
        self,
        image_path: str,
        crop_type: str,
        crop_age_days: int,
        region: str,
        symptoms: Sequence[str],
        language: str = DEFAULT_LANGUAGE.value,
    ) -> DiseaseDetectionResult:
        """Send a crop image plus context to the disease-detection service.

        The image is read from *image_path*, where the upload layer already
        stored it. ``symptoms`` travels as a JSON array string.
        """
        form = {
            "crop_type": crop_type,
            "crop_age_days": str(crop_age_days),
            "region": region,
            "symptoms": json.dumps(list(symptoms), ensure_ascii=False),
            "language": str(language),
        }
        # Fail on configuration before touching the file
        self._url(DISEASE_DETECTION, "/detect")
        content_type = mimetypes.guess_type(image_path)[0] or "application/octet-stream"
        try:
            with open(image_path, "rb") as image:
                files = {"image": (os.path.basename(image_path), image, content_type)}
                payload = self._post(DISEASE_DETECTION, "/detect", data=form, files=files)
        except OSError as exc:
            # Unreadable image: the service cannot be consulted
            logger.error("Cannot read image %s for disease detection: %s", image_path, exc)
            raise ServiceUnavailableError(DISEASE_DETECTION, detail={"reason": "image unreadable"}) from exc

        return self._parse(DISEASE_DETECTION, payload, DiseaseDetectionResult)

    def analyze_soil(self, request: SoilAnalysisRequest) -> SoilAnalysisResult:
        payload = self._post(SOIL_ANALYSIS, "/analyze", json=request.to_ai_payload())
        return self._parse(SOIL_ANALYSIS, payload, SoilAnalysisResult)

    def ask_assistant(
        self,
        question: str,
        language: str = DEFAULT_LANGUAGE.value,
        context: str | None = None,
    ) -> AssistantResult:
        body: dict[str, Any] = {"question": question, "language": str(language)}
        if context is not None:
            body["context"] = context
        payload = self._post(ASSISTANT, "/ask", json=body)
        return self._parse(ASSISTANT, payload, AssistantResult)

    def close(self) -> None:
        """Close the underlying HTTP sessions."""
        for session in self._sessions.values():
            session.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _url(self, service: str, path: str) -> str:
        base_url = self._base_urls[service]
        if not base_url:
            logger.warning("No URL configured for AI service '%s'", service)
            raise ServiceUnavailableError(service, detail={"reason": "not configured"})
        return f"{base_url}{path}"

    def _post(self, service: str, path: str, **kwargs: Any) -> Any:
        url = self._url(service, path)
        logger.debug("POST %s", url)
        try:
            response = self._sessions[service].post(url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.Timeout as exc:
            logger.warning("AI service '%s' timed out after %.1fs", service, self.timeout)
            raise ServiceUnavailableError(service, detail={"reason": "timeout"}) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            logger.warning("AI service '%s' answered HTTP %s", service, status)
            raise ServiceUnavailableError(service, detail={"reason": "http_error", "status": status}) from exc
        except requests.RequestException as exc:
            logger.warning("AI service '%s' unreachable: %s", service, exc)
            raise ServiceUnavailableError(service, detail={"reason": "connection"}) from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.warning("AI service '%s' returned a non-JSON body", service)
            raise ServiceUnavailableError(service, detail={"reason": "invalid_body"}) from exc

    @staticmethod
    def _parse(service: str, payload: Any, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            logger.warning("AI service '%s' returned an unexpected payload: %s", service, exc)
            raise ServiceUnavailableError(service, detail={"reason": "invalid_body"}) from exc
