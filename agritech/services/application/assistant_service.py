"""
Assistant Service
=================
Question answering through the assistant AI service. When the service is
unavailable the caller still gets an answer from the canned
keyword-matched responses in :mod:`agritech.domain.assistant_fallback`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agritech.domain.assistant_fallback import fallback_response
from agritech.domain.exceptions import ServiceUnavailableError
from agritech.enums import DEFAULT_LANGUAGE
from agritech.schemas.assistant import AssistantResult

if TYPE_CHECKING:
    from agritech.services.ai.ai_service_client import AIServiceClient

logger = logging.getLogger(__name__)


class AssistantService:
    def __init__(self, ai_client: "AIServiceClient"):
        self.ai_client = ai_client

    def get_answer(
        self,
        question: str,
        language: str | None = DEFAULT_LANGUAGE.value,
        context: str | None = None,
    ) -> AssistantResult:
        language = language or DEFAULT_LANGUAGE.value
        try:
            return self.ai_client.ask_assistant(question, language, context)
        except ServiceUnavailableError as exc:
            logger.warning("Assistant falling back to canned answers (%s): %s", language, exc)
            return fallback_response(question, language)
