"""
Assistant API Routes

- POST /assistant/ask - Farming question in fr/wo/ff. Canned answers stand in
  when the assistant service is unavailable.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from agritech.blueprints.api._common import get_assistant_service as _assistant_service, parse_body, success as _success
from agritech.schemas.assistant import AskAssistantRequest
from agritech.utils.http import safe_route

logger = logging.getLogger(__name__)

assistant_api = Blueprint("assistant_api", __name__)


@assistant_api.post("/ask")
@safe_route("Failed to answer question")
def ask_assistant() -> Response:
    payload = parse_body(AskAssistantRequest)
    result = _assistant_service().get_answer(payload.question, payload.language, payload.context)
    return _success(result.to_response())
