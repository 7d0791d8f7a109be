"""
Assistant Schemas
=================

Pydantic models for the conversational assistant. Exchanges are not persisted.
"""

from pydantic import Field

from agritech.schemas.common import CamelModel, StrictCamelModel


class AskAssistantRequest(StrictCamelModel):
    question: str = Field(
        ...,
        min_length=1,
        max_length=500,
        examples=["Comment puis-je traiter les taches jaunes sur mon mil ?"],
    )
    # Free-form: unknown languages get the bare generic fallback. None means French.
    language: str | None = Field(default=None, max_length=10)
    context: str | None = Field(default=None, max_length=1000, examples=["Culture: Mil, Région: Thiès"])


class AssistantResult(CamelModel):
    answer: str
    audio_text: str | None = Field(default=None, description="Text formatted for text-to-speech")
    related_topics: list[str] | None = None
