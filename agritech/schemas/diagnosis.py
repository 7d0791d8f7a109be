"""
Diagnosis Schemas
=================

Pydantic models for crop-disease diagnosis requests, the disease-detection
AI contract and stored diagnosis records.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agritech.enums import DEFAULT_LANGUAGE, DiagnosisStatus, Language, Severity
from agritech.schemas.common import CamelModel, StrictCamelModel
from infrastructure.database.pagination import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT, MIN_OFFSET


class Recommendation(CamelModel):
    """Advice attached to a diagnosis. Owned by its diagnosis, no identity of its own."""

    type: str = Field(..., description="treatment, prevention, cultural_practice, ...")
    title: str
    description: str
    priority: int = Field(..., ge=1, le=3, description="1 = urgent, 2 = important, 3 = optional")
    audio_text: str | None = Field(default=None, description="Text formatted for text-to-speech")


class AlternativeDisease(CamelModel):
    name: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class AIModelMetadata(CamelModel):
    model_version: str | None = None
    processing_time: float | None = None
    alternative_diseases: list[AlternativeDisease] | None = None


class DiseaseDetectionResult(BaseModel):
    """Payload returned by the disease-detection microservice."""

    model_config = ConfigDict(protected_namespaces=())

    disease_name: str
    disease_name_local: str | None = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    severity: Severity
    description: str = ""
    recommendations: list[Recommendation] = Field(default_factory=list)
    alternative_diseases: list[AlternativeDisease] | None = None
    model_version: str | None = None
    processing_time: float | None = None


class CreateDiagnosisRequest(StrictCamelModel):
    """Structured fields submitted next to the crop image."""

    crop_type: str = Field(..., min_length=1, max_length=100, examples=["Mil (Souna)"])
    crop_age_days: int = Field(..., ge=1, le=365, examples=[45])
    region: str = Field(..., min_length=1, max_length=100, examples=["Thiès"])
    symptoms: list[str] = Field(..., min_length=1, examples=[["Taches jaunes sur feuilles", "Feuilles sèches"]])
    language: Language = DEFAULT_LANGUAGE

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, value: Any) -> Any:
        # Optional form fields arrive as empty strings
        if value is None or value == "":
            return DEFAULT_LANGUAGE
        return value

    @field_validator("symptoms", mode="before")
    @classmethod
    def _split_symptoms(cls, value: Any) -> Any:
        # Multipart forms send one comma-separated string
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [s.strip() for s in value if isinstance(s, str) and s.strip()]
        return value


class DiagnosisFilter(CamelModel):
    """History query parameters."""

    crop_type: str | None = None
    region: str | None = None
    limit: int = Field(default=DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)
    offset: int = Field(default=MIN_OFFSET, ge=MIN_OFFSET)


class DiagnosisRecord(CamelModel):
    """A persisted diagnosis. Immutable once written except for ``status``."""

    id: str
    user_id: str
    crop_type: str
    crop_age_days: int = Field(..., ge=1, le=365)
    region: str
    symptoms: list[str] = Field(..., min_length=1)
    image_url: str
    image_path: str | None = Field(default=None, exclude=True)
    disease_name: str
    disease_name_local: str | None = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    severity: Severity
    description: str = ""
    recommendations: list[Recommendation] = Field(default_factory=list)
    language: Language = Language.FRENCH
    ai_model_metadata: AIModelMetadata = Field(default_factory=AIModelMetadata)
    status: DiagnosisStatus = DiagnosisStatus.PENDING
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "DiagnosisRecord":
        """Build a record from a repository row (JSON columns still encoded)."""
        data = dict(row)
        for key in ("symptoms", "recommendations", "ai_model_metadata"):
            if isinstance(data.get(key), str):
                data[key] = json.loads(data[key])
        if data.get("ai_model_metadata") is None:
            data["ai_model_metadata"] = {}
        return cls.model_validate(data)


class DistributionEntry(CamelModel):
    name: str | None
    count: int


class DiagnosisStatistics(CamelModel):
    """Aggregates over one user's diagnoses."""

    total_diagnoses: int
    disease_distribution: list[DistributionEntry]
    crop_distribution: list[DistributionEntry]
    average_confidence: float
