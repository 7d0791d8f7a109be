"""
API Schemas
===========

Pydantic models for request/response validation, grouped by concern.
"""

from agritech.schemas.assistant import AskAssistantRequest, AssistantResult
from agritech.schemas.common import CamelModel, StrictCamelModel
from agritech.schemas.diagnosis import (
    AIModelMetadata,
    AlternativeDisease,
    CreateDiagnosisRequest,
    DiagnosisFilter,
    DiagnosisRecord,
    DiagnosisStatistics,
    DiseaseDetectionResult,
    DistributionEntry,
    Recommendation,
)
from agritech.schemas.soil import (
    FertilizerNeeds,
    SoilAnalysisRequest,
    SoilAnalysisResult,
    SoilRecommendation,
)

__all__ = [
    "AIModelMetadata",
    "AlternativeDisease",
    "AskAssistantRequest",
    "AssistantResult",
    "CamelModel",
    "CreateDiagnosisRequest",
    "DiagnosisFilter",
    "DiagnosisRecord",
    "DiagnosisStatistics",
    "DiseaseDetectionResult",
    "DistributionEntry",
    "FertilizerNeeds",
    "Recommendation",
    "SoilAnalysisRequest",
    "SoilAnalysisResult",
    "SoilRecommendation",
    "StrictCamelModel",
]
