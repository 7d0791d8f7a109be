"""
Application Enumerations
========================
"""

from agritech.enums.common import (
    DEFAULT_LANGUAGE,
    DiagnosisStatus,
    FertilizerNeed,
    Language,
    RecommendationPriority,
    Severity,
    SoilQuality,
)

__all__ = [
    "DEFAULT_LANGUAGE",
    "DiagnosisStatus",
    "FertilizerNeed",
    "Language",
    "RecommendationPriority",
    "Severity",
    "SoilQuality",
]
