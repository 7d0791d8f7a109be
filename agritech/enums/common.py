"""
Common Enumerations
====================

Enums shared by the diagnosis, soil and assistant flows. Values are the
exact strings exchanged with clients and with the AI microservices.
"""

from enum import Enum, IntEnum


class Language(str, Enum):
    """
    Languages the platform answers in.
    fr = French, wo = Wolof, ff = Pulaar.
    """
    FRENCH = "fr"
    WOLOF = "wo"
    PULAAR = "ff"

    def __str__(self) -> str:
        return self.value


DEFAULT_LANGUAGE = Language.FRENCH


class Severity(str, Enum):
    """Disease impact classification."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class DiagnosisStatus(str, Enum):
    """Lifecycle of a stored diagnosis."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class SoilQuality(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"

    def __str__(self) -> str:
        return self.value


class FertilizerNeed(str, Enum):
    """
    Per-nutrient fertilizer need, labelled in French (the operating language).
    Faible = low, Moyen = medium, Élevé = high.
    """
    LOW = "Faible"
    MEDIUM = "Moyen"
    HIGH = "Élevé"

    def __str__(self) -> str:
        return self.value


class RecommendationPriority(IntEnum):
    URGENT = 1
    IMPORTANT = 2
    OPTIONAL = 3
