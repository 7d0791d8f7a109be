"""
Offline Soil Rules
==================
Rule-of-thumb soil assessment used when the soil-analysis AI service is
unreachable. The result is a pure function of (ph, nitrogen, phosphorus,
potassium): the same inputs always give the same quality, recommendations
and fertilizer-need labels.

Thresholds
----------
::

    pH        < 5.5 acidic (poor) | 6.0..7.0 good | > 7.5 alkaline (poor) | else fair
    Nitrogen  < 30 high need      | < 60 medium   | else low
    Phosphorus< 20 high need      | < 40 medium   | else low
    Potassium < 80 high need      | < 150 medium  | else low

The pH comparisons are strict at 5.5 and 7.5 and inclusive at 6.0 and 7.0.
"""

from __future__ import annotations

from typing import List, Tuple

from agritech.enums import FertilizerNeed, RecommendationPriority, SoilQuality
from agritech.schemas.soil import FertilizerNeeds, SoilAnalysisResult, SoilRecommendation

PH_ACIDIC_BELOW = 5.5
PH_ALKALINE_ABOVE = 7.5
PH_OPTIMAL_RANGE = (6.0, 7.0)

NITROGEN_LOW = 30
PHOSPHORUS_LOW = 20
POTASSIUM_LOW = 80

# (high-need below, medium-need below) in mg/kg
NITROGEN_NEED_BANDS = (30, 60)
PHOSPHORUS_NEED_BANDS = (20, 40)
POTASSIUM_NEED_BANDS = (80, 150)

CROPS_OPTIMAL_PH: List[str] = ["Maïs", "Tomate", "Oignon", "Haricot"]
CROPS_ACIDIC_PH: List[str] = ["Manioc", "Patate douce", "Ananas"]
CROPS_ALKALINE_PH: List[str] = ["Mil", "Sorgho"]

MSG_TOO_ACIDIC = "Le sol est trop acide. Ajouter de la chaux pour augmenter le pH."
MSG_TOO_ALKALINE = "Le sol est trop alcalin. Ajouter du soufre ou du compost."
MSG_LOW_NITROGEN = "Azote faible. Appliquer un engrais riche en azote (urée ou compost)."
MSG_LOW_PHOSPHORUS = "Phosphore faible. Appliquer du phosphate naturel ou du fumier."
MSG_LOW_POTASSIUM = "Potassium faible. Utiliser de la cendre de bois ou du chlorure de potassium."


def _in_optimal_ph(ph: float) -> bool:
    low, high = PH_OPTIMAL_RANGE
    return low <= ph <= high


def fertilizer_need(value: float, bands: Tuple[float, float]) -> FertilizerNeed:
    """Three-tier need label: below the first band is high, below the second medium."""
    high_below, medium_below = bands
    if value < high_below:
        return FertilizerNeed.HIGH
    if value < medium_below:
        return FertilizerNeed.MEDIUM
    return FertilizerNeed.LOW


def suitable_crops(ph: float) -> List[str]:
    if _in_optimal_ph(ph):
        return list(CROPS_OPTIMAL_PH)
    if ph < PH_OPTIMAL_RANGE[0]:
        return list(CROPS_ACIDIC_PH)
    return list(CROPS_ALKALINE_PH)


def basic_soil_recommendations(
    ph: float,
    nitrogen: float,
    phosphorus: float,
    potassium: float,
) -> SoilAnalysisResult:
    """Assess soil from pH and NPK without the AI service."""
    quality = SoilQuality.FAIR
    recommendations: List[SoilRecommendation] = []

    if ph < PH_ACIDIC_BELOW or ph > PH_ALKALINE_ABOVE:
        quality = SoilQuality.POOR
        recommendations.append(
            SoilRecommendation(
                type="correction_ph",
                description=MSG_TOO_ACIDIC if ph < PH_ACIDIC_BELOW else MSG_TOO_ALKALINE,
                priority=RecommendationPriority.URGENT.value,
            )
        )
    elif _in_optimal_ph(ph):
        quality = SoilQuality.GOOD

    if nitrogen < NITROGEN_LOW:
        recommendations.append(
            SoilRecommendation(
                type="fertilizer", description=MSG_LOW_NITROGEN, priority=RecommendationPriority.URGENT.value
            )
        )
    if phosphorus < PHOSPHORUS_LOW:
        recommendations.append(
            SoilRecommendation(
                type="fertilizer", description=MSG_LOW_PHOSPHORUS, priority=RecommendationPriority.IMPORTANT.value
            )
        )
    if potassium < POTASSIUM_LOW:
        recommendations.append(
            SoilRecommendation(
                type="fertilizer", description=MSG_LOW_POTASSIUM, priority=RecommendationPriority.IMPORTANT.value
            )
        )

    return SoilAnalysisResult(
        soil_quality=quality,
        recommendations=recommendations,
        suitable_crops=suitable_crops(ph),
        fertilizer_needs=FertilizerNeeds(
            nitrogen=fertilizer_need(nitrogen, NITROGEN_NEED_BANDS).value,
            phosphorus=fertilizer_need(phosphorus, PHOSPHORUS_NEED_BANDS).value,
            potassium=fertilizer_need(potassium, POTASSIUM_NEED_BANDS).value,
        ),
    )
