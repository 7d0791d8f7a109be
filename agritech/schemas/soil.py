"""
Soil Schemas
============

Pydantic models for soil analysis. Nothing here is persisted: a soil
analysis is a pure request/response exchange.
"""

from typing import Any

from pydantic import Field

from agritech.enums import DEFAULT_LANGUAGE, SoilQuality
from agritech.schemas.common import CamelModel, StrictCamelModel


class SoilAnalysisRequest(StrictCamelModel):
    """Soil measurements submitted by a farmer."""

    ph: float = Field(..., ge=0, le=14, examples=[6.5])
    nitrogen: float = Field(..., ge=0, description="Nitrogen (N) in mg/kg", examples=[45])
    phosphorus: float = Field(..., ge=0, description="Phosphorus (P) in mg/kg", examples=[30])
    potassium: float = Field(..., ge=0, description="Potassium (K) in mg/kg", examples=[120])
    temperature: float = Field(..., ge=-10, le=60, description="Soil temperature in °C", examples=[28])
    humidity: float = Field(..., ge=0, le=100, description="Soil humidity in %", examples=[35])
    region: str = Field(..., min_length=1, max_length=100, examples=["Thiès"])
    crop_type: str | None = Field(default=None, max_length=100)
    language: str | None = Field(default=None, max_length=10)

    def to_ai_payload(self) -> dict[str, Any]:
        """JSON body for the soil-analysis microservice (snake_case)."""
        return {
            "ph": self.ph,
            "nitrogen": self.nitrogen,
            "phosphorus": self.phosphorus,
            "potassium": self.potassium,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "region": self.region,
            "crop_type": self.crop_type,
            "language": self.language or DEFAULT_LANGUAGE.value,
        }


class SoilRecommendation(CamelModel):
    type: str
    description: str
    priority: int


class FertilizerNeeds(CamelModel):
    nitrogen: str
    phosphorus: str
    potassium: str


class SoilAnalysisResult(CamelModel):
    """Soil verdict, either from the AI service or from the offline rules."""

    soil_quality: SoilQuality
    recommendations: list[SoilRecommendation] = Field(default_factory=list)
    suitable_crops: list[str] = Field(default_factory=list)
    fertilizer_needs: FertilizerNeeds
