"""
Diagnosis Service
=================
Business logic for crop-disease diagnoses.

A diagnosis is created only when the disease-detection service answers:
there is no offline fallback, so an unavailable AI service means nothing
is persisted and the caller gets a 503.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agritech.domain.exceptions import RepositoryError
from agritech.enums import DiagnosisStatus
from agritech.schemas.diagnosis import (
    AIModelMetadata,
    CreateDiagnosisRequest,
    DiagnosisFilter,
    DiagnosisRecord,
    DiagnosisStatistics,
    DistributionEntry,
)
from agritech.utils.time import iso_now

if TYPE_CHECKING:
    from agritech.services.ai.ai_service_client import AIServiceClient
    from agritech.services.utilities.upload_storage import StoredImage
    from infrastructure.database.repositories.diagnoses import DiagnosisRepository

logger = logging.getLogger(__name__)


class DiagnosisService:
    """Orchestrates disease detection and diagnosis persistence."""

    def __init__(self, repository: "DiagnosisRepository", ai_client: "AIServiceClient"):
        self.repo = repository
        self.ai_client = ai_client

    def create_diagnosis(
        self,
        request: CreateDiagnosisRequest,
        image: "StoredImage",
        user_id: str,
    ) -> DiagnosisRecord:
        """
        Run disease detection on a stored image and persist the result.

        Args:
            request: Validated crop context
            image: Stored upload (the AI service reads ``image.path``)
            user_id: Owner of the diagnosis

        Returns:
            The persisted diagnosis, status ``completed``

        Raises:
            ServiceUnavailableError: The detection service failed; nothing was stored.
        """
        result = self.ai_client.detect_disease(
            image_path=image.path,
            crop_type=request.crop_type,
            crop_age_days=request.crop_age_days,
            region=request.region,
            symptoms=request.symptoms,
            language=request.language.value,
        )

        now = iso_now()
        metadata = AIModelMetadata(
            model_version=result.model_version,
            processing_time=result.processing_time,
            alternative_diseases=result.alternative_diseases,
        )
        record_id = self.repo.create(
            {
                "user_id": user_id,
                "crop_type": request.crop_type,
                "crop_age_days": request.crop_age_days,
                "region": request.region,
                "symptoms": list(request.symptoms),
                "image_url": image.url,
                "image_path": image.path,
                "disease_name": result.disease_name,
                "disease_name_local": result.disease_name_local,
                "confidence": result.confidence,
                "severity": result.severity.value,
                "description": result.description,
                "recommendations": [r.model_dump(mode="json") for r in result.recommendations],
                "language": request.language.value,
                "ai_model_metadata": metadata.model_dump(mode="json"),
                "status": DiagnosisStatus.COMPLETED.value,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info(
            "Diagnosis %s stored for user %s: %s (confidence %.2f)",
            record_id,
            user_id,
            result.disease_name,
            result.confidence,
        )

        record = self.get_diagnosis_by_id(record_id)
        if record is None:
            raise RepositoryError(f"Diagnosis {record_id} not readable after insert")
        return record

    def get_user_diagnoses(self, user_id: str, filters: DiagnosisFilter | None = None) -> list[DiagnosisRecord]:
        """A user's diagnoses, newest first, filtered and paginated."""
        filters = filters or DiagnosisFilter()
        rows = self.repo.list_for_user(
            user_id,
            crop_type=filters.crop_type,
            region=filters.region,
            limit=filters.limit,
            offset=filters.offset,
        )
        return [DiagnosisRecord.from_row(row) for row in rows]

    def get_diagnosis_by_id(self, diagnosis_id: str) -> DiagnosisRecord | None:
        row = self.repo.get(diagnosis_id)
        return DiagnosisRecord.from_row(row) if row else None

    def get_statistics(self, user_id: str) -> DiagnosisStatistics:
        """Counts, top diseases, crop distribution and mean confidence for one user."""
        return DiagnosisStatistics(
            total_diagnoses=self.repo.count_for_user(user_id),
            disease_distribution=[DistributionEntry(**row) for row in self.repo.disease_distribution(user_id)],
            crop_distribution=[DistributionEntry(**row) for row in self.repo.crop_distribution(user_id)],
            average_confidence=self.repo.average_confidence(user_id),
        )
