from __future__ import annotations

import logging
from dataclasses import dataclass

from agritech.config import AppConfig
from agritech.services.ai.ai_service_client import AIServiceClient
from agritech.services.application.assistant_service import AssistantService
from agritech.services.application.diagnosis_service import DiagnosisService
from agritech.services.application.soil_service import SoilService
from agritech.services.utilities.upload_storage import UploadStorage
from infrastructure.database.repositories.diagnoses import DiagnosisRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    diagnosis_repo: DiagnosisRepository
    ai_client: AIServiceClient
    upload_storage: UploadStorage
    diagnosis_service: DiagnosisService
    soil_service: SoilService
    assistant_service: AssistantService

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
        """
        logger.info("Building ServiceContainer...")
        database = SQLiteDatabaseHandler(config.database_path)
        database.create_tables()

        ai_client = AIServiceClient(
            disease_detection_url=config.ai_disease_detection_url,
            soil_analysis_url=config.ai_soil_analysis_url,
            assistant_url=config.ai_assistant_url,
            timeout_ms=config.ai_service_timeout_ms,
        )
        diagnosis_repo = DiagnosisRepository(database)

        container = cls(
            config=config,
            database=database,
            diagnosis_repo=diagnosis_repo,
            ai_client=ai_client,
            upload_storage=UploadStorage(
                destination=config.upload_destination,
                max_file_size=config.max_file_size,
                allowed_types=config.allowed_image_types,
            ),
            diagnosis_service=DiagnosisService(diagnosis_repo, ai_client),
            soil_service=SoilService(ai_client),
            assistant_service=AssistantService(ai_client),
        )
        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        self.ai_client.close()
        self.database.close_db()
        logger.info("ServiceContainer shutdown complete.")
