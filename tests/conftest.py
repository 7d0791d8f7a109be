"""
Shared test fixtures for the AgriTech gateway test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- A mocked AI service client and sample AI payloads
- A Flask app/client wired to a temporary database and upload directory
- Helper utilities for seeding diagnoses

Usage:
    def test_example(diagnosis_repo, seed):
        diagnosis_id = seed.diagnosis(user_id="u1")
        assert diagnosis_repo.get(diagnosis_id) is not None
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from agritech.schemas.diagnosis import DiseaseDetectionResult  # noqa: E402
from agritech.services.ai.ai_service_client import AIServiceClient  # noqa: E402
from infrastructure.database.repositories.diagnoses import DiagnosisRepository  # noqa: E402
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler  # noqa: E402

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("agritech").setLevel(logging.WARNING)

# PNG signature plus padding: enough bytes for a non-empty upload
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_db()


@pytest.fixture()
def diagnosis_repo(db_handler):
    """DiagnosisRepository backed by the in-memory DB."""
    return DiagnosisRepository(db_handler)


# ========================== AI Fixtures ====================================


def _detection_payload(**overrides: Any) -> dict[str, Any]:
    """Disease-detection service response body (snake_case, as on the wire)."""
    payload: dict[str, Any] = {
        "disease_name": "Mildiou",
        "disease_name_local": "Feebar xob",
        "confidence": 0.87,
        "severity": "medium",
        "description": "Maladie fongique des feuilles.",
        "recommendations": [
            {
                "type": "treatment",
                "title": "Fongicide",
                "description": "Appliquer un fongicide à base de cuivre.",
                "priority": 1,
                "audio_text": "Appliquez un fongicide.",
            },
            {
                "type": "prevention",
                "title": "Rotation",
                "description": "Alterner les cultures chaque saison.",
                "priority": 3,
            },
        ],
        "alternative_diseases": [{"name": "Rouille", "confidence": 0.08}],
        "model_version": "v1.2.0",
        "processing_time": 0.42,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def detection_payload():
    """Factory for disease-detection response bodies: ``detection_payload(confidence=0.5)``."""
    return _detection_payload


@pytest.fixture()
def image_bytes():
    return PNG_BYTES


@pytest.fixture()
def detection_result():
    return DiseaseDetectionResult.model_validate(_detection_payload())


@pytest.fixture()
def mock_ai_client():
    """Mock AIServiceClient; configure return values per test."""
    return MagicMock(spec=AIServiceClient)


# ========================== Flask Fixtures =================================


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("AGRITECH_SECRET_KEY", "test-secret")
    from agritech import create_app

    flask_app = create_app(
        {
            "database_path": str(tmp_path / "test.db"),
            "upload_destination": str(tmp_path / "uploads"),
            "log_file": "",
            "ai_disease_detection_url": "http://disease.test",
            "ai_soil_analysis_url": "http://soil.test",
            "ai_assistant_url": "http://assistant.test",
            "ai_service_timeout_ms": 1000,
        }
    )
    flask_app.config["TESTING"] = True
    try:
        yield flask_app
    finally:
        container = flask_app.config.get("CONTAINER")
        if container is not None:
            container.shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]


# ========================== Seed Helpers ===================================


class DiagnosisSeeder:
    """Insert diagnosis rows with controllable timestamps.

    Usage:
        def test_something(seed):
            seed.diagnosis(user_id="u1", crop_type="Mil", minutes_ago=5)
    """

    _BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, repo: DiagnosisRepository):
        self.repo = repo

    def diagnosis(
        self,
        *,
        user_id: str = "farmer-1",
        crop_type: str = "Mil",
        region: str = "Thiès",
        disease_name: str = "Mildiou",
        confidence: float = 0.8,
        minutes_ago: int = 0,
        **overrides: Any,
    ) -> str:
        created = (self._BASE_TIME - timedelta(minutes=minutes_ago)).isoformat()
        record: dict[str, Any] = {
            "user_id": user_id,
            "crop_type": crop_type,
            "crop_age_days": 45,
            "region": region,
            "symptoms": ["Taches jaunes"],
            "image_url": "/uploads/image-1-000000001.png",
            "image_path": "/tmp/image-1-000000001.png",
            "disease_name": disease_name,
            "disease_name_local": None,
            "confidence": confidence,
            "severity": "medium",
            "description": "",
            "recommendations": [],
            "language": "fr",
            "ai_model_metadata": {},
            "status": "completed",
            "created_at": created,
            "updated_at": created,
        }
        record.update(overrides)
        return self.repo.create(record)


@pytest.fixture()
def seed(diagnosis_repo):
    return DiagnosisSeeder(diagnosis_repo)


@pytest.fixture()
def app_seed(container):
    """Seeder bound to the Flask app's own database."""
    return DiagnosisSeeder(container.diagnosis_repo)
