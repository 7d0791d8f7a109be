"""
End-to-end API tests through the Flask test client.

The AI client's outbound methods are replaced per test, so nothing leaves
the process; everything else (validation, services, SQLite, uploads,
envelope, error mapping) runs for real.
"""

from __future__ import annotations

import io
import os
import sqlite3
from unittest.mock import Mock

import pytest

from agritech.domain.exceptions import ServiceUnavailableError
from agritech.schemas.diagnosis import DiseaseDetectionResult

API = "/api/v1"


def _unavailable(service: str) -> Mock:
    return Mock(side_effect=ServiceUnavailableError(service))


def _diagnosis_form(image_bytes: bytes, **overrides):
    form = {
        "image": (io.BytesIO(image_bytes), "leaf.png", "image/png"),
        "cropType": "Mil (Souna)",
        "cropAgeDays": "45",
        "region": "Thiès",
        "symptoms": "Taches jaunes sur feuilles, , Feuilles sèches ",
        "language": "fr",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def _uploaded_files(app) -> list[str]:
    upload_dir = app.config["UPLOAD_DESTINATION"]
    return os.listdir(upload_dir) if os.path.isdir(upload_dir) else []


# ========================== Soil ===========================================


class TestSoilAnalyze:
    def test_fallback_for_acidic_soil(self, client, container):
        container.ai_client.analyze_soil = _unavailable("soil-analysis")

        response = client.post(
            f"{API}/soil/analyze",
            json={
                "ph": 5.0,
                "nitrogen": 20,
                "phosphorus": 15,
                "potassium": 60,
                "temperature": 30,
                "humidity": 40,
                "region": "Kaolack",
            },
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["ok"] is True
        data = body["data"]
        assert data["soilQuality"] == "poor"
        assert [r["type"] for r in data["recommendations"]] == [
            "correction_ph",
            "fertilizer",
            "fertilizer",
            "fertilizer",
        ]
        assert data["recommendations"][0]["priority"] == 1
        assert data["suitableCrops"] == ["Manioc", "Patate douce", "Ananas"]
        assert data["fertilizerNeeds"] == {"nitrogen": "Élevé", "phosphorus": "Élevé", "potassium": "Élevé"}

    def test_ai_result_is_returned(self, client, container):
        from agritech.schemas.soil import FertilizerNeeds, SoilAnalysisResult

        container.ai_client.analyze_soil = Mock(
            return_value=SoilAnalysisResult(
                soil_quality="excellent",
                suitable_crops=["Arachide"],
                fertilizer_needs=FertilizerNeeds(nitrogen="Faible", phosphorus="Faible", potassium="Faible"),
            )
        )

        response = client.post(
            f"{API}/soil/analyze",
            json={
                "ph": 6.5,
                "nitrogen": 45,
                "phosphorus": 30,
                "potassium": 120,
                "temperature": 28,
                "humidity": 35,
                "region": "Thiès",
                "cropType": "Arachide",
            },
        )

        assert response.status_code == 200
        assert response.get_json()["data"]["soilQuality"] == "excellent"
        sent = container.ai_client.analyze_soil.call_args.args[0]
        assert sent.crop_type == "Arachide"

    @pytest.mark.parametrize(
        "change",
        [{"ph": 15}, {"humidity": -1}, {"temperature": 61}, {"nitrogen": -5}, {"region": ""}],
    )
    def test_out_of_range_values(self, client, change):
        payload = {
            "ph": 6.5,
            "nitrogen": 45,
            "phosphorus": 30,
            "potassium": 120,
            "temperature": 28,
            "humidity": 35,
            "region": "Thiès",
        }
        payload.update(change)

        response = client.post(f"{API}/soil/analyze", json=payload)

        assert response.status_code == 400
        body = response.get_json()
        assert body["ok"] is False
        assert body["error"]["errors"][0]["field"] == next(iter(change))

    def test_missing_body(self, client):
        response = client.post(f"{API}/soil/analyze")

        assert response.status_code == 400


# ========================== Assistant ======================================


class TestAssistantAsk:
    def test_fallback_irrigation_answer(self, client, container):
        container.ai_client.ask_assistant = _unavailable("assistant")

        response = client.post(f"{API}/assistant/ask", json={"question": "Comment arroser le mil?", "language": "fr"})

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["answer"].startswith("Pour l'arrosage")
        assert data["audioText"].startswith("Arrosez")

    def test_fallback_unsupported_language(self, client, container):
        container.ai_client.ask_assistant = _unavailable("assistant")

        response = client.post(f"{API}/assistant/ask", json={"question": "Irrigation?", "language": "en"})

        data = response.get_json()["data"]
        assert data["answer"] == "Service temporairement indisponible."
        assert data["audioText"] is None

    def test_language_defaults_to_french(self, client, container):
        container.ai_client.ask_assistant = _unavailable("assistant")

        response = client.post(f"{API}/assistant/ask", json={"question": "Quel engrais ?"})

        assert response.get_json()["data"]["answer"].startswith("Les engrais organiques")
        container.ai_client.ask_assistant.assert_called_once_with("Quel engrais ?", "fr", None)

    @pytest.mark.parametrize(
        "payload",
        [{}, {"question": ""}, {"question": "x" * 501}, {"question": "ok", "context": "c" * 1001}],
    )
    def test_validation(self, client, payload):
        response = client.post(f"{API}/assistant/ask", json=payload)

        assert response.status_code == 400

    def test_unknown_property_rejected(self, client):
        response = client.post(f"{API}/assistant/ask", json={"question": "ok", "foo": 1})

        assert response.status_code == 400


# ========================== Diagnosis ======================================


class TestCreateDiagnosis:
    def test_created(self, client, container, detection_payload, image_bytes):
        container.ai_client.detect_disease = Mock(
            return_value=DiseaseDetectionResult.model_validate(detection_payload())
        )

        response = client.post(
            f"{API}/diagnosis/crop-disease",
            data=_diagnosis_form(image_bytes),
            content_type="multipart/form-data",
        )

        assert response.status_code == 201
        data = response.get_json()["data"]
        assert data["status"] == "completed"
        assert data["symptoms"] == ["Taches jaunes sur feuilles", "Feuilles sèches"]
        assert data["diseaseName"] == "Mildiou"
        assert data["userId"] == "anonymous"
        assert data["imageUrl"].startswith("/uploads/image-")
        assert "imagePath" not in data

        kwargs = container.ai_client.detect_disease.call_args.kwargs
        assert kwargs["crop_age_days"] == 45
        assert os.path.exists(kwargs["image_path"])

        image = client.get(data["imageUrl"])
        assert image.status_code == 200
        assert image.data == image_bytes

    def test_ai_unavailable_returns_503_and_stores_nothing(self, app, client, container, image_bytes):
        container.ai_client.detect_disease = _unavailable("disease-detection")

        response = client.post(
            f"{API}/diagnosis/crop-disease",
            data=_diagnosis_form(image_bytes),
            content_type="multipart/form-data",
        )

        assert response.status_code == 503
        body = response.get_json()
        assert body["error"]["service"] == "disease-detection"
        assert container.diagnosis_repo.count_for_user("anonymous") == 0
        assert _uploaded_files(app) == []

    def test_missing_image(self, client, container, image_bytes):
        container.ai_client.detect_disease = Mock()

        response = client.post(
            f"{API}/diagnosis/crop-disease",
            data=_diagnosis_form(image_bytes, image=None),
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        container.ai_client.detect_disease.assert_not_called()

    @pytest.mark.parametrize(
        "override",
        [{"cropAgeDays": "0"}, {"cropAgeDays": "366"}, {"symptoms": " , "}, {"language": "en"}, {"region": None}],
    )
    def test_invalid_fields(self, client, container, image_bytes, override):
        container.ai_client.detect_disease = Mock()

        response = client.post(
            f"{API}/diagnosis/crop-disease",
            data=_diagnosis_form(image_bytes, **override),
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        container.ai_client.detect_disease.assert_not_called()

    def test_wrong_image_type(self, client, container, image_bytes):
        container.ai_client.detect_disease = Mock()

        response = client.post(
            f"{API}/diagnosis/crop-disease",
            data=_diagnosis_form(image_bytes, image=(io.BytesIO(b"GIF89a"), "leaf.gif", "image/gif")),
            content_type="multipart/form-data",
        )

        assert response.status_code == 400

    def test_oversized_body(self, app, client):
        app.config["MAX_CONTENT_LENGTH"] = 1024

        response = client.post(
            f"{API}/diagnosis/crop-disease",
            data=_diagnosis_form(b"\x00" * 4096),
            content_type="multipart/form-data",
        )

        assert response.status_code == 413
        assert response.get_json()["ok"] is False


class TestDiagnosisQueries:
    def test_history_with_filters(self, client, app_seed):
        app_seed.diagnosis(user_id="anonymous", crop_type="Mil")
        app_seed.diagnosis(user_id="anonymous", crop_type="Arachide")
        app_seed.diagnosis(user_id="someone-else", crop_type="Mil")

        response = client.get(f"{API}/diagnosis/history?cropType=Mil")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert [d["cropType"] for d in data] == ["Mil"]

    def test_history_uses_session_user(self, client, app_seed):
        app_seed.diagnosis(user_id="farmer-42")
        with client.session_transaction() as session_obj:
            session_obj["user_id"] = "farmer-42"

        data = client.get(f"{API}/diagnosis/history").get_json()["data"]

        assert [d["userId"] for d in data] == ["farmer-42"]

    @pytest.mark.parametrize("query", ["limit=0", "limit=101", "offset=-1", "limit=abc"])
    def test_history_pagination_validation(self, client, query):
        response = client.get(f"{API}/diagnosis/history?{query}")

        assert response.status_code == 400

    def test_get_by_id(self, client, app_seed):
        diagnosis_id = app_seed.diagnosis(user_id="anonymous")

        response = client.get(f"{API}/diagnosis/{diagnosis_id}")

        assert response.status_code == 200
        assert response.get_json()["data"]["id"] == diagnosis_id

    def test_unknown_id(self, client):
        response = client.get(f"{API}/diagnosis/does-not-exist")

        assert response.status_code == 404
        assert response.get_json()["error"]["message"] == "Diagnosis does-not-exist not found"

    def test_stats_overview(self, client, app_seed):
        app_seed.diagnosis(user_id="anonymous", disease_name="Mildiou", confidence=0.9)
        app_seed.diagnosis(user_id="anonymous", disease_name="Mildiou", confidence=0.5)
        app_seed.diagnosis(user_id="anonymous", disease_name="Rouille", crop_type="Arachide", confidence=0.4)

        response = client.get(f"{API}/diagnosis/stats/overview")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["totalDiagnoses"] == 3
        assert data["diseaseDistribution"][0] == {"name": "Mildiou", "count": 2}
        assert data["cropDistribution"] == [{"name": "Mil", "count": 2}, {"name": "Arachide", "count": 1}]
        assert data["averageConfidence"] == pytest.approx(0.6)


# ========================== Health & surface ===============================


def test_health(client):
    response = client.get(f"{API}/health")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["database"] == "ok"
    assert data["aiServices"]["soil-analysis"] == "http://soil.test"


def test_security_headers(client):
    response = client.get(f"{API}/health/ping")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_unknown_route_uses_envelope(client):
    response = client.get(f"{API}/nothing-here")

    assert response.status_code == 404
    assert response.get_json()["ok"] is False


def test_unexpected_error_is_generic_500(client, container):
    container.ai_client.ask_assistant = Mock(side_effect=RuntimeError("secret internals"))

    response = client.post(f"{API}/assistant/ask", json={"question": "Bonjour"})

    assert response.status_code == 500
    assert "secret internals" not in response.get_data(as_text=True)


# ========================== Regressions ====================================


def test_soil_fallback_for_balanced_soil(client, container):
    container.ai_client.analyze_soil = _unavailable("soil-analysis")

    response = client.post(
        f"{API}/soil/analyze",
        json={
            "ph": 6.5,
            "nitrogen": 45,
            "phosphorus": 30,
            "potassium": 120,
            "temperature": 28,
            "humidity": 35,
            "region": "Thiès",
        },
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["soilQuality"] == "good"
    assert data["recommendations"] == []
    assert data["suitableCrops"] == ["Maïs", "Tomate", "Oignon", "Haricot"]
    assert data["fertilizerNeeds"] == {"nitrogen": "Moyen", "phosphorus": "Moyen", "potassium": "Moyen"}


def test_assistant_null_language_defaults_to_french(client, container):
    container.ai_client.ask_assistant = _unavailable("assistant")

    response = client.post(f"{API}/assistant/ask", json={"question": "Comment arroser le mil?", "language": None})

    assert response.status_code == 200
    assert response.get_json()["data"]["answer"].startswith("Pour l'arrosage")
    container.ai_client.ask_assistant.assert_called_once_with("Comment arroser le mil?", "fr", None)


def test_diagnosis_empty_language_defaults_to_french(client, container, detection_payload, image_bytes):
    container.ai_client.detect_disease = Mock(
        return_value=DiseaseDetectionResult.model_validate(detection_payload())
    )

    response = client.post(
        f"{API}/diagnosis/crop-disease",
        data=_diagnosis_form(image_bytes, language=""),
        content_type="multipart/form-data",
    )

    assert response.status_code == 201
    assert response.get_json()["data"]["language"] == "fr"
    assert container.ai_client.detect_disease.call_args.kwargs["language"] == "fr"


def test_storage_failure_removes_upload(app, client, container, detection_payload, image_bytes):
    container.ai_client.detect_disease = Mock(
        return_value=DiseaseDetectionResult.model_validate(detection_payload())
    )
    container.diagnosis_repo.create = Mock(side_effect=sqlite3.OperationalError("database is locked"))

    response = client.post(
        f"{API}/diagnosis/crop-disease",
        data=_diagnosis_form(image_bytes),
        content_type="multipart/form-data",
    )

    assert response.status_code == 500
    assert "database is locked" not in response.get_data(as_text=True)
    assert _uploaded_files(app) == []


def test_image_over_size_limit_is_413(app, client, container, image_bytes):
    container.ai_client.detect_disease = Mock()
    container.upload_storage.max_file_size = len(image_bytes) - 1

    response = client.post(
        f"{API}/diagnosis/crop-disease",
        data=_diagnosis_form(image_bytes),
        content_type="multipart/form-data",
    )

    assert response.status_code == 413
    assert response.get_json()["error"]["message"] == "Image file is too large"
    container.ai_client.detect_disease.assert_not_called()
    assert _uploaded_files(app) == []


class TestDocs:
    def test_openapi_document(self, client):
        response = client.get(f"{API}/docs/openapi.json")

        assert response.status_code == 200
        spec = response.get_json()
        assert spec["openapi"].startswith("3.")
        assert spec["servers"][0]["url"] == API
        assert set(spec["paths"]) >= {
            "/diagnosis/crop-disease",
            "/diagnosis/history",
            "/diagnosis/stats/overview",
            "/diagnosis/{diagnosis_id}",
            "/soil/analyze",
            "/assistant/ask",
            "/health",
        }
        assert not any(path.startswith("/docs") for path in spec["paths"])

        create = spec["paths"]["/diagnosis/crop-disease"]["post"]
        assert "multipart/form-data" in create["requestBody"]["content"]
        assert "201" in create["responses"]
        assert spec["paths"]["/diagnosis/{diagnosis_id}"]["get"]["parameters"][0]["name"] == "diagnosis_id"

        schemas = spec["components"]["schemas"]
        assert "cropAgeDays" in schemas["CreateDiagnosisRequest"]["properties"]
        assert {"SoilAnalysisRequest", "AskAssistantRequest", "DiagnosisRecord"} <= set(schemas)

    def test_swagger_ui(self, client):
        response = client.get(f"{API}/docs")

        assert response.status_code == 200
        assert response.mimetype == "text/html"
        body = response.get_data(as_text=True)
        assert f"{API}/docs/openapi.json" in body
        assert "unpkg.com" in response.headers["Content-Security-Policy"]
