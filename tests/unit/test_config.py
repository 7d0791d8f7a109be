import pytest

from agritech.config import DEFAULT_SECRET_KEY, AppConfig


def test_defaults(monkeypatch):
    for name in ("AGRITECH_API_PREFIX", "AI_SERVICE_TIMEOUT", "AGRITECH_ALLOWED_IMAGE_TYPES", "AI_ASSISTANT_URL"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig()

    assert config.url_prefix == "/api/v1"
    assert config.ai_service_timeout_ms == 30000
    assert config.ai_assistant_url == "http://localhost:8003"
    assert config.max_file_size == 5 * 1024 * 1024
    assert config.allowed_image_types == ["image/jpeg", "image/png", "image/jpg"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("AGRITECH_API_PREFIX", "/gateway/")
    monkeypatch.setenv("AI_SERVICE_TIMEOUT", "1500")
    monkeypatch.setenv("AGRITECH_CORS_ORIGINS", "https://a.sn, https://b.sn")
    monkeypatch.setenv("AGRITECH_DEBUG", "yes")

    config = AppConfig()

    assert config.url_prefix == "/gateway"
    assert config.ai_service_timeout_ms == 1500
    assert config.cors_origins == ["https://a.sn", "https://b.sn"]
    assert config.DEBUG is True


def test_invalid_integer(monkeypatch):
    monkeypatch.setenv("AI_SERVICE_TIMEOUT", "soon")

    with pytest.raises(ValueError, match="AI_SERVICE_TIMEOUT"):
        AppConfig()


def test_non_positive_timeout():
    with pytest.raises(ValueError):
        AppConfig(ai_service_timeout_ms=0)


def test_production_refuses_default_secret():
    with pytest.raises(RuntimeError):
        AppConfig(environment="production", secret_key=DEFAULT_SECRET_KEY)

    assert AppConfig(environment="production", secret_key="s3cret").secret_key == "s3cret"


def test_flask_config_leaves_room_for_form_fields():
    config = AppConfig(max_file_size=1000)

    assert config.as_flask_config()["MAX_CONTENT_LENGTH"] > 1000
