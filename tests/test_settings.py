import json
import logging

import pytest

from bg_editor.app.errors import ConfigError
from bg_editor.app.logging import JsonFormatter
from bg_editor.app.settings import DEFAULT_PRESET_BACKGROUNDS, load_settings

ENV_VARS = [
    "GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY", "GOOGLE_CLOUD_PROJECT", "PROJECT_ID",
    "GEMINI_IMAGE_MODEL", "PRESET_BACKGROUNDS", "FETCH_TIMEOUT_S", "PORT", "LOG_JSON", "LOG_LEVEL",
    "SESSION_IDLE_TTL_S", "MAX_SESSIONS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")

        s = load_settings()

        assert s.gemini_api_key == "k"
        assert s.image_model == "gemini-2.5-flash-image"
        assert s.preset_backgrounds == DEFAULT_PRESET_BACKGROUNDS
        assert s.export_filename == "edited-image.png"
        assert s.log_json is True

    def test_api_key_fallback(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "legacy")
        assert load_settings().gemini_api_key == "legacy"

    def test_vertex_project_without_key(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "proj")
        s = load_settings()
        assert s.gemini_api_key is None
        assert s.gcp_project == "proj"

    def test_missing_credentials(self):
        with pytest.raises(ConfigError):
            load_settings()

    def test_preset_override(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("PRESET_BACKGROUNDS", "https://a.example/1.jpg, https://a.example/2.jpg")
        assert load_settings().preset_backgrounds == ("https://a.example/1.jpg", "https://a.example/2.jpg")

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ConfigError):
            load_settings()

    def test_session_limits(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        assert load_settings().session_idle_ttl_s == 3600.0

        monkeypatch.setenv("SESSION_IDLE_TTL_S", "0")
        monkeypatch.setenv("MAX_SESSIONS", "5")
        s = load_settings()
        assert s.session_idle_ttl_s is None
        assert s.max_sessions == 5


def test_json_formatter_includes_extra_fields():
    logger = logging.getLogger("test.json")
    record = logger.makeRecord(
        "test.json", logging.INFO, __file__, 1, "image model call finished", None, None,
        extra={"op": "remove_bg", "latency_ms": 12},
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "image model call finished"
    assert payload["level"] == "INFO"
    assert payload["op"] == "remove_bg"
    assert payload["latency_ms"] == 12
