"""
Tests for settings loading.
"""

import json

import pytest

from mentormatch.config import Settings, load_config_file
from mentormatch.errors import ConfigError
from mentormatch.qwen import DASHSCOPE_ENDPOINT

ENV_VARS = (
    "DASHSCOPE_API_KEY",
    "DASHSCOPE_MODEL",
    "DASHSCOPE_ENDPOINT",
    "DASHSCOPE_TIMEOUT",
    "TEACHERS_FILE",
    "CASES_DB",
    "LOG_LEVEL",
    "LOG_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(root, data):
    (root / "config.json").write_text(json.dumps(data), encoding="utf-8")


class TestDefaults:
    def test_without_config_file(self, tmp_path):
        settings = Settings.load(tmp_path)

        assert settings.api_key == ""
        assert settings.model == "qwen-turbo"
        assert settings.endpoint == DASHSCOPE_ENDPOINT
        assert settings.temperature == 0.7
        assert settings.max_tokens == 2000
        assert settings.timeout_s == 30.0
        assert settings.teachers_file == tmp_path / "teachers.json"
        assert settings.cases_db == tmp_path / "data" / "cases.db"
        assert settings.log_level == "INFO"

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_unusable_config_file(self, tmp_path, content):
        (tmp_path / "config.json").write_text(content, encoding="utf-8")
        assert load_config_file(tmp_path / "config.json") == {}
        assert Settings.load(tmp_path).model == "qwen-turbo"


class TestPrecedence:
    def test_config_file(self, tmp_path):
        write_config(tmp_path, {
            "dashscope": {"apiKey": "sk-file", "model": "qwen-plus", "temperature": 0.2, "maxTokens": 800},
            "data": {"teachersFile": "data/mentors.json"},
        })
        settings = Settings.load(tmp_path)

        assert settings.api_key == "sk-file"
        assert settings.model == "qwen-plus"
        assert settings.temperature == 0.2
        assert settings.max_tokens == 800
        assert settings.teachers_file == tmp_path / "data" / "mentors.json"

    def test_environment_wins(self, tmp_path, monkeypatch):
        write_config(tmp_path, {"dashscope": {"apiKey": "sk-file", "model": "qwen-plus"}})
        monkeypatch.setenv("DASHSCOPE_API_KEY", "sk-env")
        monkeypatch.setenv("DASHSCOPE_MODEL", "qwen-max")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.load(tmp_path)

        assert settings.api_key == "sk-env"
        assert settings.model == "qwen-max"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", ["verbose", "  ", "1"])
    def test_unknown_log_level_falls_back(self, tmp_path, monkeypatch, raw):
        monkeypatch.setenv("LOG_LEVEL", raw)
        assert Settings.load(tmp_path).log_level == "INFO"

    def test_absolute_paths_kept(self, tmp_path, monkeypatch):
        db = tmp_path / "elsewhere" / "cases.db"
        monkeypatch.setenv("CASES_DB", str(db))
        assert Settings.load(tmp_path).cases_db == db

    def test_bad_numbers_fall_back(self, tmp_path):
        write_config(tmp_path, {"dashscope": {"temperature": "hot", "maxTokens": None}})
        settings = Settings.load(tmp_path)
        assert settings.temperature == 0.7
        assert settings.max_tokens == 2000


class TestApiKey:
    def test_require_missing(self, tmp_path):
        with pytest.raises(ConfigError):
            Settings.load(tmp_path).require_api_key()

    def test_public_view_hides_key(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DASHSCOPE_API_KEY", "sk-secret")
        settings = Settings.load(tmp_path)

        view = settings.public_view()

        assert settings.require_api_key() == "sk-secret"
        assert view["api_key_configured"] is True
        assert "sk-secret" not in json.dumps(view)
