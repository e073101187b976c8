"""Tests for environment-driven settings."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from feedback_sentiment.config import DEFAULT_MODEL, Settings, configure_logging, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "FEEDBACK_SENTIMENT_MODEL",
        "FEEDBACK_SENTIMENT_LOG_LEVEL",
        "FEEDBACK_SENTIMENT_REPORT_ITEMS",
        "FEEDBACK_SENTIMENT_CHAT_ITEMS",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestGetSettings:
    def test_defaults(self):
        settings = get_settings(dotenv=False)
        assert settings.model == DEFAULT_MODEL
        assert settings.log_level == "WARNING"
        assert (settings.report_items, settings.chat_items) == (30, 50)
        assert settings.api_key is None

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("FEEDBACK_SENTIMENT_MODEL", "claude-3-5-sonnet-latest")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        monkeypatch.setenv("FEEDBACK_SENTIMENT_LOG_LEVEL", "debug")
        monkeypatch.setenv("FEEDBACK_SENTIMENT_REPORT_ITEMS", "10")
        settings = get_settings(dotenv=False)
        assert settings.is_anthropic
        assert settings.api_key == "sk-ant-test"
        assert settings.log_level == "DEBUG"
        assert settings.report_items == 10
        assert settings.chat_items == 50

    def test_openai_key_for_gpt_models(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        settings = get_settings(dotenv=False)
        assert not settings.is_anthropic
        assert settings.api_key == "sk-test"

    def test_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr("feedback_sentiment.config.load_dotenv", lambda *a, **k: False)
        (tmp_path / ".env").write_text(
            "FEEDBACK_SENTIMENT_CHAT_ITEMS=7\nUNRELATED_SETTING=1\n", encoding="utf-8"
        )
        assert get_settings().chat_items == 7
        assert get_settings(dotenv=False).chat_items == 50

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("FEEDBACK_SENTIMENT_CHAT_ITEMS", "lots")
        with pytest.raises(ValidationError, match="chat_items"):
            get_settings(dotenv=False)

    def test_non_positive_limit(self, monkeypatch):
        monkeypatch.setenv("FEEDBACK_SENTIMENT_REPORT_ITEMS", "0")
        with pytest.raises(ValidationError):
            get_settings(dotenv=False)

    def test_empty_variable_uses_default(self, monkeypatch):
        monkeypatch.setenv("FEEDBACK_SENTIMENT_REPORT_ITEMS", "")
        assert get_settings(dotenv=False).report_items == 30

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.model = "gpt-4o"


def test_configure_logging_sets_level():
    configure_logging("ERROR")
    assert logging.getLogger().level == logging.ERROR
    configure_logging("WARNING")
