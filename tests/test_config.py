from __future__ import annotations

import allure
import pytest

from nanoheads.config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_GROQ_BASE_URL,
    DEFAULT_GROQ_MODEL,
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_OPENAI_MODEL,
    LlmSettings,
    Settings,
    resolve_provider_settings,
)

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Environment Settings"),
]


def test_from_env_defaults() -> None:
    settings = Settings.from_env()

    assert settings.database.url == DEFAULT_DATABASE_URL
    assert settings.database.driver == ""
    assert settings.llm.provider == "groq"
    assert settings.llm.model == DEFAULT_GROQ_MODEL
    assert settings.llm.base_url == DEFAULT_GROQ_BASE_URL
    assert settings.llm.api_key == ""
    assert settings.llm.timeout_seconds == 60.0
    assert settings.analysis.max_input_chars == 12_000
    assert settings.analysis.url_fetch_max_bytes == 2 * 1024 * 1024


def test_from_env_falls_back_to_openai_variables(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", " sk-openai ")
    monkeypatch.setenv("OPENAI_MODEL", "custom-model")
    monkeypatch.setenv("OPENAI_BASE_URL", "https://proxy.example.com/v1/")

    settings = Settings.from_env()

    assert settings.llm.api_key == "sk-openai"
    assert settings.llm.model == "custom-model"
    assert settings.llm.base_url == "https://proxy.example.com/v1"


def test_from_env_prefers_groq_variables(monkeypatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "gsk-groq")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    monkeypatch.setenv("GROQ_MODEL", "llama-3.1-8b-instant")

    settings = Settings.from_env()

    assert settings.llm.api_key == "gsk-groq"
    assert settings.llm.model == "llama-3.1-8b-instant"


def test_from_env_database_url_precedence(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///generic.db")
    assert Settings.from_env().database.url == "sqlite:///generic.db"

    monkeypatch.setenv("NANOHEADS_DATABASE_URL", "sqlite:///specific.db")
    monkeypatch.setenv("DB_DRIVER", "SQLite")
    settings = Settings.from_env()
    assert settings.database.url == "sqlite:///specific.db"
    assert settings.database.driver == "sqlite"

    assert Settings.from_env(database_url="sqlite:///cli.db").database.url == "sqlite:///cli.db"


def test_from_env_rejects_invalid_numbers(monkeypatch) -> None:
    monkeypatch.setenv("NANOHEADS_MAX_INPUT_CHARS", "lots")
    with pytest.raises(ValueError, match="Invalid integer value for NANOHEADS_MAX_INPUT_CHARS"):
        Settings.from_env()

    monkeypatch.delenv("NANOHEADS_MAX_INPUT_CHARS")
    monkeypatch.setenv("NANOHEADS_LLM_TIMEOUT_SECONDS", "soon")
    with pytest.raises(ValueError, match="Invalid number value for NANOHEADS_LLM_TIMEOUT_SECONDS"):
        Settings.from_env()


def test_validate_for_llm() -> None:
    settings = Settings()
    with pytest.raises(ValueError, match="is missing"):
        settings.validate_for_llm()

    settings.llm.api_key = "key"
    settings.validate_for_llm()

    settings.llm.base_url = "api.groq.com"
    with pytest.raises(ValueError, match="Invalid LLM base URL"):
        settings.validate_for_llm()

    settings.llm.base_url = DEFAULT_GROQ_BASE_URL
    settings.llm.timeout_seconds = 0
    with pytest.raises(ValueError, match="must be > 0"):
        settings.validate_for_llm()


def test_resolve_provider_settings_for_openai(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    current = LlmSettings(model="", api_key="gsk", timeout_seconds=5.0, log_preview_chars=10)

    resolved = resolve_provider_settings(" OpenAI ", "", current)

    assert resolved.provider == "openai"
    assert resolved.model == DEFAULT_OPENAI_MODEL
    assert resolved.base_url == DEFAULT_OPENAI_BASE_URL
    assert resolved.api_key == "sk-openai"
    assert resolved.timeout_seconds == 5.0
    assert resolved.log_preview_chars == 10


def test_resolve_provider_settings_defaults_to_groq(monkeypatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "gsk")

    resolved = resolve_provider_settings("anything", " llama-3.1-8b-instant ", LlmSettings())

    assert resolved.provider == "groq"
    assert resolved.model == "llama-3.1-8b-instant"
    assert resolved.base_url == DEFAULT_GROQ_BASE_URL
    assert resolved.api_key == "gsk"


def test_resolve_provider_settings_keeps_current_model_when_model_is_empty() -> None:
    current = LlmSettings(model="llama-3.1-8b-instant")

    assert resolve_provider_settings("groq", "  ", current).model == "llama-3.1-8b-instant"
    assert resolve_provider_settings("openai", "", current).model == "llama-3.1-8b-instant"
    assert resolve_provider_settings("groq", "", LlmSettings(model=" ")).model == DEFAULT_GROQ_MODEL
