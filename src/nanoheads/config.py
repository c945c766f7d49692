"""Runtime configuration for the editorial pipeline and its storage."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

DEFAULT_DATABASE_URL = "sqlite:///.nanoheads.db"

GROQ_PROVIDER = "groq"
OPENAI_PROVIDER = "openai"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(slots=True)
class DatabaseSettings:
    """Relational store settings."""

    url: str = DEFAULT_DATABASE_URL
    driver: str = ""


@dataclass(slots=True)
class LlmSettings:
    """Chat-completion provider settings."""

    provider: str = GROQ_PROVIDER
    model: str = DEFAULT_GROQ_MODEL
    base_url: str = DEFAULT_GROQ_BASE_URL
    api_key: str = ""
    timeout_seconds: float = 60.0
    log_preview_chars: int = 2_500


@dataclass(slots=True)
class AnalysisSettings:
    """Input resolution settings for the phase-one pipeline."""

    max_input_chars: int = 12_000
    url_fetch_timeout_seconds: float = 12.0
    url_fetch_max_bytes: int = 2 * 1024 * 1024


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    llm: LlmSettings = field(default_factory=LlmSettings)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)

    @classmethod
    def from_env(cls, database_url: str | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        return cls(
            database=DatabaseSettings(
                url=database_url
                or first_non_empty_env("NANOHEADS_DATABASE_URL", "DATABASE_URL")
                or DEFAULT_DATABASE_URL,
                driver=first_non_empty_env("NANOHEADS_DB_DRIVER", "DB_DRIVER").lower(),
            ),
            llm=LlmSettings(
                provider=GROQ_PROVIDER,
                model=first_non_empty_env("GROQ_MODEL", "OPENAI_MODEL") or DEFAULT_GROQ_MODEL,
                base_url=(
                    first_non_empty_env("GROQ_BASE_URL", "OPENAI_BASE_URL")
                    or DEFAULT_GROQ_BASE_URL
                ).rstrip("/"),
                api_key=first_non_empty_env("GROQ_API_KEY", "OPENAI_API_KEY"),
                timeout_seconds=_env_float("NANOHEADS_LLM_TIMEOUT_SECONDS", 60.0),
                log_preview_chars=_env_int("NANOHEADS_LLM_LOG_PREVIEW_CHARS", 2_500),
            ),
            analysis=AnalysisSettings(
                max_input_chars=_env_int("NANOHEADS_MAX_INPUT_CHARS", 12_000),
                url_fetch_timeout_seconds=_env_float("NANOHEADS_URL_FETCH_TIMEOUT_SECONDS", 12.0),
                url_fetch_max_bytes=_env_int("NANOHEADS_URL_FETCH_MAX_BYTES", 2 * 1024 * 1024),
            ),
        )

    def validate_for_llm(self) -> None:
        """Raise configuration error if the LLM settings cannot make requests."""

        if not self.llm.api_key:
            raise ValueError("GROQ_API_KEY (or OPENAI_API_KEY) is missing.")
        if self.llm.timeout_seconds <= 0:
            raise ValueError("NANOHEADS_LLM_TIMEOUT_SECONDS must be > 0.")
        parsed = urlparse(self.llm.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                f"Invalid LLM base URL: {self.llm.base_url!r}. "
                "Expected an absolute URL with http:// or https:// scheme.",
            )
        if self.analysis.max_input_chars <= 0:
            raise ValueError("NANOHEADS_MAX_INPUT_CHARS must be a positive integer.")


def resolve_provider_settings(provider: str, model: str, current: LlmSettings) -> LlmSettings:
    """Build LLM settings for a provider/model pair, re-reading credentials from env.

    An empty ``model`` keeps the current model; the provider default fills a blank one.
    """

    clean_provider = provider.strip().lower()
    clean_model = model.strip()

    if clean_provider == OPENAI_PROVIDER:
        return LlmSettings(
            provider=OPENAI_PROVIDER,
            model=clean_model or current.model.strip() or DEFAULT_OPENAI_MODEL,
            base_url=(os.getenv("OPENAI_BASE_URL", "").strip() or DEFAULT_OPENAI_BASE_URL).rstrip(
                "/",
            ),
            api_key=os.getenv("OPENAI_API_KEY", "").strip(),
            timeout_seconds=current.timeout_seconds,
            log_preview_chars=current.log_preview_chars,
        )

    return LlmSettings(
        provider=GROQ_PROVIDER,
        model=clean_model or current.model.strip() or DEFAULT_GROQ_MODEL,
        base_url=(
            first_non_empty_env("GROQ_BASE_URL", "OPENAI_BASE_URL") or DEFAULT_GROQ_BASE_URL
        ).rstrip("/"),
        api_key=first_non_empty_env("GROQ_API_KEY", "OPENAI_API_KEY"),
        timeout_seconds=current.timeout_seconds,
        log_preview_chars=current.log_preview_chars,
    )


def first_non_empty_env(*names: str) -> str:
    """Return the first non-blank environment value among ``names``."""

    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {raw!r}") from error
