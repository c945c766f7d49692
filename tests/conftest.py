"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from nanoheads.config import LlmSettings
from nanoheads.editorial.repository import EditorialRepository
from nanoheads.llm.client import ChatCompletionClient
from nanoheads.llm.service import EditorialLlmService

_ENV_NAMES = (
    "GROQ_API_KEY",
    "GROQ_MODEL",
    "GROQ_BASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "DATABASE_URL",
    "DB_DRIVER",
    "NANOHEADS_DATABASE_URL",
    "NANOHEADS_DB_DRIVER",
    "NANOHEADS_LLM_TIMEOUT_SECONDS",
    "NANOHEADS_LLM_LOG_PREVIEW_CHARS",
    "NANOHEADS_MAX_INPUT_CHARS",
    "NANOHEADS_URL_FETCH_TIMEOUT_SECONDS",
    "NANOHEADS_URL_FETCH_MAX_BYTES",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep developer credentials and DB URLs out of tests."""
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def chat_response(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def error_response(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={"error": {"message": message}})


class ScriptedChatTransport(httpx.MockTransport):
    """Answers chat-completion calls from a queue and records request bodies."""

    def __init__(self, responses: list[httpx.Response | Callable[[dict], httpx.Response]]) -> None:
        self.responses = list(responses)
        self.requests: list[dict] = []
        self.headers: list[httpx.Headers] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        self.headers.append(request.headers)
        if not self.responses:
            raise AssertionError(f"Unexpected chat request: {body}")
        response = self.responses.pop(0)
        if callable(response):
            return response(body)
        return response

    @property
    def user_prompts(self) -> list[str]:
        return [body["messages"][1]["content"] for body in self.requests]

    @property
    def json_modes(self) -> list[bool]:
        return ["response_format" in body for body in self.requests]


@pytest.fixture()
def groq_settings() -> LlmSettings:
    return LlmSettings(api_key="test-key")


@pytest.fixture()
def openai_settings() -> LlmSettings:
    return LlmSettings(
        provider="openai",
        model="gpt-4o-mini",
        base_url="https://api.openai.com/v1",
        api_key="test-key",
    )


@pytest.fixture()
def make_service() -> Callable[..., tuple[EditorialLlmService, ScriptedChatTransport]]:
    def _make(
        settings: LlmSettings,
        responses: list[httpx.Response | Callable[[dict], httpx.Response]],
    ) -> tuple[EditorialLlmService, ScriptedChatTransport]:
        transport = ScriptedChatTransport(responses)
        client = ChatCompletionClient(settings, transport=transport)
        return EditorialLlmService(client), transport

    return _make


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'nanoheads.db'}"


@pytest.fixture()
def repository(database_url: str):
    repo = EditorialRepository(database_url)
    repo.init_schema()
    yield repo
    repo.close()
