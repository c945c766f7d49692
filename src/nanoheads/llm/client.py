"""OpenAI-compatible chat-completion HTTP client."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from nanoheads.config import GROQ_PROVIDER, LlmSettings, resolve_provider_settings
from nanoheads.llm.models import ChatCompletionRequest, ChatMessage
from nanoheads.llm.postprocess import preview_for_log

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = "GROQ_API_KEY (or OPENAI_API_KEY) is missing"


class ApiRequestError(RuntimeError):
    """Provider answered with an HTTP error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"llm request failed ({status_code}): {message}")
        self.status_code = status_code
        self.message = message


class LlmOutputError(RuntimeError):
    """Provider answered, but the content is unusable."""


class LlmConfigurationError(RuntimeError):
    """Client cannot make requests with the current settings."""


class ChatCompletionClient:
    """Blocking client for ``POST {base_url}/chat/completions``."""

    def __init__(
        self,
        settings: LlmSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.Client(
            timeout=httpx.Timeout(settings.timeout_seconds),
            transport=transport,
        )

    @property
    def settings(self) -> LlmSettings:
        return self._settings

    def apply_settings(self, provider: str, model: str) -> None:
        """Switch provider/model; credentials and base URL are re-read from env."""

        self._settings = resolve_provider_settings(provider, model, self._settings)
        logger.info(
            "LLM settings applied: provider=%s model=%s",
            self._settings.provider,
            self._settings.model,
        )

    def ensure_configured(self) -> None:
        if not self._settings.api_key:
            raise LlmConfigurationError(MISSING_API_KEY_MESSAGE)

    def uses_json_mode(self) -> bool:
        """Groq endpoints get plain completions; everything else asks for json_object."""

        if self._settings.provider.strip().lower() == GROQ_PROVIDER:
            return False
        return "groq" not in self._settings.base_url.strip().lower()

    def complete(self, request: ChatCompletionRequest) -> str:
        """Send one completion request and return the trimmed first-choice content."""

        self.ensure_configured()
        settings = self._settings
        step = request.step
        preview_chars = settings.log_preview_chars

        body: dict[str, Any] = {
            "model": settings.model,
            "messages": [
                _message_payload(ChatMessage(role="system", content=request.system_prompt)),
                _message_payload(ChatMessage(role="user", content=request.user_prompt)),
            ],
        }
        if request.temperature:
            body["temperature"] = request.temperature
        if request.max_tokens:
            body["max_tokens"] = request.max_tokens
        if request.json_mode:
            body["response_format"] = {"type": "json_object"}

        logger.info(
            "[llm][%s] model=%s provider=%s json_mode=%s",
            step,
            settings.model,
            settings.provider,
            request.json_mode,
        )
        logger.debug(
            "[llm][%s] system prompt:\n%s",
            step,
            preview_for_log(request.system_prompt, preview_chars),
        )
        logger.debug(
            "[llm][%s] user prompt:\n%s",
            step,
            preview_for_log(request.user_prompt, preview_chars),
        )

        response = self._client.post(
            f"{settings.base_url.rstrip('/')}/chat/completions",
            json=body,
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
            },
        )
        if response.status_code >= 400:
            raise ApiRequestError(response.status_code, extract_error_message(response.text))

        try:
            payload = response.json()
        except json.JSONDecodeError as error:
            raise LlmOutputError(f"parse llm response body: {error}") from error

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise LlmOutputError(f"{settings.provider} returned no choices")

        content = _choice_content(choices[0]).strip()
        logger.debug("[llm][%s] raw response:\n%s", step, preview_for_log(content, preview_chars))
        return content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ChatCompletionClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def extract_error_message(body: str) -> str:
    """Pull a human message out of a provider error body, else return the raw body."""

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return body
    if not isinstance(payload, dict):
        return body

    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    elif isinstance(error, str) and error.strip():
        return error

    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return body


def _message_payload(message: ChatMessage) -> dict[str, str]:
    return {"role": message.role, "content": message.content}


def _choice_content(choice: object) -> str:
    if not isinstance(choice, dict):
        return ""
    message = choice.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""
