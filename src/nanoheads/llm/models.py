"""Domain models for chat-completion calls and their failure classes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureClass(str, Enum):
    """Normalized failure classes used by the degradation policy."""

    REQUEST_TOO_LARGE = "request_too_large"
    JSON_MODE_UNSUPPORTED = "json_mode_unsupported"
    BILLING_OR_QUOTA = "billing_or_quota"
    ACCESS_OR_AUTH = "access_or_auth"
    MODEL_NOT_AVAILABLE = "model_not_available"
    RATE_LIMIT_TRANSIENT = "rate_limit_transient"
    NON_RETRYABLE = "non_retryable"


@dataclass(slots=True)
class ChatCompletionRequest:
    """One system+user chat-completion call."""

    step: str
    system_prompt: str
    user_prompt: str
    temperature: float = 0.0
    max_tokens: int = 0
    json_mode: bool = False


@dataclass(slots=True)
class ChatMessage:
    """Single chat message in the request payload."""

    role: str
    content: str
