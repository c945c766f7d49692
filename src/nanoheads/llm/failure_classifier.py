"""Deterministic API failure classification for the degradation policy."""

from __future__ import annotations

from dataclasses import dataclass

from nanoheads.llm.client import ApiRequestError
from nanoheads.llm.models import FailureClass

API_FAILURE_CLASSIFIER_VERSION = 1

_REQUEST_TOO_LARGE_PATTERNS: tuple[str, ...] = (
    "request too large",
    "reduce your message size",
    "context length",
)
# Both fragments must be present: TPM errors quote the requested token count.
_REQUEST_TOO_LARGE_COMPOUND: tuple[str, str] = ("tokens per minute", "requested")
_JSON_MODE_UNSUPPORTED_PATTERNS: tuple[str, ...] = (
    "response_format",
    "json_object",
    "failed to generate json",
    "failed_generation",
)
_BILLING_OR_QUOTA_PATTERNS: tuple[str, ...] = (
    "quota",
    "insufficient",
    "billing",
    "payment",
    "credits",
)
_ACCESS_OR_AUTH_PATTERNS: tuple[str, ...] = (
    "unauthorized",
    "forbidden",
    "permission denied",
    "invalid api key",
    "authentication",
)
_MODEL_NOT_AVAILABLE_PATTERNS: tuple[str, ...] = (
    "model not found",
    "model_not_found",
    "does not exist",
    "unknown model",
    "invalid model",
    "model has been decommissioned",
)
_RATE_LIMIT_TRANSIENT_PATTERNS: tuple[str, ...] = (
    "too many requests",
    "rate limit",
    "rate_limit",
    "please retry",
    "try again later",
)

_ORDERED_RULES: tuple[tuple[FailureClass, str, tuple[str, ...]], ...] = (
    (
        FailureClass.JSON_MODE_UNSUPPORTED,
        "json_mode_unsupported",
        _JSON_MODE_UNSUPPORTED_PATTERNS,
    ),
    (FailureClass.BILLING_OR_QUOTA, "billing_or_quota", _BILLING_OR_QUOTA_PATTERNS),
    (FailureClass.ACCESS_OR_AUTH, "access_or_auth", _ACCESS_OR_AUTH_PATTERNS),
    (FailureClass.MODEL_NOT_AVAILABLE, "model_not_available", _MODEL_NOT_AVAILABLE_PATTERNS),
    (
        FailureClass.RATE_LIMIT_TRANSIENT,
        "rate_limit_transient",
        _RATE_LIMIT_TRANSIENT_PATTERNS,
    ),
)


@dataclass(slots=True)
class ApiFailureClassification:
    """Normalized failure classification result."""

    failure_class: FailureClass
    matched_rule: str
    matched_pattern: str | None


def classify_api_failure(message: str) -> ApiFailureClassification:
    """Classify an API error message; size and JSON-mode rules win over the rest."""

    haystack = message.strip().lower()

    pattern = _first_match(haystack, _REQUEST_TOO_LARGE_PATTERNS)
    if pattern is None and all(part in haystack for part in _REQUEST_TOO_LARGE_COMPOUND):
        pattern = " + ".join(_REQUEST_TOO_LARGE_COMPOUND)
    if pattern is not None:
        return ApiFailureClassification(
            failure_class=FailureClass.REQUEST_TOO_LARGE,
            matched_rule="request_too_large",
            matched_pattern=pattern,
        )

    for failure_class, rule, patterns in _ORDERED_RULES:
        pattern = _first_match(haystack, patterns)
        if pattern is not None:
            return ApiFailureClassification(
                failure_class=failure_class,
                matched_rule=rule,
                matched_pattern=pattern,
            )

    return ApiFailureClassification(
        failure_class=FailureClass.NON_RETRYABLE,
        matched_rule="fallback_non_retryable",
        matched_pattern=None,
    )


def is_request_too_large(error: BaseException) -> bool:
    """True for provider errors that a shorter input could fix."""

    if not isinstance(error, ApiRequestError):
        return False
    return is_request_too_large_message(error.message)


def is_request_too_large_message(message: str) -> bool:
    if not message.strip():
        return False
    return classify_api_failure(message).failure_class == FailureClass.REQUEST_TOO_LARGE


def should_retry_without_json_mode(message: str) -> bool:
    """True when the provider rejected or choked on ``response_format=json_object``."""

    return _first_match(message.lower(), _JSON_MODE_UNSUPPORTED_PATTERNS) is not None


def _first_match(haystack: str, patterns: tuple[str, ...]) -> str | None:
    for pattern in patterns:
        if pattern in haystack:
            return pattern
    return None
