"""Degradation policy helpers for oversized chat-completion requests."""

from __future__ import annotations

from dataclasses import dataclass

from nanoheads.llm.models import FailureClass

MIN_SHRUNK_INPUT_CHARS = 900
SHRINK_RATIO = 0.72
MAX_SHRINK_ATTEMPTS = 4


@dataclass(slots=True)
class ShrinkDecision:
    """Decision returned by the input-shrink policy."""

    should_retry: bool
    reason: str
    next_input: str


def shrink_prompt_input(text: str) -> str:
    """Cut the input to ~72% of its length, never below 900 chars and never unchanged."""

    clean = text.strip()
    if len(clean) <= MIN_SHRUNK_INPUT_CHARS:
        return clean

    next_len = max(int(len(clean) * SHRINK_RATIO), MIN_SHRUNK_INPUT_CHARS)
    if next_len >= len(clean):
        next_len = len(clean) - 1
    return clean[:next_len].strip()


def decide_input_shrink(
    *,
    failure_class: FailureClass,
    current_input: str,
    attempt: int,
    max_attempts: int = MAX_SHRINK_ATTEMPTS,
) -> ShrinkDecision:
    """Allow a shorter retry only for oversized requests that can still shrink."""

    if failure_class != FailureClass.REQUEST_TOO_LARGE:
        return ShrinkDecision(
            should_retry=False,
            reason="Failure class is not recoverable by shrinking input.",
            next_input=current_input,
        )
    if attempt >= max_attempts:
        return ShrinkDecision(
            should_retry=False,
            reason="Shrink attempts exhausted.",
            next_input=current_input,
        )

    shorter = shrink_prompt_input(current_input)
    if shorter == current_input:
        return ShrinkDecision(
            should_retry=False,
            reason="Input is already at the minimum size.",
            next_input=current_input,
        )
    return ShrinkDecision(should_retry=True, reason="Retrying with shorter input.", next_input=shorter)
