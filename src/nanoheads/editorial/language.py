"""Output-language resolution for Telugu/English analyses."""

from __future__ import annotations

import re

TELUGU = "Telugu"
ENGLISH = "English"

_TELUGU_SCRIPT_RE = re.compile(r"[ఀ-౿]")
_TELUGU_ALIASES = frozenset({"te", "telugu", "తెలుగు"})
_ENGLISH_ALIASES = frozenset({"en", "english"})


def contains_telugu_script(text: str) -> bool:
    return bool(_TELUGU_SCRIPT_RE.search(text))


def normalize_output_language(requested: str | None, text: str) -> str:
    """Map an explicit language request, or detect from the text.

    Returns one of: ``Telugu``, ``English``.
    """

    clean = (requested or "").strip().lower()
    if clean in _TELUGU_ALIASES:
        return TELUGU
    if clean in _ENGLISH_ALIASES:
        return ENGLISH
    return TELUGU if contains_telugu_script(text) else ENGLISH


def stable_generation_language(output_language: str) -> str:
    """Telugu output is drafted in English and translated afterwards."""

    if output_language.strip().lower() == TELUGU.lower():
        return ENGLISH
    return output_language
