"""List and text post-processing for LLM outputs."""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_LOG_PREVIEW_CHARS = 2_500


def dedupe_and_trim(values: Iterable[str]) -> list[str]:
    """Trim values, drop blanks, and drop case-insensitive duplicates keeping first order."""

    result: list[str] = []
    seen: set[str] = set()
    for value in values:
        clean = value.strip()
        if not clean:
            continue
        key = clean.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(clean)
    return result


def limit_list_items(values: list[str], max_items: int) -> list[str]:
    if max_items <= 0 or len(values) <= max_items:
        return values
    return values[:max_items]


def truncate_for_prompt(value: str, max_chars: int) -> str:
    """Cut text for prompt embedding; never leaves surrounding whitespace."""

    if max_chars <= 0:
        return ""
    clean = value.strip()
    if len(clean) <= max_chars:
        return clean
    return clean[:max_chars].strip()


def preview_for_log(value: str, max_chars: int = DEFAULT_LOG_PREVIEW_CHARS) -> str:
    if len(value) <= max_chars:
        return value
    return f"{value[:max_chars]}\n... [truncated, total_chars={len(value)}]"


def bullet_block(values: Iterable[str], *, empty: str = "") -> str:
    """Render values as a ``- item`` block, or ``empty`` when nothing remains."""

    items = dedupe_and_trim(values)
    if not items:
        return empty
    return "- " + "\n- ".join(items)
