"""Best-effort JSON recovery from noisy chat-completion content."""

from __future__ import annotations

import json
import re

from nanoheads.llm.postprocess import dedupe_and_trim

_LEADING_LIST_MARKER = re.compile(r"^\s*(?:[-*]+|\d+[\)\].:-]?)\s*")


def strip_code_fence(value: str) -> str:
    """Remove one leading ```json / ``` fence and one trailing ``` fence."""

    trimmed = value.strip()
    trimmed = trimmed.removeprefix("```json")
    trimmed = trimmed.removeprefix("```")
    trimmed = trimmed.removesuffix("```")
    return trimmed.strip()


def extract_first_json_object(value: str) -> str:
    """Return the first brace-balanced ``{...}`` span, honouring JSON string escapes."""

    start = value.find("{")
    if start < 0:
        return ""

    depth = 0
    in_string = False
    escape = False
    for index in range(start, len(value)):
        char = value[index]
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return value[start : index + 1].strip()
    return ""


def normalize_json_content(content: str) -> str | None:
    """Return clean JSON text from model output, or None when nothing valid is found."""

    clean = strip_code_fence(content)
    if _is_valid_json(clean):
        return clean

    extracted = extract_first_json_object(clean)
    if extracted and _is_valid_json(extracted):
        return extracted
    return None


def parse_first_string_array_field(raw_json: str, preferred_key: str) -> list[str]:
    """Read a string list by exact key, then by loose key match, then from a sole field."""

    payload = _try_load_dict(raw_json)
    if payload is None:
        return []

    values = _as_string_list(payload.get(preferred_key))
    if values:
        return values

    for key, value in payload.items():
        if key.strip().lower() == preferred_key.lower():
            values = _as_string_list(value)
            if values:
                return values

    if len(payload) == 1:
        return _as_string_list(next(iter(payload.values())))
    return []


def parse_first_string_field(raw_json: str, preferred_key: str) -> str:
    """Read a string by exact key, then by loose key match, then from a sole field."""

    payload = _try_load_dict(raw_json)
    if payload is None:
        return ""

    value = _as_string(payload.get(preferred_key))
    if value:
        return value

    for key, candidate in payload.items():
        if key.strip().lower() == preferred_key.lower():
            value = _as_string(candidate)
            if value:
                return value

    if len(payload) == 1:
        return _as_string(next(iter(payload.values())))
    return ""


def parse_line_list(content: str) -> list[str]:
    """Parse a plain-text (or JSON array) list response into clean deduped items."""

    trimmed = strip_code_fence(content)
    if not trimmed:
        return []

    try:
        parsed = json.loads(trimmed)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list) and all(isinstance(item, str) for item in parsed):
        return dedupe_and_trim(parsed)

    items: list[str] = []
    for line in trimmed.splitlines():
        clean = line.strip()
        if not clean:
            continue
        clean = _LEADING_LIST_MARKER.sub("", clean, count=1).strip()
        if clean:
            items.append(clean)
    return dedupe_and_trim(items)


def _is_valid_json(raw: str) -> bool:
    if not raw:
        return False
    try:
        json.loads(raw)
    except json.JSONDecodeError:
        return False
    return True


def _try_load_dict(raw: str) -> dict[str, object] | None:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _as_string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [text for text in (_as_string(item) for item in value) if text]


def _as_string(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()
