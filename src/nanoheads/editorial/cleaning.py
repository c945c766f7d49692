"""Text, URL, and display normalization for editorial records."""

from __future__ import annotations

import html
import re
import unicodedata
from urllib.parse import urlparse

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9]+")

ANALYSIS_STATUSES = ("draft", "pending", "completed")
DEFAULT_MAX_INPUT_CHARS = 12_000
TITLE_MAX_CHARS = 120
SLUG_MAX_CHARS = 80


def html_to_text(raw_html: str) -> str:
    """Convert HTML markup into normalized plain text."""

    if not raw_html:
        return ""
    no_scripts = _SCRIPT_STYLE_RE.sub(" ", raw_html)
    stripped = _TAG_RE.sub(" ", no_scripts)
    unescaped = html.unescape(stripped)
    normalized = _WHITESPACE_RE.sub(" ", unescaped)
    return normalized.strip()


def compact_llm_input(raw: str, max_chars: int = DEFAULT_MAX_INPUT_CHARS) -> str:
    clean = raw.strip()
    if len(clean) <= max_chars:
        return clean
    return clean[:max_chars]


def validate_source_url(url: str) -> str:
    """Return the URL when it is absolute http(s), raise ValueError otherwise."""

    clean = url.strip()
    parsed = urlparse(clean)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        raise ValueError("url is invalid")
    return clean


def single_line(value: str) -> str:
    return " ".join(value.split())


def truncate_display(value: str, max_chars: int) -> str:
    if len(value) <= max_chars:
        return value
    return value[:max_chars] + "..."


def build_analysis_title(article_id: int, headline: str, source_url: str, raw_text: str) -> str:
    """Pick a list title: headline, then URL host+path, then the raw text, then the id."""

    clean_headline = headline.strip()
    if clean_headline:
        return truncate_display(clean_headline, TITLE_MAX_CHARS)

    clean_source = source_url.strip()
    if clean_source:
        parsed = urlparse(clean_source)
        if parsed.netloc:
            host_path = (parsed.netloc + parsed.path).strip()
            if host_path and host_path != "/":
                return truncate_display(host_path, TITLE_MAX_CHARS)
        return truncate_display(clean_source, TITLE_MAX_CHARS)

    clean_raw = raw_text.strip()
    if clean_raw:
        return truncate_display(single_line(clean_raw), TITLE_MAX_CHARS)

    return f"Analysis #{article_id}"


def normalize_analysis_status(status: str) -> str:
    clean = status.strip().lower()
    if clean not in ANALYSIS_STATUSES:
        raise ValueError("status must be draft, pending, or completed")
    return clean


def format_status(status: str | None) -> str:
    """Display form of a stored status; blank means draft."""

    clean = (status or "").strip().lower()
    if not clean:
        return "Draft"
    return clean[:1].upper() + clean[1:]


def normalize_limit(limit: int) -> int:
    if limit <= 0:
        return 10
    return min(limit, 200)


def slugify(value: str, max_chars: int = SLUG_MAX_CHARS) -> str:
    """ASCII, lowercase, hyphen-separated slug; empty when nothing survives."""

    ascii_text = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_INVALID_RE.sub("-", ascii_text.lower()).strip("-")
    if len(slug) > max_chars:
        slug = slug[:max_chars].rstrip("-")
    return slug
