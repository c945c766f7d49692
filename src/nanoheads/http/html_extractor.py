"""HTML to clean text extraction using trafilatura."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import trafilatura

from nanoheads.editorial.cleaning import html_to_text

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExtractionResult:
    """Result of HTML text extraction."""

    text: str
    is_success: bool
    method: str = ""
    error: str | None = None


def extract_text(html: str, *, url: str | None = None) -> ExtractionResult:
    """Extract main content text from HTML.

    Tries trafilatura in precision mode, then in recall mode, and finally
    strips tags with the regex cleaner so pages trafilatura rejects still
    yield their visible text.
    """

    if not html or not html.strip():
        return ExtractionResult(text="", is_success=False, error="empty HTML input")

    for mode in ("precision", "recall"):
        try:
            text = trafilatura.extract(
                html,
                url=url,
                include_tables=True,
                include_links=False,
                favor_precision=mode == "precision",
                favor_recall=mode == "recall",
                deduplicate=True,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("trafilatura %s extraction failed for %s: %s", mode, url or "<unknown>", exc)
            text = None
        if text and text.strip():
            return ExtractionResult(text=text.strip(), is_success=True, method=f"trafilatura-{mode}")

    text = html_to_text(html)
    if not text:
        return ExtractionResult(text="", is_success=False, error="no content extracted")
    return ExtractionResult(text=text, is_success=True, method="regex")
