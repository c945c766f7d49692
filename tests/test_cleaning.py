from __future__ import annotations

import allure
import pytest

from nanoheads.editorial.cleaning import (
    build_analysis_title,
    compact_llm_input,
    format_status,
    html_to_text,
    normalize_analysis_status,
    normalize_limit,
    slugify,
    truncate_display,
    validate_source_url,
)

pytestmark = [
    allure.epic("Editorial"),
    allure.feature("Text Normalization"),
]


def test_html_to_text_drops_scripts_and_unescapes() -> None:
    raw = (
        "<html><head><style>p {color: red}</style><script>var x = 1;</script></head>"
        "<body><p>Rates &amp; taxes</p>\n\n<p>rise   again</p></body></html>"
    )
    assert html_to_text(raw) == "Rates & taxes rise again"
    assert html_to_text("") == ""


def test_compact_llm_input() -> None:
    assert compact_llm_input("  short  ") == "short"
    assert compact_llm_input("abcdef", max_chars=4) == "abcd"


def test_validate_source_url() -> None:
    assert validate_source_url(" https://example.com/story ") == "https://example.com/story"
    assert validate_source_url("HTTP://example.com") == "HTTP://example.com"
    for bad in ("example.com/story", "ftp://example.com/file", "https://", "   "):
        with pytest.raises(ValueError, match="url is invalid"):
            validate_source_url(bad)


def test_truncate_display() -> None:
    assert truncate_display("short", 10) == "short"
    assert truncate_display("abcdefghij", 4) == "abcd..."


def test_build_analysis_title_prefers_headline() -> None:
    title = build_analysis_title(3, "  Big headline  ", "https://example.com/a", "raw")
    assert title == "Big headline"


def test_build_analysis_title_uses_url_host_and_path() -> None:
    assert build_analysis_title(3, "", "https://example.com/news/a", "raw") == "example.com/news/a"
    assert build_analysis_title(3, "", "https://example.com", "raw") == "example.com"


def test_build_analysis_title_falls_back_to_text_then_id() -> None:
    raw = "First line\nsecond   line " + "x" * 200
    title = build_analysis_title(3, "", "", raw)
    assert title.startswith("First line second line x")
    assert title.endswith("...")
    assert len(title) == 123
    assert build_analysis_title(7, " ", " ", " ") == "Analysis #7"


def test_status_helpers() -> None:
    assert normalize_analysis_status(" Completed ") == "completed"
    with pytest.raises(ValueError, match="status must be draft, pending, or completed"):
        normalize_analysis_status("published")
    assert format_status(None) == "Draft"
    assert format_status("") == "Draft"
    assert format_status("pending") == "Pending"


@pytest.mark.parametrize(
    ("limit", "expected"),
    [(0, 10), (-5, 10), (5, 5), (200, 200), (1000, 200)],
)
def test_normalize_limit(limit: int, expected: int) -> None:
    assert normalize_limit(limit) == expected


def test_slugify() -> None:
    assert slugify("  Rains Lash Hyderabad: 3 Dead!  ") == "rains-lash-hyderabad-3-dead"
    assert slugify("Café déjà vu") == "cafe-deja-vu"
    assert slugify("హైదరాబాద్") == ""
    long_slug = slugify("word " * 40)
    assert len(long_slug) <= 80
    assert not long_slug.endswith("-")
