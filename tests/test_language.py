from __future__ import annotations

import allure
import pytest

from nanoheads.editorial.language import (
    contains_telugu_script,
    normalize_output_language,
    stable_generation_language,
)

pytestmark = [
    allure.epic("Editorial"),
    allure.feature("Language Detection"),
]


def test_contains_telugu_script() -> None:
    assert contains_telugu_script("హైదరాబాద్ లో వర్షం")
    assert contains_telugu_script("Rain in హైదరాబాద్")
    assert not contains_telugu_script("Rain in Hyderabad")
    assert not contains_telugu_script("")


@pytest.mark.parametrize(
    ("requested", "text", "expected"),
    [
        ("te", "English text", "Telugu"),
        (" Telugu ", "English text", "Telugu"),
        ("తెలుగు", "English text", "Telugu"),
        ("EN", "వర్షం", "English"),
        ("english", "వర్షం", "English"),
        (None, "వర్షం కురిసింది", "Telugu"),
        ("", "Plain English", "English"),
        ("hindi", "Plain English", "English"),
        ("fr", "వర్షం", "Telugu"),
    ],
)
def test_normalize_output_language(requested: str | None, text: str, expected: str) -> None:
    assert normalize_output_language(requested, text) == expected


def test_stable_generation_language() -> None:
    assert stable_generation_language("Telugu") == "English"
    assert stable_generation_language("telugu") == "English"
    assert stable_generation_language("English") == "English"
