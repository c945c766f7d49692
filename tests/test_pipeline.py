from __future__ import annotations

import json

import allure
import httpx
import pytest
from conftest import chat_response

from nanoheads.config import AnalysisSettings
from nanoheads.editorial.models import PhaseOneInput
from nanoheads.editorial.pipeline import PhaseOnePipeline

pytestmark = [
    allure.epic("Editorial"),
    allure.feature("Phase One Pipeline"),
]

ENGLISH_TEXT = (
    "Heavy rain flooded several low-lying areas of Hyderabad on Tuesday evening. "
    "Officials said schools would remain closed on Wednesday."
)
TELUGU_TEXT = "మంగళవారం సాయంత్రం హైదరాబాద్‌లో భారీ వర్షం కురిసింది."

SOURCE_HTML = """
<html><body>
  <article>
    <h1>Rains lash Hyderabad</h1>
    <p>Heavy rain flooded several low-lying areas of Hyderabad on Tuesday evening,
    according to the Greater Hyderabad Municipal Corporation.</p>
    <p>Officials said relief teams were deployed in Mehdipatnam and Tolichowki and
    that schools would remain closed on Wednesday as a precaution.</p>
  </article>
</body></html>
"""


def _json(**payload) -> httpx.Response:
    return chat_response(json.dumps(payload))


def _english_run() -> list[httpx.Response]:
    return [
        _json(facts=["Heavy rain flooded parts of Hyderabad.", "Schools closed on Wednesday."]),
        _json(gaps=["How many homes were affected?"]),
        _json(article="Heavy rain flooded parts of Hyderabad, and schools closed on Wednesday."),
    ]


def _pipeline(repository, service, **kwargs) -> PhaseOnePipeline:
    return PhaseOnePipeline(
        repository=repository,
        llm=service,
        analysis_settings=kwargs.pop("analysis_settings", AnalysisSettings()),
        **kwargs,
    )


def test_run_phase_one_stores_english_analysis(repository, make_service, groq_settings) -> None:
    service, transport = make_service(groq_settings, _english_run())

    result = _pipeline(repository, service).run_phase_one(
        PhaseOneInput(text=ENGLISH_TEXT, category="Weather"),
    )

    assert result.language == "English"
    assert result.facts == ["Heavy rain flooded parts of Hyderabad.", "Schools closed on Wednesday."]
    assert result.gaps == ["How many homes were affected?"]
    assert len(transport.requests) == 3
    detail = repository.get_analysis(result.article_id)
    assert detail.raw_text == ENGLISH_TEXT
    assert detail.article_text == result.article
    assert detail.category == "Weather"
    assert [fact.text for fact in detail.facts] == result.facts


def test_run_phase_one_generates_in_english_and_translates_to_telugu(
    repository,
    make_service,
    groq_settings,
) -> None:
    service, transport = make_service(
        groq_settings,
        [
            *_english_run(),
            chat_response("1. హైదరాబాద్‌లో వరదలు.\n2. బుధవారం పాఠశాలలు మూసివేత."),
            chat_response("ఎన్ని ఇళ్లు ప్రభావితమయ్యాయి?"),
            chat_response("హైదరాబాద్‌లో భారీ వర్షం కురిసింది."),
        ],
    )

    result = _pipeline(repository, service).run_phase_one(PhaseOneInput(text=TELUGU_TEXT))

    assert result.language == "Telugu"
    assert result.facts == ["హైదరాబాద్‌లో వరదలు.", "బుధవారం పాఠశాలలు మూసివేత."]
    assert result.gaps == ["ఎన్ని ఇళ్లు ప్రభావితమయ్యాయి?"]
    assert result.article == "హైదరాబాద్‌లో భారీ వర్షం కురిసింది."
    system_prompts = [body["messages"][0]["content"] for body in transport.requests[:3]]
    assert all("Output language must be English" in prompt for prompt in system_prompts)
    assert repository.get_analysis(result.article_id).category == "Uncategorized"


def test_explicit_language_overrides_detection(repository, make_service, groq_settings) -> None:
    service, transport = make_service(groq_settings, _english_run())

    result = _pipeline(repository, service).run_phase_one(
        PhaseOneInput(text=TELUGU_TEXT, language="en"),
    )

    assert result.language == "English"
    assert len(transport.requests) == 3


def test_run_phase_one_truncates_llm_input(repository, make_service, groq_settings) -> None:
    service, transport = make_service(groq_settings, _english_run())
    long_text = "a" * 5000

    result = _pipeline(
        repository,
        service,
        analysis_settings=AnalysisSettings(max_input_chars=1000),
    ).run_phase_one(PhaseOneInput(text=long_text))

    assert "a" * 1000 in transport.user_prompts[0]
    assert "a" * 1001 not in transport.user_prompts[0]
    assert repository.get_analysis(result.article_id).raw_text == long_text


def test_resolve_input_prefers_text_over_url(repository, make_service, groq_settings) -> None:
    service, _ = make_service(groq_settings, [])
    pipeline = _pipeline(repository, service)

    assert pipeline.resolve_input(
        PhaseOneInput(text="  pasted  ", url=" https://example.com/a "),
    ) == ("pasted", "https://example.com/a")
    with pytest.raises(ValueError, match="provide either text or url"):
        pipeline.resolve_input(PhaseOneInput(text="  ", url=" "))
    with pytest.raises(ValueError, match="url is invalid"):
        pipeline.resolve_input(PhaseOneInput(url="example.com/story"))


def test_resolve_input_fetches_and_extracts_url(repository, make_service, groq_settings) -> None:
    service, transport = make_service(groq_settings, _english_run())
    url_transport = httpx.MockTransport(
        lambda request: httpx.Response(
            200,
            text=SOURCE_HTML,
            headers={"content-type": "text/html; charset=utf-8"},
        ),
    )

    result = _pipeline(repository, service, url_transport=url_transport).run_phase_one(
        PhaseOneInput(url="https://example.com/rains"),
    )

    detail = repository.get_analysis(result.article_id)
    assert detail.source_url == "https://example.com/rains"
    assert "Heavy rain flooded several low-lying areas" in detail.raw_text
    assert "<p>" not in detail.raw_text
    assert "Heavy rain flooded several low-lying areas" in transport.user_prompts[0]


def test_resolve_input_reports_fetch_and_extraction_failures(
    repository,
    make_service,
    groq_settings,
) -> None:
    service, _ = make_service(groq_settings, [])
    missing = _pipeline(
        repository,
        service,
        url_transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    blank = _pipeline(
        repository,
        service,
        url_transport=httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html><body>  </body></html>"),
        ),
    )

    with pytest.raises(ValueError, match="failed to read url content: url returned status 500"):
        missing.resolve_input(PhaseOneInput(url="https://example.com/down"))
    with pytest.raises(ValueError, match="could not extract readable text from url"):
        blank.resolve_input(PhaseOneInput(url="https://example.com/empty"))


def test_generate_publish_options_uses_reviewed_facts(
    repository,
    make_service,
    groq_settings,
) -> None:
    article_id = repository.save_phase_one(
        source_url="",
        raw_text=ENGLISH_TEXT,
        article_text="Heavy rain flooded parts of Hyderabad.",
        category="",
        facts=["Kept fact.", "Dropped fact."],
        gaps=["Open question?", "Answered question?", "Skipped question?"],
    )
    detail = repository.get_analysis(article_id)
    repository.update_fact(detail.facts[1].id, included=False)
    repository.update_gap(detail.gaps[1].id, resolved=True)
    repository.update_gap(detail.gaps[2].id, selected=False)

    service, transport = make_service(
        groq_settings,
        [
            _json(headlines=["Rains lash Hyderabad", "City under water"]),
            _json(straplines=["Schools shut as rain continues"]),
        ],
    )

    options = _pipeline(repository, service).generate_publish_options(article_id)

    assert options.language == "English"
    assert [option.text for option in options.headlines] == ["Rains lash Hyderabad", "City under water"]
    assert [option.text for option in options.straplines] == ["Schools shut as rain continues"]
    headline_prompt, strapline_prompt = transport.user_prompts
    assert "Kept fact." in headline_prompt
    assert "Dropped fact." not in headline_prompt
    assert "Open question?" in strapline_prompt
    assert "Answered question?" not in strapline_prompt
    assert "Skipped question?" not in strapline_prompt
    assert len(repository.get_analysis(article_id).headlines) == 2


def test_generate_publish_options_translates_for_telugu(
    repository,
    make_service,
    groq_settings,
) -> None:
    article_id = repository.save_phase_one(
        source_url="",
        raw_text=TELUGU_TEXT,
        article_text="హైదరాబాద్‌లో భారీ వర్షం కురిసింది.",
        category="",
        facts=["హైదరాబాద్‌లో వరదలు."],
        gaps=[],
    )
    service, transport = make_service(
        groq_settings,
        [
            _json(headlines=["Rains lash Hyderabad"]),
            _json(straplines=["Schools shut"]),
            chat_response("హైదరాబాద్‌ను ముంచెత్తిన వర్షాలు"),
            chat_response("పాఠశాలలు మూసివేత"),
        ],
    )

    options = _pipeline(repository, service).generate_publish_options(article_id)

    assert options.language == "Telugu"
    assert [option.text for option in options.headlines] == ["హైదరాబాద్‌ను ముంచెత్తిన వర్షాలు"]
    assert [option.text for option in options.straplines] == ["పాఠశాలలు మూసివేత"]
    assert "Output language must be English" in transport.requests[0]["messages"][0]["content"]


def test_generate_publish_options_requires_included_facts(
    repository,
    make_service,
    groq_settings,
) -> None:
    article_id = repository.save_phase_one(
        source_url="",
        raw_text=ENGLISH_TEXT,
        article_text="",
        category="",
        facts=[],
        gaps=[],
    )
    service, transport = make_service(groq_settings, [])

    with pytest.raises(ValueError, match="analysis has no included facts"):
        _pipeline(repository, service).generate_publish_options(article_id)
    assert transport.requests == []
