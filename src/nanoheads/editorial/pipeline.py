"""Phase-one analysis pipeline and the publish-options pass."""

from __future__ import annotations

import logging

import httpx

from nanoheads.config import AnalysisSettings
from nanoheads.editorial.cleaning import compact_llm_input, validate_source_url
from nanoheads.editorial.language import normalize_output_language, stable_generation_language
from nanoheads.editorial.models import PhaseOneInput, PhaseOneResult, PublishOptions
from nanoheads.editorial.repository import EditorialRepository
from nanoheads.http.fetcher import HttpFetcher
from nanoheads.http.html_extractor import extract_text
from nanoheads.llm.service import EditorialLlmService

logger = logging.getLogger(__name__)


class PhaseOnePipeline:
    """Runs facts -> gaps -> article and stores the analysis."""

    def __init__(
        self,
        *,
        repository: EditorialRepository,
        llm: EditorialLlmService,
        analysis_settings: AnalysisSettings,
        url_transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.repository = repository
        self.llm = llm
        self.analysis_settings = analysis_settings
        self._url_transport = url_transport

    def run_phase_one(self, request: PhaseOneInput) -> PhaseOneResult:
        raw_text, source_url = self.resolve_input(request)
        output_language = normalize_output_language(request.language, raw_text)
        generation_language = stable_generation_language(output_language)
        llm_input = compact_llm_input(raw_text, self.analysis_settings.max_input_chars)
        logger.info(
            "Phase one started: chars=%d output_language=%s generation_language=%s",
            len(llm_input),
            output_language,
            generation_language,
        )

        facts = self.llm.extract_facts(llm_input, generation_language)
        gaps = self.llm.generate_gap_questions(facts, generation_language)
        article = self.llm.generate_structured_article(facts, gaps, generation_language)

        if output_language != generation_language:
            facts = self.llm.translate_list(facts, output_language)
            gaps = self.llm.translate_list(gaps, output_language)
            article = self.llm.translate_text(article, output_language)

        article_id = self.repository.save_phase_one(
            source_url=source_url,
            raw_text=raw_text,
            article_text=article,
            category=request.category,
            facts=facts,
            gaps=gaps,
        )
        return PhaseOneResult(
            article_id=article_id,
            language=output_language,
            facts=facts,
            gaps=gaps,
            article=article,
        )

    def resolve_input(self, request: PhaseOneInput) -> tuple[str, str]:
        """Return ``(raw_text, source_url)``; pasted text wins over the URL."""

        text = request.text.strip()
        source_url = request.url.strip()
        if text:
            return text, source_url
        if not source_url:
            raise ValueError("provide either text or url")

        source_url = validate_source_url(source_url)
        with HttpFetcher(
            timeout_seconds=self.analysis_settings.url_fetch_timeout_seconds,
            max_bytes=self.analysis_settings.url_fetch_max_bytes,
            transport=self._url_transport,
        ) as fetcher:
            fetched = fetcher.fetch(source_url)
        if not fetched.is_success:
            raise ValueError(f"failed to read url content: {fetched.error}")

        extracted = extract_text(fetched.content, url=source_url)
        if not extracted.is_success or not extracted.text.strip():
            raise ValueError("could not extract readable text from url")
        logger.info(
            "Fetched %s: chars=%d method=%s truncated=%s",
            source_url,
            len(extracted.text),
            extracted.method,
            fetched.truncated,
        )
        return extracted.text.strip(), source_url

    def generate_publish_options(
        self,
        article_id: int,
        language: str | None = None,
    ) -> PublishOptions:
        """Generate and store headline/strapline options from the reviewed facts."""

        detail = self.repository.get_analysis(article_id)

        facts = [fact.text for fact in detail.facts if fact.included]
        if not facts:
            raise ValueError("analysis has no included facts")
        gaps = [gap.text for gap in detail.gaps if gap.selected and not gap.resolved]

        output_language = normalize_output_language(
            language,
            detail.article_text or detail.raw_text,
        )
        generation_language = stable_generation_language(output_language)

        headlines = self.llm.generate_headline_options(
            facts,
            detail.article_text,
            generation_language,
        )
        straplines = self.llm.generate_strapline_options(
            facts,
            gaps,
            detail.article_text,
            generation_language,
        )
        if output_language != generation_language:
            headlines = self.llm.translate_list(headlines, output_language)
            straplines = self.llm.translate_list(straplines, output_language)

        headline_rows, strapline_rows = self.repository.replace_publish_options(
            article_id,
            headlines=headlines,
            straplines=straplines,
        )
        return PublishOptions(
            article_id=article_id,
            language=output_language,
            headlines=headline_rows,
            straplines=strapline_rows,
        )
