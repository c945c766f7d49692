"""Editorial LLM steps: facts, gaps, article, publish options, translation."""

from __future__ import annotations

import logging

from nanoheads.llm import prompts
from nanoheads.llm.client import ApiRequestError, ChatCompletionClient, LlmOutputError
from nanoheads.llm.degradation import MAX_SHRINK_ATTEMPTS, decide_input_shrink
from nanoheads.llm.failure_classifier import (
    classify_api_failure,
    should_retry_without_json_mode,
)
from nanoheads.llm.models import ChatCompletionRequest
from nanoheads.llm.normalize import (
    normalize_json_content,
    parse_first_string_array_field,
    parse_first_string_field,
    parse_line_list,
    strip_code_fence,
)
from nanoheads.llm.postprocess import (
    bullet_block,
    dedupe_and_trim,
    limit_list_items,
    truncate_for_prompt,
)

logger = logging.getLogger(__name__)

ENGLISH = "English"
ARTICLE_PROMPT_CHARS = 900
MAX_HEADLINES = 5
MAX_STRAPLINES = 4


class EditorialLlmService:
    """Prompt pipeline steps on top of a chat-completion client."""

    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    @property
    def client(self) -> ChatCompletionClient:
        return self._client

    def call_json_completion(
        self,
        *,
        step: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Run a completion that must produce JSON; returns the normalized JSON text."""

        use_json_mode = self._client.uses_json_mode()
        request = ChatCompletionRequest(
            step=step,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=use_json_mode,
        )
        try:
            content = self._client.complete(request)
        except ApiRequestError as error:
            if not (use_json_mode and should_retry_without_json_mode(error.message)):
                raise
            logger.warning("[llm][%s] retrying without response_format json_object", step)
            request.json_mode = False
            content = self._client.complete(request)

        clean_json = normalize_json_content(content)
        if clean_json is None:
            logger.warning(
                "[llm][%s] response was not valid JSON, retrying once without json_object mode",
                step,
            )
            request.json_mode = False
            content = self._client.complete(request)
            clean_json = normalize_json_content(content)
        if clean_json is None:
            raise LlmOutputError("model did not return valid json")
        return clean_json

    def extract_facts(self, text: str, language: str) -> list[str]:
        """Extract literal facts, shrinking the input while the provider says it is too large."""

        clean = text.strip()
        if not clean:
            raise ValueError("input text is empty")
        self._client.ensure_configured()

        system_prompt = prompts.FACTS_SYSTEM_PROMPT.format(language=language)
        current_input = clean
        attempt = 1
        while True:
            try:
                raw_json = self.call_json_completion(
                    step="extract-facts",
                    system_prompt=system_prompt,
                    user_prompt=prompts.build_facts_prompt(current_input, language),
                    temperature=0.1,
                    max_tokens=700,
                )
            except ApiRequestError as error:
                failure = classify_api_failure(error.message)
                decision = decide_input_shrink(
                    failure_class=failure.failure_class,
                    current_input=current_input,
                    attempt=attempt,
                    max_attempts=MAX_SHRINK_ATTEMPTS,
                )
                if not decision.should_retry:
                    raise
                logger.warning(
                    "[llm][extract-facts] request too large, retrying with shorter input "
                    "(attempt=%d chars_before=%d chars_after=%d)",
                    attempt,
                    len(current_input),
                    len(decision.next_input),
                )
                current_input = decision.next_input
                attempt += 1
                continue

            facts = dedupe_and_trim(parse_first_string_array_field(raw_json, "facts"))
            if not facts:
                raise LlmOutputError("model returned empty facts")
            return facts

    def generate_gap_questions(self, facts: list[str], language: str) -> list[str]:
        self._client.ensure_configured()
        facts_block = bullet_block(facts)
        if not facts_block:
            raise ValueError("facts are required to generate gaps")

        raw_json = self.call_json_completion(
            step="generate-gaps",
            system_prompt=prompts.GAPS_SYSTEM_PROMPT.format(language=language),
            user_prompt=prompts.build_gaps_prompt(facts_block, language),
            temperature=0.2,
            max_tokens=700,
        )
        gaps = dedupe_and_trim(parse_first_string_array_field(raw_json, "gaps"))
        if not gaps:
            raise LlmOutputError("model returned empty gaps")
        return gaps

    def generate_structured_article(
        self,
        facts: list[str],
        gaps: list[str],
        language: str,
    ) -> str:
        self._client.ensure_configured()
        facts_block = bullet_block(facts)
        if not facts_block:
            raise ValueError("facts are required to generate article")

        raw_json = self.call_json_completion(
            step="generate-article",
            system_prompt=prompts.ARTICLE_SYSTEM_PROMPT.format(language=language),
            user_prompt=prompts.build_article_prompt(facts_block, bullet_block(gaps), language),
            temperature=0.3,
            max_tokens=1200,
        )
        article = parse_first_string_field(raw_json, "article")
        if not article:
            raise LlmOutputError("model returned empty article")
        return article

    def generate_headline_options(
        self,
        facts: list[str],
        article: str,
        language: str,
    ) -> list[str]:
        self._client.ensure_configured()
        facts_block = bullet_block(facts)
        if not facts_block:
            raise ValueError("facts are required to generate headlines")

        raw_json = self.call_json_completion(
            step="generate-headlines",
            system_prompt=prompts.HEADLINES_SYSTEM_PROMPT.format(language=language),
            user_prompt=prompts.build_headlines_prompt(
                facts_block,
                truncate_for_prompt(article, ARTICLE_PROMPT_CHARS),
                language,
            ),
            temperature=0.35,
            max_tokens=700,
        )
        headlines = dedupe_and_trim(parse_first_string_array_field(raw_json, "headlines"))
        if not headlines:
            raise LlmOutputError("model returned empty headlines")
        return limit_list_items(headlines, MAX_HEADLINES)

    def generate_strapline_options(
        self,
        facts: list[str],
        gaps: list[str],
        article: str,
        language: str,
    ) -> list[str]:
        self._client.ensure_configured()
        facts_block = bullet_block(facts)
        if not facts_block:
            raise ValueError("facts are required to generate straplines")

        raw_json = self.call_json_completion(
            step="generate-straplines",
            system_prompt=prompts.STRAPLINES_SYSTEM_PROMPT.format(language=language),
            user_prompt=prompts.build_straplines_prompt(
                facts_block,
                bullet_block(gaps, empty="- None"),
                truncate_for_prompt(article, ARTICLE_PROMPT_CHARS),
                language,
            ),
            temperature=0.35,
            max_tokens=700,
        )
        straplines = dedupe_and_trim(parse_first_string_array_field(raw_json, "straplines"))
        if not straplines:
            raise LlmOutputError("model returned empty straplines")
        return limit_list_items(straplines, MAX_STRAPLINES)

    def translate_list(self, items: list[str], language: str) -> list[str]:
        """Translate English lines in one request; fall back per item on a count mismatch."""

        self._client.ensure_configured()
        clean_language = language.strip()
        if clean_language.lower() == ENGLISH.lower() or not items:
            return dedupe_and_trim(items)

        lines = [item.strip() for item in items if item.strip()]
        if not lines:
            raise ValueError("no items to translate")

        content = self._client.complete(
            ChatCompletionRequest(
                step="translate-list",
                system_prompt=prompts.TRANSLATE_LIST_SYSTEM_PROMPT,
                user_prompt=prompts.build_translate_list_prompt(lines, clean_language),
                temperature=0.1,
                max_tokens=1400,
                json_mode=False,
            ),
        )
        translated = parse_line_list(content)
        if not translated:
            raise LlmOutputError("translation returned empty list")
        if len(translated) != len(lines):
            logger.warning(
                "[llm][translate-list] expected %d lines, got %d; translating item by item",
                len(lines),
                len(translated),
            )
            translated = [self.translate_text(line, clean_language) for line in lines]
        return translated

    def translate_text(self, text: str, language: str) -> str:
        self._client.ensure_configured()
        clean_text = text.strip()
        clean_language = language.strip()
        if not clean_text:
            raise ValueError("text is empty")
        if clean_language.lower() == ENGLISH.lower():
            return clean_text

        content = self._client.complete(
            ChatCompletionRequest(
                step="translate-article",
                system_prompt=prompts.TRANSLATE_TEXT_SYSTEM_PROMPT,
                user_prompt=prompts.build_translate_text_prompt(clean_text, clean_language),
                temperature=0.1,
                max_tokens=1200,
                json_mode=False,
            ),
        )
        translated = strip_code_fence(content)
        if not translated:
            raise LlmOutputError("translation returned empty text")
        return translated

