"""Prompt templates for each editorial pipeline step."""

from __future__ import annotations

FACTS_PROMPT = """\
Extract clean facts from the input.

Rules:
- Use only explicit statements from input.
- Keep each fact short and clear.
- Return 5 to 8 facts maximum.
- Remove duplicates.
- Do not invent facts.

Return strict JSON:
{{"facts":["fact 1","fact 2"]}}

Input:
{text}"""

GAPS_PROMPT = """\
Generate missing-context questions from the input facts.

Rules:
- Questions must point to missing verification context.
- Keep each question practical and specific.
- Return 5 to 8 questions maximum.
- Do not answer the question.
- Remove duplicates.

Return strict JSON:
{{"gaps":["question 1","question 2"]}}

Input:
{facts}"""

ARTICLE_PROMPT = """\
Generate one structured article paragraph.

Rules:
- Use facts as primary truth.
- Mention unresolved gaps as context.
- Keep it concise and readable.
- Keep it to one paragraph (around 80-140 words).
- Do not add unknown claims.

Return strict JSON:
{{"article":"final paragraph text"}}

Facts:
{facts}

Gaps:
{gaps}"""

HEADLINES_PROMPT = """\
Generate headline options for a news analysis.

Rules:
- Return 3 to 5 distinct headlines.
- Keep each headline concise (max 12 words).
- Focus on strongest verified facts.
- Avoid clickbait and avoid questions.
- Do not invent claims.

Return strict JSON:
{{"headlines":["headline 1","headline 2"]}}

Facts:
{facts}

Article:
{article}"""

STRAPLINES_PROMPT = """\
Generate strapline options for a news analysis.

Rules:
- Return 2 to 4 distinct straplines.
- Each strapline should complement a headline (max 14 words).
- Keep tone factual and editorial.
- Do not invent claims.

Return strict JSON:
{{"straplines":["strapline 1","strapline 2"]}}

Facts:
{facts}

Open gaps:
{gaps}

Article:
{article}"""

TRANSLATE_LIST_PROMPT = """\
Translate each line from English into {language}.

Rules:
- Keep exactly the same number of lines and same order.
- Return only plain text with one translated line per output line.
- Do not return JSON.
- Do not add bullets or numbering.

Input lines:
{lines}"""

TRANSLATE_TEXT_PROMPT = """\
Translate the following text from English to {language}.

Rules:
- Preserve all factual details.
- Keep the output as a single paragraph.
- Return only the translated text, no JSON and no explanation.

Text:
{text}"""

_LANGUAGE_CONSTRAINT = (
    "\n\nImportant: Keep the JSON keys and schema exactly as requested "
    "(for example: facts, gaps, article in English). "
    "Only translate the string values into {language}."
)

FACTS_SYSTEM_PROMPT = (
    "You are a strict fact extraction engine. Return only facts explicitly present in the input. "
    "No hallucination. Output language must be {language}."
)
GAPS_SYSTEM_PROMPT = (
    "You identify missing verification context. Return practical unanswered questions only. "
    "Output language must be {language}."
)
ARTICLE_SYSTEM_PROMPT = (
    "You write a concise structured article paragraph using only provided facts. "
    "Keep uncertain points as open context. Output language must be {language}."
)
HEADLINES_SYSTEM_PROMPT = (
    "You generate editorial headlines from verified facts only. Output language must be {language}."
)
STRAPLINES_SYSTEM_PROMPT = (
    "You generate concise editorial straplines from verified facts. "
    "Output language must be {language}."
)
TRANSLATE_LIST_SYSTEM_PROMPT = (
    "You are a precise translator. Preserve factual meaning, tone, and specificity."
)
TRANSLATE_TEXT_SYSTEM_PROMPT = "You are a precise translator for news writing."


def language_constraint(language: str) -> str:
    return _LANGUAGE_CONSTRAINT.format(language=language)


def build_facts_prompt(text: str, language: str) -> str:
    return FACTS_PROMPT.format(text=text) + language_constraint(language)


def build_gaps_prompt(facts_block: str, language: str) -> str:
    """``facts_block`` is the ``- fact`` bullet list; the prompt prefixes it with ``Facts:``."""

    return GAPS_PROMPT.format(facts=f"Facts:\n{facts_block}") + language_constraint(language)


def build_article_prompt(facts_block: str, gaps_block: str, language: str) -> str:
    return ARTICLE_PROMPT.format(facts=facts_block, gaps=gaps_block) + language_constraint(
        language
    )


def build_headlines_prompt(facts_block: str, article: str, language: str) -> str:
    return HEADLINES_PROMPT.format(facts=facts_block, article=article) + language_constraint(
        language
    )


def build_straplines_prompt(facts_block: str, gaps_block: str, article: str, language: str) -> str:
    return STRAPLINES_PROMPT.format(
        facts=facts_block,
        gaps=gaps_block,
        article=article,
    ) + language_constraint(language)


def build_translate_list_prompt(items: list[str], language: str) -> str:
    lines = "\n".join(f"{index}. {item}" for index, item in enumerate(items, start=1))
    return TRANSLATE_LIST_PROMPT.format(language=language, lines=lines)


def build_translate_text_prompt(text: str, language: str) -> str:
    return TRANSLATE_TEXT_PROMPT.format(language=language, text=text)
