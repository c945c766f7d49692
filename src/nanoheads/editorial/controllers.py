"""Controllers for editorial CLI commands."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from nanoheads.config import Settings, resolve_provider_settings
from nanoheads.editorial.models import AnalysisDetail, PhaseOneInput
from nanoheads.editorial.pipeline import PhaseOnePipeline
from nanoheads.editorial.repository import EditorialRepository
from nanoheads.llm.client import ChatCompletionClient
from nanoheads.llm.service import EditorialLlmService


@dataclass(slots=True)
class DatabaseCommand:
    """CLI inputs shared by commands that only need the store."""

    database_url: str | None


@dataclass(slots=True)
class AnalyseCommand:
    """CLI inputs for the analyse command."""

    database_url: str | None
    text: str
    url: str
    language: str
    category: str
    as_json: bool


@dataclass(slots=True)
class ListAnalysesCommand:
    database_url: str | None
    limit: int


@dataclass(slots=True)
class ShowAnalysisCommand:
    database_url: str | None
    article_id: int
    as_json: bool


@dataclass(slots=True)
class UpdateAnalysisCommand:
    database_url: str | None
    article_id: int
    status: str | None
    category: str | None


@dataclass(slots=True)
class PublishOptionsCommand:
    """CLI inputs for headline/strapline generation."""

    database_url: str | None
    article_id: int
    language: str | None
    as_json: bool


@dataclass(slots=True)
class SelectOptionCommand:
    database_url: str | None
    option_id: int


@dataclass(slots=True)
class PublishMetadataCommand:
    database_url: str | None
    article_id: int
    slug: str | None
    meta_description: str | None


@dataclass(slots=True)
class AddFactCommand:
    database_url: str | None
    article_id: int
    text: str


@dataclass(slots=True)
class UpdateFactCommand:
    database_url: str | None
    fact_id: int
    text: str | None
    included: bool | None
    confirmed: bool | None


@dataclass(slots=True)
class DeleteFactCommand:
    database_url: str | None
    fact_id: int


@dataclass(slots=True)
class UpdateGapCommand:
    database_url: str | None
    gap_id: int
    text: str | None
    selected: bool | None
    resolved: bool | None


@dataclass(slots=True)
class DashboardCommand:
    database_url: str | None
    limit: int
    as_json: bool


@dataclass(slots=True)
class UpdateSettingsCommand:
    database_url: str | None
    provider: str
    model: str


class EditorialCliController:
    """Coordinates editorial command execution.

    ``llm_transport`` and ``url_transport`` replace the network for the LLM
    endpoint and for source-URL fetches.
    """

    def __init__(
        self,
        *,
        llm_transport: httpx.BaseTransport | None = None,
        url_transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._llm_transport = llm_transport
        self._url_transport = url_transport

    def upgrade_db(self, command: DatabaseCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings):
            pass
        return [f"Database schema is up to date: {settings.database.url}"]

    def analyse(self, command: AnalyseCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository, self._pipeline(settings, repository) as pipeline:
            result = pipeline.run_phase_one(
                PhaseOneInput(
                    text=command.text,
                    url=command.url,
                    language=command.language,
                    category=command.category,
                ),
            )

        if command.as_json:
            return [_to_json(result.to_dict())]

        lines = [
            f"Analysis saved: id={result.article_id} language={result.language} "
            f"facts={len(result.facts)} gaps={len(result.gaps)}",
            "Facts:",
        ]
        lines.extend(f"  - {fact}" for fact in result.facts)
        lines.append("Gaps:")
        lines.extend(f"  - {gap}" for gap in result.gaps)
        lines.extend(["Article:", f"  {result.article}"])
        return lines

    def list_analyses(self, command: ListAnalysesCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            items = repository.list_analyses(command.limit)

        if not items:
            return ["No analyses found."]
        return [
            f"{item.id} [{item.status}] {item.category} | {item.title} "
            f"created_at={item.created_at.isoformat()}"
            for item in items
        ]

    def show_analysis(self, command: ShowAnalysisCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            detail = repository.get_analysis(command.article_id)

        if command.as_json:
            return [_to_json(detail.to_dict())]
        return _detail_lines(detail)

    def update_analysis(self, command: UpdateAnalysisCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            repository.update_analysis(
                command.article_id,
                status=command.status,
                category=command.category,
            )
        return [f"Analysis {command.article_id} updated."]

    def publish_options(self, command: PublishOptionsCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository, self._pipeline(settings, repository) as pipeline:
            options = pipeline.generate_publish_options(command.article_id, command.language)

        if command.as_json:
            return [_to_json(options.to_dict())]

        lines = [f"Publish options for analysis {options.article_id} ({options.language}):"]
        lines.append("Headlines:")
        lines.extend(f"  {headline.id}: {headline.text}" for headline in options.headlines)
        lines.append("Straplines:")
        lines.extend(f"  {strapline.id}: {strapline.text}" for strapline in options.straplines)
        return lines

    def select_headline(self, command: SelectOptionCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            option = repository.select_headline(command.option_id)
        return [f"Headline {option.id} selected: {option.text}"]

    def select_strapline(self, command: SelectOptionCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            option = repository.select_strapline(command.option_id)
        return [f"Strapline {option.id} selected: {option.text}"]

    def publish_metadata(self, command: PublishMetadataCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            slug, meta_description = repository.update_publish_metadata(
                command.article_id,
                slug=command.slug,
                meta_description=command.meta_description,
            )
        return [
            f"Analysis {command.article_id} publish metadata saved: slug={slug}",
            f"Meta description: {meta_description or '-'}",
        ]

    def add_fact(self, command: AddFactCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            fact_id = repository.add_fact(command.article_id, command.text)
        return [f"Fact {fact_id} added to analysis {command.article_id}."]

    def update_fact(self, command: UpdateFactCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            repository.update_fact(
                command.fact_id,
                text=command.text,
                included=command.included,
                confirmed=command.confirmed,
            )
        return [f"Fact {command.fact_id} updated."]

    def delete_fact(self, command: DeleteFactCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            repository.delete_fact(command.fact_id)
        return [f"Fact {command.fact_id} deleted."]

    def update_gap(self, command: UpdateGapCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            repository.update_gap(
                command.gap_id,
                text=command.text,
                selected=command.selected,
                resolved=command.resolved,
            )
        return [f"Gap {command.gap_id} updated."]

    def categories(self, command: DatabaseCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            names = repository.list_categories()
        return names or ["No categories found."]

    def dashboard(self, command: DashboardCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            dashboard = repository.dashboard(command.limit)

        if command.as_json:
            return [_to_json(dashboard.to_dict())]

        summary = dashboard.summary
        lines = [
            f"Total analyses: {summary.total_analyses}",
            f"Pending review: {summary.pending_review}",
            f"Saved articles: {summary.saved_articles}",
            f"AI usage: {summary.ai_usage_pct}% ({summary.ai_usage_text})",
        ]
        if dashboard.recent_analyses:
            lines.append("Recent analyses:")
            lines.extend(
                f"  {item.id} [{item.status}] {item.category} | {item.title}"
                for item in dashboard.recent_analyses
            )
        return lines

    def show_settings(self, command: DatabaseCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            view = repository.get_settings()

        if view.provider:
            updated_at = view.updated_at.isoformat() if view.updated_at else "-"
            lines = [f"Current: provider={view.provider} model={view.model} updated_at={updated_at}"]
        else:
            lines = [
                "Current: environment defaults "
                f"(provider={settings.llm.provider} model={settings.llm.model})",
            ]
        lines.append("Available:")
        for provider in view.providers:
            lines.append(f"  {provider.key} ({provider.name})")
            lines.extend(
                f"    - {model.key}{' [default]' if model.is_default else ''} ({model.name})"
                for model in provider.models
            )
        return lines

    def update_settings(self, command: UpdateSettingsCommand) -> list[str]:
        settings = Settings.from_env(database_url=command.database_url)
        with _repository(settings) as repository:
            repository.update_settings(command.provider, command.model)
        return [f"Settings saved: provider={command.provider.strip()} model={command.model.strip()}"]

    @contextmanager
    def _pipeline(
        self,
        settings: Settings,
        repository: EditorialRepository,
    ) -> Iterator[PhaseOnePipeline]:
        selection = repository.get_runtime_llm_selection()
        if selection is not None:
            settings.llm = resolve_provider_settings(
                selection.provider,
                selection.model,
                settings.llm,
            )
        settings.validate_for_llm()

        with ChatCompletionClient(settings.llm, transport=self._llm_transport) as client:
            yield PhaseOnePipeline(
                repository=repository,
                llm=EditorialLlmService(client),
                analysis_settings=settings.analysis,
                url_transport=self._url_transport,
            )


@contextmanager
def _repository(settings: Settings) -> Iterator[EditorialRepository]:
    repository = EditorialRepository(settings.database.url, driver=settings.database.driver)
    try:
        repository.init_schema()
        yield repository
    finally:
        repository.close()


def _detail_lines(detail: AnalysisDetail) -> list[str]:
    lines = [
        f"Analysis {detail.id}: {detail.title}",
        f"Category: {detail.category}  Status: {detail.status}  "
        f"Created: {detail.created_at.isoformat()}",
    ]
    if detail.source_url:
        lines.append(f"Source: {detail.source_url}")
    lines.append("Facts:")
    for fact in detail.facts:
        flags = f"{'included' if fact.included else 'excluded'}, " + (
            "confirmed" if fact.confirmed else "unconfirmed"
        )
        lines.append(f"  {fact.id}: {fact.text} ({flags}, source={fact.source})")
    lines.append("Gaps:")
    for gap in detail.gaps:
        flags = f"{'selected' if gap.selected else 'skipped'}, " + (
            "resolved" if gap.resolved else "open"
        )
        lines.append(f"  {gap.id}: {gap.text} ({flags})")
    lines.extend(["Article:", f"  {detail.article_text or '-'}"])
    if detail.headlines:
        lines.append("Headlines:")
        lines.extend(
            f"  {option.id}: {option.text}{' *' if option.selected else ''}"
            for option in detail.headlines
        )
    if detail.straplines:
        lines.append("Straplines:")
        lines.extend(
            f"  {option.id}: {option.text}{' *' if option.selected else ''}"
            for option in detail.straplines
        )
    if detail.slug or detail.meta_description:
        lines.append(f"Slug: {detail.slug or '-'}")
        lines.append(f"Meta description: {detail.meta_description or '-'}")
    return lines


def _to_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, default=str)
