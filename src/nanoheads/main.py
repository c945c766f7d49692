"""CLI entrypoint for nanoheads."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import httpx
import rich_click as click

from nanoheads import __version__
from nanoheads.editorial.controllers import (
    AddFactCommand,
    AnalyseCommand,
    DashboardCommand,
    DatabaseCommand,
    DeleteFactCommand,
    EditorialCliController,
    ListAnalysesCommand,
    PublishMetadataCommand,
    PublishOptionsCommand,
    SelectOptionCommand,
    ShowAnalysisCommand,
    UpdateAnalysisCommand,
    UpdateFactCommand,
    UpdateGapCommand,
    UpdateSettingsCommand,
)
from nanoheads.llm.client import ApiRequestError, LlmConfigurationError, LlmOutputError

click.rich_click.USE_MARKDOWN = True
EDITORIAL_CONTROLLER = EditorialCliController()

database_url_option = click.option(
    "--database-url",
    default=None,
    help="SQLAlchemy database URL. Defaults to NANOHEADS_DATABASE_URL / DATABASE_URL.",
)


@click.group()
@click.version_option(version=__version__, prog_name="nanoheads")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Root logger level. DEBUG also prints prompt and response previews.",
)
def nanoheads(log_level: str) -> None:
    """Editorial fact/gap/article pipeline CLI."""

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@nanoheads.group()
def db() -> None:
    """Database commands."""


@db.command("upgrade")
@database_url_option
def db_upgrade(database_url: str | None) -> None:
    """Apply Alembic migrations up to head."""

    with _domain_errors():
        _emit_lines(EDITORIAL_CONTROLLER.upgrade_db(DatabaseCommand(database_url=database_url)))


@nanoheads.command("analyse")
@database_url_option
@click.option("--text", default="", help="Source article text. Wins over --url.")
@click.option(
    "--text-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read source article text from a file.",
)
@click.option("--url", default="", help="Source article URL (http/https).")
@click.option(
    "--language",
    default="",
    help="Output language: `te`/`telugu` or `en`/`english`. Detected from the text when omitted.",
)
@click.option("--category", default="", help="Category (topic) name; created when missing.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def analyse(  # noqa: PLR0913
    database_url: str | None,
    text: str,
    text_file: Path | None,
    url: str,
    language: str,
    category: str,
    as_json: bool,
) -> None:
    """Extract facts and gaps, draft the article, and save the analysis."""

    if text_file is not None and not text.strip():
        text = text_file.read_text(encoding="utf-8")
    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.analyse(
                AnalyseCommand(
                    database_url=database_url,
                    text=text,
                    url=url,
                    language=language,
                    category=category,
                    as_json=as_json,
                ),
            ),
        )


@nanoheads.group()
def analyses() -> None:
    """Saved analysis commands."""


@analyses.command("list")
@database_url_option
@click.option(
    "--limit",
    type=int,
    default=100,
    show_default=True,
    help="Max analyses (<=0 means 10, capped at 200).",
)
def analyses_list(database_url: str | None, limit: int) -> None:
    """List saved analyses, newest first."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.list_analyses(
                ListAnalysesCommand(database_url=database_url, limit=limit),
            ),
        )


@analyses.command("show")
@database_url_option
@click.argument("article_id", type=int)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the detail as JSON.")
def analyses_show(database_url: str | None, article_id: int, as_json: bool) -> None:
    """Show one analysis with facts, gaps, and publish options."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.show_analysis(
                ShowAnalysisCommand(
                    database_url=database_url,
                    article_id=article_id,
                    as_json=as_json,
                ),
            ),
        )


@analyses.command("update")
@database_url_option
@click.argument("article_id", type=int)
@click.option(
    "--status",
    type=click.Choice(["draft", "pending", "completed"], case_sensitive=False),
    default=None,
    help="New review status.",
)
@click.option("--category", default=None, help="New category name.")
def analyses_update(
    database_url: str | None,
    article_id: int,
    status: str | None,
    category: str | None,
) -> None:
    """Update analysis status and/or category."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.update_analysis(
                UpdateAnalysisCommand(
                    database_url=database_url,
                    article_id=article_id,
                    status=status,
                    category=category,
                ),
            ),
        )


@analyses.command("publish-options")
@database_url_option
@click.argument("article_id", type=int)
@click.option("--language", default=None, help="Output language; detected when omitted.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print options as JSON.")
def analyses_publish_options(
    database_url: str | None,
    article_id: int,
    language: str | None,
    as_json: bool,
) -> None:
    """Generate headline and strapline options from the reviewed facts."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.publish_options(
                PublishOptionsCommand(
                    database_url=database_url,
                    article_id=article_id,
                    language=language,
                    as_json=as_json,
                ),
            ),
        )


@analyses.command("select-headline")
@database_url_option
@click.argument("headline_id", type=int)
def analyses_select_headline(database_url: str | None, headline_id: int) -> None:
    """Mark one headline option as the selected headline."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.select_headline(
                SelectOptionCommand(database_url=database_url, option_id=headline_id),
            ),
        )


@analyses.command("select-strapline")
@database_url_option
@click.argument("strapline_id", type=int)
def analyses_select_strapline(database_url: str | None, strapline_id: int) -> None:
    """Mark one strapline option as the selected strapline."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.select_strapline(
                SelectOptionCommand(database_url=database_url, option_id=strapline_id),
            ),
        )


@analyses.command("publish-meta")
@database_url_option
@click.argument("article_id", type=int)
@click.option("--slug", default=None, help="URL slug; derived from the selected headline if omitted.")
@click.option("--meta-description", default=None, help="SEO meta description.")
def analyses_publish_meta(
    database_url: str | None,
    article_id: int,
    slug: str | None,
    meta_description: str | None,
) -> None:
    """Save slug and meta description."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.publish_metadata(
                PublishMetadataCommand(
                    database_url=database_url,
                    article_id=article_id,
                    slug=slug,
                    meta_description=meta_description,
                ),
            ),
        )


@nanoheads.group()
def facts() -> None:
    """Fact review commands."""


@facts.command("add")
@database_url_option
@click.argument("article_id", type=int)
@click.argument("text")
def facts_add(database_url: str | None, article_id: int, text: str) -> None:
    """Add a manual fact to an analysis."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.add_fact(
                AddFactCommand(database_url=database_url, article_id=article_id, text=text),
            ),
        )


@facts.command("update")
@database_url_option
@click.argument("fact_id", type=int)
@click.option("--text", default=None, help="New fact text.")
@click.option("--included/--excluded", default=None, help="Include the fact in the article.")
@click.option("--confirmed/--unconfirmed", default=None, help="Mark the fact as verified.")
def facts_update(
    database_url: str | None,
    fact_id: int,
    text: str | None,
    included: bool | None,
    confirmed: bool | None,
) -> None:
    """Edit fact text and review flags."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.update_fact(
                UpdateFactCommand(
                    database_url=database_url,
                    fact_id=fact_id,
                    text=text,
                    included=included,
                    confirmed=confirmed,
                ),
            ),
        )


@facts.command("delete")
@database_url_option
@click.argument("fact_id", type=int)
def facts_delete(database_url: str | None, fact_id: int) -> None:
    """Delete a fact."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.delete_fact(
                DeleteFactCommand(database_url=database_url, fact_id=fact_id),
            ),
        )


@nanoheads.group()
def gaps() -> None:
    """Gap review commands."""


@gaps.command("update")
@database_url_option
@click.argument("gap_id", type=int)
@click.option("--text", default=None, help="New question text.")
@click.option("--selected/--skipped", default=None, help="Keep the gap as open context.")
@click.option("--resolved/--open", default=None, help="Mark the question as answered.")
def gaps_update(
    database_url: str | None,
    gap_id: int,
    text: str | None,
    selected: bool | None,
    resolved: bool | None,
) -> None:
    """Edit gap text and review flags."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.update_gap(
                UpdateGapCommand(
                    database_url=database_url,
                    gap_id=gap_id,
                    text=text,
                    selected=selected,
                    resolved=resolved,
                ),
            ),
        )


@nanoheads.command("categories")
@database_url_option
def categories(database_url: str | None) -> None:
    """List known categories."""

    with _domain_errors():
        _emit_lines(EDITORIAL_CONTROLLER.categories(DatabaseCommand(database_url=database_url)))


@nanoheads.command("dashboard")
@database_url_option
@click.option("--limit", type=int, default=5, show_default=True, help="Recent analyses to show.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the dashboard as JSON.")
def dashboard(database_url: str | None, limit: int, as_json: bool) -> None:
    """Show review counts and AI fact usage."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.dashboard(
                DashboardCommand(database_url=database_url, limit=limit, as_json=as_json),
            ),
        )


@nanoheads.group()
def settings() -> None:
    """LLM provider settings."""


@settings.command("show")
@database_url_option
def settings_show(database_url: str | None) -> None:
    """Show the persisted provider/model and the available catalog."""

    with _domain_errors():
        _emit_lines(EDITORIAL_CONTROLLER.show_settings(DatabaseCommand(database_url=database_url)))


@settings.command("set")
@database_url_option
@click.argument("provider")
@click.argument("model")
def settings_set(database_url: str | None, provider: str, model: str) -> None:
    """Persist the provider/model used by later analyses."""

    with _domain_errors():
        _emit_lines(
            EDITORIAL_CONTROLLER.update_settings(
                UpdateSettingsCommand(database_url=database_url, provider=provider, model=model),
            ),
        )


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except (ValueError, LookupError) as error:
        raise click.ClickException(str(error)) from error
    except (ApiRequestError, LlmOutputError, LlmConfigurationError) as error:
        raise click.ClickException(str(error)) from error
    except httpx.HTTPError as error:
        raise click.ClickException(f"LLM request failed: {error}") from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    nanoheads()
