"""SQLModel-backed storage facade for analyses and their editorial review."""

from __future__ import annotations

import logging

from sqlalchemy import case, func
from sqlmodel import Session, col, select

from nanoheads.editorial.cleaning import (
    build_analysis_title,
    format_status,
    normalize_analysis_status,
    normalize_limit,
    slugify,
)
from nanoheads.editorial.models import (
    AnalysisDetail,
    AnalysisFact,
    AnalysisGap,
    AnalysisListItem,
    AnalysisStatus,
    Dashboard,
    DashboardSummary,
    FactSource,
    HeadlineOption,
    ModelOption,
    ProviderOption,
    RecordNotFoundError,
    RuntimeLlmSelection,
    SettingsView,
    StraplineOption,
)
from nanoheads.storage.alembic_runner import upgrade_head
from nanoheads.storage.common import build_engine, utc_now
from nanoheads.storage.sqlmodel_models import (
    APP_SETTINGS_ID,
    AiModel,
    AiProvider,
    AppSetting,
    Article,
    Fact,
    Gap,
    Headline,
    Strapline,
    Topic,
)

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
DEFAULT_SELECTED_FORMAT = "timeline"


class EditorialRepository:
    """Facade that persists analyses using SQLModel and Alembic."""

    def __init__(self, database_url: str, *, driver: str = "") -> None:
        self.database_url = database_url
        self.driver = driver
        self.engine = build_engine(database_url, driver=driver)

    def close(self) -> None:
        self.engine.dispose()

    def init_schema(self) -> None:
        upgrade_head(self.database_url, driver=self.driver)

    def save_phase_one(
        self,
        *,
        source_url: str,
        raw_text: str,
        article_text: str,
        category: str,
        facts: list[str],
        gaps: list[str],
    ) -> int:
        """Persist one analysis with its facts and gaps in a single transaction."""

        with Session(self.engine) as session:
            topic_id = None
            if category.strip():
                topic_id = self._get_or_create_topic(session, category)

            now = utc_now()
            article = Article(
                source_url=source_url.strip() or None,
                raw_text=raw_text,
                status=AnalysisStatus.PENDING.value,
                selected_format=DEFAULT_SELECTED_FORMAT,
                article_text=article_text,
                topic_id=topic_id,
                created_at=now,
                updated_at=now,
            )
            session.add(article)
            session.flush()
            article_id = _require_id(article.id)

            for fact in facts:
                clean = fact.strip()
                if clean:
                    session.add(
                        Fact(
                            article_id=article_id,
                            fact_text=clean,
                            is_confirmed=False,
                            is_included=True,
                            source=FactSource.AI.value,
                            created_at=now,
                        ),
                    )
            for gap in gaps:
                clean = gap.strip()
                if clean:
                    session.add(
                        Gap(
                            article_id=article_id,
                            question=clean,
                            is_selected=True,
                            is_resolved=False,
                            created_at=now,
                        ),
                    )
            session.commit()

        logger.info(
            "Saved analysis %d (facts=%d gaps=%d)",
            article_id,
            len(facts),
            len(gaps),
        )
        return article_id

    def get_runtime_llm_selection(self) -> RuntimeLlmSelection | None:
        with Session(self.engine) as session:
            row = session.exec(
                select(AiProvider.provider_key, AiModel.model_key)
                .select_from(AppSetting)
                .join(AiProvider, col(AiProvider.id) == col(AppSetting.provider_id))
                .join(AiModel, col(AiModel.id) == col(AppSetting.model_id))
                .where(AppSetting.id == APP_SETTINGS_ID),
            ).first()
        if row is None:
            return None
        provider_key, model_key = row
        return RuntimeLlmSelection(provider=provider_key, model=model_key)

    def dashboard(self, limit: int = 5) -> Dashboard:
        with Session(self.engine) as session:
            status_expr = func.lower(func.coalesce(Article.status, AnalysisStatus.DRAFT.value))
            total = session.exec(select(func.count()).select_from(Article)).one()
            pending = session.exec(
                select(func.count())
                .select_from(Article)
                .where(status_expr == AnalysisStatus.PENDING.value),
            ).one()
            completed = session.exec(
                select(func.count())
                .select_from(Article)
                .where(status_expr == AnalysisStatus.COMPLETED.value),
            ).one()
            included, total_facts = session.exec(
                select(
                    func.coalesce(func.sum(case((col(Fact.is_included), 1), else_=0)), 0),
                    func.count(),
                ).select_from(Fact),
            ).one()

        included = int(included)
        total_facts = int(total_facts)
        usage_pct = (included * 100) // total_facts if total_facts > 0 else 0
        return Dashboard(
            summary=DashboardSummary(
                total_analyses=int(total),
                pending_review=int(pending),
                saved_articles=int(completed),
                ai_usage_pct=usage_pct,
                ai_usage_text=f"{included} included / {total_facts} total facts",
            ),
            recent_analyses=self.list_analyses(limit),
        )

    def list_analyses(self, limit: int = 100) -> list[AnalysisListItem]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Article, Topic.name)
                .join(Topic, col(Topic.id) == col(Article.topic_id), isouter=True)
                .order_by(col(Article.created_at).desc(), col(Article.id).desc())
                .limit(normalize_limit(limit)),
            ).all()

        return [
            AnalysisListItem(
                id=_require_id(article.id),
                title=build_analysis_title(
                    _require_id(article.id),
                    article.headline_selected or "",
                    article.source_url or "",
                    article.raw_text or "",
                ),
                category=topic_name or UNCATEGORIZED,
                status=format_status(article.status),
                created_at=article.created_at,
            )
            for article, topic_name in rows
        ]

    def get_analysis(self, article_id: int) -> AnalysisDetail:
        with Session(self.engine) as session:
            row = session.exec(
                select(Article, Topic.name)
                .join(Topic, col(Topic.id) == col(Article.topic_id), isouter=True)
                .where(Article.id == article_id),
            ).first()
            if row is None:
                raise RecordNotFoundError(f"analysis {article_id} not found")
            article, topic_name = row

            facts = session.exec(
                select(Fact).where(Fact.article_id == article_id).order_by(col(Fact.id)),
            ).all()
            gaps = session.exec(
                select(Gap).where(Gap.article_id == article_id).order_by(col(Gap.id)),
            ).all()
            headlines = session.exec(
                select(Headline)
                .where(Headline.article_id == article_id)
                .order_by(col(Headline.id)),
            ).all()
            straplines = session.exec(
                select(Strapline)
                .where(Strapline.article_id == article_id)
                .order_by(col(Strapline.id)),
            ).all()

            return AnalysisDetail(
                id=article_id,
                title=build_analysis_title(
                    article_id,
                    article.headline_selected or "",
                    article.source_url or "",
                    article.raw_text or "",
                ),
                category=topic_name or UNCATEGORIZED,
                status=format_status(article.status),
                source_url=article.source_url or "",
                raw_text=article.raw_text or "",
                article_text=article.article_text or "",
                created_at=article.created_at,
                facts=[_fact_view(fact) for fact in facts],
                gaps=[_gap_view(gap) for gap in gaps],
                headlines=[_headline_view(headline) for headline in headlines],
                straplines=[_strapline_view(strapline) for strapline in straplines],
                headline_selected=article.headline_selected or "",
                strapline_selected=article.strapline_selected or "",
                slug=article.slug or "",
                meta_description=article.meta_description or "",
            )

    def add_fact(self, article_id: int, text: str) -> int:
        clean = text.strip()
        if not clean:
            raise ValueError("fact text is required")

        with Session(self.engine) as session:
            self._require_article(session, article_id)
            fact = Fact(
                article_id=article_id,
                fact_text=clean,
                is_confirmed=False,
                is_included=True,
                source=FactSource.MANUAL.value,
            )
            session.add(fact)
            session.commit()
            session.refresh(fact)
            return _require_id(fact.id)

    def update_fact(
        self,
        fact_id: int,
        *,
        text: str | None = None,
        included: bool | None = None,
        confirmed: bool | None = None,
    ) -> None:
        if text is None and included is None and confirmed is None:
            raise ValueError("no fact fields provided")

        with Session(self.engine) as session:
            fact = session.get(Fact, fact_id)
            if fact is None:
                raise RecordNotFoundError(f"fact {fact_id} not found")
            if text is not None:
                clean = text.strip()
                if not clean:
                    raise ValueError("fact text cannot be empty")
                fact.fact_text = clean
            if included is not None:
                fact.is_included = included
            if confirmed is not None:
                fact.is_confirmed = confirmed
            session.add(fact)
            session.commit()

    def delete_fact(self, fact_id: int) -> None:
        with Session(self.engine) as session:
            fact = session.get(Fact, fact_id)
            if fact is None:
                raise RecordNotFoundError(f"fact {fact_id} not found")
            session.delete(fact)
            session.commit()

    def update_gap(
        self,
        gap_id: int,
        *,
        text: str | None = None,
        selected: bool | None = None,
        resolved: bool | None = None,
    ) -> None:
        if text is None and selected is None and resolved is None:
            raise ValueError("no gap fields provided")

        with Session(self.engine) as session:
            gap = session.get(Gap, gap_id)
            if gap is None:
                raise RecordNotFoundError(f"gap {gap_id} not found")
            if text is not None:
                clean = text.strip()
                if not clean:
                    raise ValueError("gap text cannot be empty")
                gap.question = clean
            if selected is not None:
                gap.is_selected = selected
            if resolved is not None:
                gap.is_resolved = resolved
            session.add(gap)
            session.commit()

    def update_analysis(
        self,
        article_id: int,
        *,
        status: str | None = None,
        category: str | None = None,
    ) -> None:
        if status is None and category is None:
            raise ValueError("no analysis fields provided")
        normalized_status = normalize_analysis_status(status) if status is not None else None

        with Session(self.engine) as session:
            article = self._require_article(session, article_id)
            if normalized_status is not None:
                article.status = normalized_status
            if category is not None:
                article.topic_id = self._get_or_create_topic(session, category)
            article.updated_at = utc_now()
            session.add(article)
            session.commit()

    def list_categories(self) -> list[str]:
        with Session(self.engine) as session:
            names = session.exec(select(Topic.name).order_by(col(Topic.name))).all()
        return [name.strip() for name in names if name and name.strip()]

    def get_settings(self) -> SettingsView:
        with Session(self.engine) as session:
            providers = session.exec(select(AiProvider).order_by(col(AiProvider.id))).all()
            models = session.exec(select(AiModel).order_by(col(AiModel.id))).all()
            current = session.get(AppSetting, APP_SETTINGS_ID)

            options: list[ProviderOption] = []
            by_id: dict[int, ProviderOption] = {}
            for provider in providers:
                option = ProviderOption(
                    id=_require_id(provider.id),
                    key=provider.provider_key,
                    name=provider.display_name,
                )
                options.append(option)
                by_id[option.id] = option
            for model in models:
                owner = by_id.get(model.provider_id)
                if owner is not None:
                    owner.models.append(
                        ModelOption(
                            id=_require_id(model.id),
                            key=model.model_key,
                            name=model.display_name,
                            is_default=bool(model.is_default),
                        ),
                    )

            if current is None:
                return SettingsView(provider="", model="", updated_at=None, providers=options)

            provider_row = session.get(AiProvider, current.provider_id)
            model_row = session.get(AiModel, current.model_id)
            return SettingsView(
                provider=provider_row.provider_key if provider_row else "",
                model=model_row.model_key if model_row else "",
                updated_at=current.updated_at,
                providers=options,
            )

    def update_settings(self, provider: str, model: str) -> None:
        clean_provider = provider.strip()
        clean_model = model.strip()
        if not clean_provider or not clean_model:
            raise ValueError("provider and model are required")

        with Session(self.engine) as session:
            match = session.exec(
                select(AiProvider.id, AiModel.id)
                .join(AiModel, col(AiModel.provider_id) == col(AiProvider.id))
                .where(
                    AiProvider.provider_key == clean_provider,
                    AiModel.model_key == clean_model,
                ),
            ).first()
            if match is None:
                raise ValueError("invalid provider/model selection")
            provider_id, model_id = match

            current = session.get(AppSetting, APP_SETTINGS_ID)
            if current is None:
                current = AppSetting(id=APP_SETTINGS_ID, provider_id=provider_id, model_id=model_id)
            else:
                current.provider_id = provider_id
                current.model_id = model_id
            current.updated_at = utc_now()
            session.add(current)
            session.commit()

        logger.info("LLM settings saved: provider=%s model=%s", clean_provider, clean_model)

    def replace_publish_options(
        self,
        article_id: int,
        *,
        headlines: list[str],
        straplines: list[str],
    ) -> tuple[list[HeadlineOption], list[StraplineOption]]:
        """Swap the stored headline/strapline options for a fresh unselected set."""

        with Session(self.engine) as session:
            article = self._require_article(session, article_id)
            for row in session.exec(
                select(Headline).where(Headline.article_id == article_id),
            ).all():
                session.delete(row)
            for row in session.exec(
                select(Strapline).where(Strapline.article_id == article_id),
            ).all():
                session.delete(row)

            headline_rows = [
                Headline(article_id=article_id, headline_text=text, is_selected=False)
                for text in headlines
            ]
            strapline_rows = [
                Strapline(article_id=article_id, strapline_text=text, is_selected=False)
                for text in straplines
            ]
            session.add_all(headline_rows)
            session.add_all(strapline_rows)
            article.headline_selected = None
            article.strapline_selected = None
            article.updated_at = utc_now()
            session.add(article)
            session.commit()

            return (
                [_headline_view(row) for row in headline_rows],
                [_strapline_view(row) for row in strapline_rows],
            )

    def select_headline(self, headline_id: int) -> HeadlineOption:
        with Session(self.engine) as session:
            chosen = session.get(Headline, headline_id)
            if chosen is None:
                raise RecordNotFoundError(f"headline {headline_id} not found")
            for row in session.exec(
                select(Headline).where(Headline.article_id == chosen.article_id),
            ).all():
                row.is_selected = row.id == headline_id
                session.add(row)
            article = self._require_article(session, chosen.article_id)
            article.headline_selected = chosen.headline_text
            article.updated_at = utc_now()
            session.add(article)
            session.commit()
            return _headline_view(chosen)

    def select_strapline(self, strapline_id: int) -> StraplineOption:
        with Session(self.engine) as session:
            chosen = session.get(Strapline, strapline_id)
            if chosen is None:
                raise RecordNotFoundError(f"strapline {strapline_id} not found")
            for row in session.exec(
                select(Strapline).where(Strapline.article_id == chosen.article_id),
            ).all():
                row.is_selected = row.id == strapline_id
                session.add(row)
            article = self._require_article(session, chosen.article_id)
            article.strapline_selected = chosen.strapline_text
            article.updated_at = utc_now()
            session.add(article)
            session.commit()
            return _strapline_view(chosen)

    def update_publish_metadata(
        self,
        article_id: int,
        *,
        slug: str | None = None,
        meta_description: str | None = None,
    ) -> tuple[str, str]:
        """Store slug and meta description; a blank slug is derived from the headline."""

        with Session(self.engine) as session:
            article = self._require_article(session, article_id)
            if slug and slug.strip():
                clean_slug = slugify(slug)
                if not clean_slug:
                    raise ValueError("slug has no ASCII letters or digits")
            elif article.headline_selected:
                clean_slug = slugify(article.headline_selected)
                if not clean_slug:
                    raise ValueError("selected headline has no ASCII characters; pass --slug")
            else:
                raise ValueError("slug is required when no headline is selected")
            article.slug = clean_slug
            if meta_description is not None:
                article.meta_description = meta_description.strip() or None
            article.updated_at = utc_now()
            session.add(article)
            session.commit()
            return clean_slug, article.meta_description or ""

    def _require_article(self, session: Session, article_id: int) -> Article:
        article = session.get(Article, article_id)
        if article is None:
            raise RecordNotFoundError(f"analysis {article_id} not found")
        return article

    def _get_or_create_topic(self, session: Session, category: str) -> int:
        clean = category.strip()
        if not clean:
            raise ValueError("category cannot be empty")

        topic_id = session.exec(
            select(Topic.id).where(func.lower(Topic.name) == func.lower(clean)),
        ).first()
        if topic_id is not None:
            return topic_id

        topic = Topic(name=clean, created_at=utc_now())
        session.add(topic)
        session.flush()
        return _require_id(topic.id)


def _require_id(value: int | None) -> int:
    if value is None:
        raise RuntimeError("Row has no primary key after flush.")
    return value


def _fact_view(row: Fact) -> AnalysisFact:
    return AnalysisFact(
        id=_require_id(row.id),
        text=row.fact_text,
        included=bool(row.is_included),
        confirmed=bool(row.is_confirmed),
        source=row.source or "",
    )


def _gap_view(row: Gap) -> AnalysisGap:
    return AnalysisGap(
        id=_require_id(row.id),
        text=row.question,
        selected=bool(row.is_selected),
        resolved=bool(row.is_resolved),
    )


def _headline_view(row: Headline) -> HeadlineOption:
    return HeadlineOption(id=_require_id(row.id), text=row.headline_text, selected=row.is_selected)


def _strapline_view(row: Strapline) -> StraplineOption:
    return StraplineOption(
        id=_require_id(row.id),
        text=row.strapline_text,
        selected=row.is_selected,
    )
