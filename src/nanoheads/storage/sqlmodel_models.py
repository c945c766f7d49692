"""SQLModel ORM tables for the editorial store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Text, UniqueConstraint, false, func, true
from sqlmodel import Field, SQLModel

from nanoheads.storage.common import utc_now

APP_SETTINGS_ID = 1


def _created_at_column() -> Column:
    return Column(DateTime(timezone=True), nullable=False, server_default=func.now())


def _article_fk() -> Column:
    return Column(
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class Topic(SQLModel, table=True):
    __tablename__ = "topics"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=_created_at_column())


class Article(SQLModel, table=True):
    __tablename__ = "articles"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    source_url: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    raw_text: str = Field(default="", sa_column=Column(Text, nullable=False))
    status: str = Field(default="draft", sa_column_kwargs={"server_default": "draft"}, index=True)
    selected_format: str | None = None
    article_text: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    headline_selected: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    strapline_selected: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    slug: str | None = None
    meta_description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    topic_id: int | None = Field(
        default=None,
        sa_column=Column(ForeignKey("topics.id", ondelete="SET NULL"), nullable=True, index=True),
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=_created_at_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_created_at_column())


class Fact(SQLModel, table=True):
    __tablename__ = "facts"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    article_id: int = Field(sa_column=_article_fk())
    fact_text: str = Field(sa_column=Column(Text, nullable=False))
    is_confirmed: bool = Field(default=False, sa_column_kwargs={"server_default": false()})
    is_included: bool = Field(default=True, sa_column_kwargs={"server_default": true()})
    source: str = Field(default="ai", sa_column_kwargs={"server_default": "ai"})
    created_at: datetime = Field(default_factory=utc_now, sa_column=_created_at_column())


class Gap(SQLModel, table=True):
    __tablename__ = "gaps"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    article_id: int = Field(sa_column=_article_fk())
    question: str = Field(sa_column=Column(Text, nullable=False))
    is_selected: bool = Field(default=True, sa_column_kwargs={"server_default": true()})
    is_resolved: bool = Field(default=False, sa_column_kwargs={"server_default": false()})
    created_at: datetime = Field(default_factory=utc_now, sa_column=_created_at_column())


class Headline(SQLModel, table=True):
    __tablename__ = "headlines"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    article_id: int = Field(sa_column=_article_fk())
    headline_text: str = Field(sa_column=Column(Text, nullable=False))
    is_selected: bool = Field(default=False, sa_column_kwargs={"server_default": false()})


class Strapline(SQLModel, table=True):
    __tablename__ = "straplines"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    article_id: int = Field(sa_column=_article_fk())
    strapline_text: str = Field(sa_column=Column(Text, nullable=False))
    is_selected: bool = Field(default=False, sa_column_kwargs={"server_default": false()})


class AiProvider(SQLModel, table=True):
    __tablename__ = "ai_providers"  # type: ignore[bad-override]

    id: int | None = Field(default=None, primary_key=True)
    provider_key: str = Field(unique=True)
    display_name: str


class AiModel(SQLModel, table=True):
    __tablename__ = "ai_models"  # type: ignore[bad-override]
    __table_args__ = (
        UniqueConstraint("provider_id", "model_key", name="uq_ai_models_provider_model"),
    )

    id: int | None = Field(default=None, primary_key=True)
    provider_id: int = Field(
        sa_column=Column(
            ForeignKey("ai_providers.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    model_key: str
    display_name: str
    is_default: bool = Field(default=False, sa_column_kwargs={"server_default": false()})


class AppSetting(SQLModel, table=True):
    __tablename__ = "app_settings"  # type: ignore[bad-override]

    id: int = Field(default=APP_SETTINGS_ID, primary_key=True)
    provider_id: int = Field(foreign_key="ai_providers.id")
    model_id: int = Field(foreign_key="ai_models.id")
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_created_at_column())
