"""Initial editorial schema with the AI provider catalog."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "topics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("raw_text", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("selected_format", sa.String(length=64), nullable=True),
        sa.Column("article_text", sa.Text(), nullable=True),
        sa.Column("headline_selected", sa.Text(), nullable=True),
        sa.Column("strapline_selected", sa.Text(), nullable=True),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("meta_description", sa.Text(), nullable=True),
        sa.Column("topic_id", sa.Integer(), nullable=True),
        _created_at(),
        _created_at("updated_at"),
        sa.ForeignKeyConstraint(["topic_id"], ["topics.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_articles_status", "articles", ["status"], unique=False)
    op.create_index("ix_articles_topic_id", "articles", ["topic_id"], unique=False)
    op.create_index("ix_articles_created_at", "articles", ["created_at"], unique=False)

    op.create_table(
        "facts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("fact_text", sa.Text(), nullable=False),
        sa.Column("is_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_included", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("source", sa.String(length=32), nullable=False, server_default="ai"),
        _created_at(),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_facts_article_id", "facts", ["article_id"], unique=False)

    op.create_table(
        "gaps",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("is_selected", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_gaps_article_id", "gaps", ["article_id"], unique=False)

    op.create_table(
        "headlines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("headline_text", sa.Text(), nullable=False),
        sa.Column("is_selected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_headlines_article_id", "headlines", ["article_id"], unique=False)

    op.create_table(
        "straplines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("strapline_text", sa.Text(), nullable=False),
        sa.Column("is_selected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_straplines_article_id", "straplines", ["article_id"], unique=False)

    providers = op.create_table(
        "ai_providers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_key", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_key"),
    )

    models = op.create_table(
        "ai_models",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("model_key", sa.String(length=128), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["provider_id"], ["ai_providers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", "model_key", name="uq_ai_models_provider_model"),
    )
    op.create_index("ix_ai_models_provider_id", "ai_models", ["provider_id"], unique=False)

    op.create_table(
        "app_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("model_id", sa.Integer(), nullable=False),
        _created_at("updated_at"),
        sa.ForeignKeyConstraint(["provider_id"], ["ai_providers.id"]),
        sa.ForeignKeyConstraint(["model_id"], ["ai_models.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.bulk_insert(
        providers,
        [
            {"id": 1, "provider_key": "groq", "display_name": "Groq"},
            {"id": 2, "provider_key": "openai", "display_name": "OpenAI"},
        ],
    )
    op.bulk_insert(
        models,
        [
            {
                "id": 1,
                "provider_id": 1,
                "model_key": "llama-3.3-70b-versatile",
                "display_name": "Llama 3.3 70B Versatile",
                "is_default": True,
            },
            {
                "id": 2,
                "provider_id": 1,
                "model_key": "llama-3.1-8b-instant",
                "display_name": "Llama 3.1 8B Instant",
                "is_default": False,
            },
            {
                "id": 3,
                "provider_id": 2,
                "model_key": "gpt-4o-mini",
                "display_name": "GPT-4o mini",
                "is_default": True,
            },
            {
                "id": 4,
                "provider_id": 2,
                "model_key": "gpt-4o",
                "display_name": "GPT-4o",
                "is_default": False,
            },
        ],
    )


def downgrade() -> None:
    op.drop_table("app_settings")
    op.drop_index("ix_ai_models_provider_id", table_name="ai_models")
    op.drop_table("ai_models")
    op.drop_table("ai_providers")
    op.drop_index("ix_straplines_article_id", table_name="straplines")
    op.drop_table("straplines")
    op.drop_index("ix_headlines_article_id", table_name="headlines")
    op.drop_table("headlines")
    op.drop_index("ix_gaps_article_id", table_name="gaps")
    op.drop_table("gaps")
    op.drop_index("ix_facts_article_id", table_name="facts")
    op.drop_table("facts")
    op.drop_index("ix_articles_created_at", table_name="articles")
    op.drop_index("ix_articles_topic_id", table_name="articles")
    op.drop_index("ix_articles_status", table_name="articles")
    op.drop_table("articles")
    op.drop_table("topics")
