"""SQLModel tables, engine policy, and Alembic runner for the editorial store."""
