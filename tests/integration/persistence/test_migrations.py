"""Alembic migrations produce the same schema the tables module declares."""

from sqlalchemy import create_engine, inspect

from datareg.infrastructure.persistence.migrate import run_migrations, to_sync_url


def test_upgrade_to_head_creates_schema(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'sub' / 'migrated.db'}"

    run_migrations(url)

    engine = create_engine(to_sync_url(url))
    try:
        inspector = inspect(engine)
        assert {"datasets", "events", "deliveries"} <= set(inspector.get_table_names())
        columns = {c["name"] for c in inspector.get_columns("datasets")}
        assert {"id", "dataset_ref", "analysis_ref", "owner", "is_public", "views"} <= columns
        unique = inspector.get_unique_constraints("datasets")
        assert any(u["column_names"] == ["dataset_ref"] for u in unique)
    finally:
        engine.dispose()


def test_upgrade_is_idempotent(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}"
    run_migrations(url)
    run_migrations(url)
