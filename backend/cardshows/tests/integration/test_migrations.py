from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, insert, inspect, select

from cardshows.infra.db.tables import schema_migrations_table, shows_table
from cardshows.migrations.runner import MIGRATIONS, Migration, MigrationError, apply_pending


@pytest.fixture()
def empty_engine(tmp_path):
    return create_engine(f"sqlite:///{tmp_path / 'migrations.db'}", future=True)


def test_apply_pending_runs_all_in_order(empty_engine):
    ran = apply_pending(empty_engine)
    assert ran == [m.version for m in MIGRATIONS]
    inspector = inspect(empty_engine)
    assert "shows" in inspector.get_table_names()
    index_names = {ix["name"] for ix in inspector.get_indexes("shows")}
    assert {"ix_shows_start_date", "ix_shows_status"} <= index_names
    assert apply_pending(empty_engine) == []


def test_status_normalization_migration(empty_engine):
    apply_pending(empty_engine, migrations=MIGRATIONS[:2])
    with empty_engine.begin() as conn:
        conn.execute(
            insert(shows_table).values(
                id="legacy",
                title="Legacy Show",
                start_date=datetime(2026, 3, 7, tzinfo=timezone.utc),
                status=" ACTIVE ",
            )
        )
    assert apply_pending(empty_engine) == [3]
    with empty_engine.begin() as conn:
        status = conn.execute(select(shows_table.c.status)).scalar_one()
    assert status == "active"


def test_unknown_applied_migration_is_rejected(empty_engine):
    apply_pending(empty_engine)
    with empty_engine.begin() as conn:
        conn.execute(
            insert(schema_migrations_table).values(
                version=99, name="from_the_future", applied_at=datetime.now(timezone.utc)
            )
        )
    with pytest.raises(MigrationError):
        apply_pending(empty_engine)


def test_renamed_migration_is_rejected(empty_engine):
    apply_pending(empty_engine)
    edited = (Migration(1, "create_shows_v2", MIGRATIONS[0].upgrade),) + MIGRATIONS[1:]
    with pytest.raises(MigrationError):
        apply_pending(empty_engine, migrations=edited)


def test_migrate_db_job(tmp_path, capsys):
    from cardshows.jobs.migrate_db import migrate

    url = f"sqlite:///{tmp_path / 'job.db'}"
    assert migrate(url) == [1, 2, 3]
    assert migrate(url) == []
    assert "[migrate_db] applied=none" in capsys.readouterr().out
