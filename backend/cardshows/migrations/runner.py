"""Ordered, append-only schema migrations.

New steps go at the end of MIGRATIONS with the next version number. A step
that has been applied somewhere is never edited or removed; ship a new step
instead.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import create_engine, insert, select
from sqlalchemy.engine import Connection, Engine

from cardshows.infra.db.tables import schema_migrations_table

from . import add_show_indexes, create_shows, normalize_show_status

logger = logging.getLogger(__name__)


class MigrationError(RuntimeError):
    pass


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    upgrade: Callable[[Connection], None]


MIGRATIONS = (
    Migration(1, "create_shows", create_shows.upgrade),
    Migration(2, "add_show_indexes", add_show_indexes.upgrade),
    Migration(3, "normalize_show_status", normalize_show_status.upgrade),
)


def applied_versions(conn: Connection) -> dict:
    schema_migrations_table.create(conn, checkfirst=True)
    rows = conn.execute(
        select(schema_migrations_table.c.version, schema_migrations_table.c.name)
    ).all()
    return {row.version: row.name for row in rows}


def check_history(applied: dict, migrations=MIGRATIONS) -> None:
    known = {m.version: m.name for m in migrations}
    for version, name in sorted(applied.items()):
        if version not in known:
            raise MigrationError(f"Database has migration {version} ({name}) unknown to this code")
        if known[version] != name:
            raise MigrationError(
                f"Migration {version} was applied as '{name}' but is now '{known[version]}'"
            )


def apply_pending(engine: Optional[Engine] = None, database_url: Optional[str] = None, migrations=MIGRATIONS) -> List[int]:
    engine = engine or _resolve_engine(database_url)
    ordered = sorted(migrations, key=lambda m: m.version)
    with engine.begin() as conn:
        applied = applied_versions(conn)
    check_history(applied, ordered)

    ran: List[int] = []
    for migration in ordered:
        if migration.version in applied:
            continue
        with engine.begin() as conn:
            migration.upgrade(conn)
            conn.execute(
                insert(schema_migrations_table).values(
                    version=migration.version,
                    name=migration.name,
                    applied_at=datetime.now(timezone.utc),
                )
            )
        logger.info("Applied migration %s_%s", migration.version, migration.name)
        ran.append(migration.version)
    return ran


def _resolve_engine(database_url: Optional[str]) -> Engine:
    if not database_url:
        database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is required")
    return create_engine(database_url, future=True)
