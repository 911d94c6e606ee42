from __future__ import annotations

from sqlalchemy.engine import Connection

from cardshows.infra.db.tables import ix_shows_start_date, ix_shows_status


def upgrade(conn: Connection) -> None:
    ix_shows_start_date.create(conn, checkfirst=True)
    ix_shows_status.create(conn, checkfirst=True)
