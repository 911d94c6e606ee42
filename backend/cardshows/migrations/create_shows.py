from __future__ import annotations

from sqlalchemy.engine import Connection

from cardshows.infra.db.tables import shows_table


def upgrade(conn: Connection) -> None:
    shows_table.create(conn, checkfirst=True)
