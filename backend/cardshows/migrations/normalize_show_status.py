from __future__ import annotations

from sqlalchemy import func, update
from sqlalchemy.engine import Connection

from cardshows.infra.db.tables import shows_table


def upgrade(conn: Connection) -> None:
    # older producers wrote 'ACTIVE' / ' Upcoming'; the query compares lowercase
    conn.execute(
        update(shows_table)
        .where(shows_table.c.status != func.lower(func.trim(shows_table.c.status)))
        .values(status=func.lower(func.trim(shows_table.c.status)))
    )
