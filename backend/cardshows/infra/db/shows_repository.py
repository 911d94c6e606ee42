from __future__ import annotations

import json
import logging
import math
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional

from sqlalchemy import String, insert, or_, select, type_coerce, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

from cardshows.domain.errors import PartialDataCorruption, UpstreamUnavailable
from cardshows.domain.geo import validate_coordinates
from cardshows.domain.models import GeoPoint, Show

from .tables import shows_table

logger = logging.getLogger(__name__)

SHOW_COLUMNS = [
    "series_id",
    "organizer_id",
    "title",
    "description",
    "location",
    "address",
    "start_date",
    "end_date",
    "entry_fee",
    "image_url",
    "rating",
    "status",
    "latitude",
    "longitude",
    "categories",
    "features",
]

# Read as stored so a bad value fails one row in show_from_row, not the whole fetch.
RAW_COLUMNS = ("start_date", "end_date", "created_at", "updated_at", "categories", "features")


def _select_raw():
    return select(
        *(
            type_coerce(col, String).label(col.name) if col.name in RAW_COLUMNS else col
            for col in shows_table.c
        )
    )


class ShowsRepository:
    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        try:
            with self.engine.connect() as conn:
                yield conn
        except DBAPIError as exc:
            logger.error("Show store unavailable: %s", exc.orig)
            raise UpstreamUnavailable("Show data store is unavailable, try again later") from exc

    def list_candidates(self, window_start: datetime, window_end: datetime) -> List[Dict[str, Any]]:
        """Rows that may overlap [window_start, window_end).

        Only the date window is pushed down; it admits every show whose
        effective end (end_date, or start_date when end_date is missing or
        earlier) can reach the window.
        """
        stmt = (
            _select_raw()
            .where(
                shows_table.c.start_date < window_end,
                or_(
                    shows_table.c.start_date >= window_start,
                    shows_table.c.end_date >= window_start,
                ),
            )
            .order_by(shows_table.c.start_date, shows_table.c.id)
        )
        with self._connection() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def get_row(self, show_id: str) -> Optional[Dict[str, Any]]:
        with self._connection() as conn:
            row = conn.execute(_select_raw().where(shows_table.c.id == show_id)).mappings().first()
        return dict(row) if row else None

    def list_coordinate_suspects(self) -> List[Dict[str, Any]]:
        lat, lon = shows_table.c.latitude, shows_table.c.longitude
        stmt = (
            select(shows_table.c.id, shows_table.c.title, lat, lon)
            .where(
                or_(
                    lat.is_(None),
                    lon.is_(None),
                    lat < -90,
                    lat > 90,
                    lon < -180,
                    lon > 180,
                )
            )
            .order_by(shows_table.c.id)
        )
        with self._connection() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def upsert_show(self, show_id: str, data: Dict[str, Any]) -> str:
        record = {col: data.get(col) for col in SHOW_COLUMNS}
        now = datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            existing = conn.execute(
                select(shows_table.c.id).where(shows_table.c.id == show_id)
            ).scalar_one_or_none()
            if existing:
                conn.execute(
                    update(shows_table).where(shows_table.c.id == show_id).values(**record, updated_at=now)
                )
            else:
                conn.execute(
                    insert(shows_table).values(id=show_id, **record, created_at=now, updated_at=now)
                )
        return show_id


def show_from_row(row: Mapping[str, Any]) -> Show:
    """Build a Show from a stored row, raising PartialDataCorruption on bad data."""
    show_id = row.get("id")
    if not show_id:
        raise PartialDataCorruption(None, "show row without id")
    if not row.get("title"):
        raise PartialDataCorruption(show_id, "missing title")
    start = _stored_datetime(show_id, "start_date", row.get("start_date"))
    if start is None:
        raise PartialDataCorruption(show_id, "missing start_date")
    end = _stored_datetime(show_id, "end_date", row.get("end_date"))
    if not row.get("status"):
        raise PartialDataCorruption(show_id, "missing status")

    fee = _stored_float(show_id, "entry_fee", row.get("entry_fee"))
    if fee is not None and (math.isnan(fee) or fee < 0):
        raise PartialDataCorruption(show_id, f"invalid entry_fee {fee!r}")

    categories = _stored_json(show_id, "categories", row.get("categories"))
    if categories is None:
        categories = []
    if not isinstance(categories, list):
        raise PartialDataCorruption(show_id, "categories must be a list")
    features = _stored_json(show_id, "features", row.get("features"))
    if features is None:
        features = {}
    if not isinstance(features, dict):
        raise PartialDataCorruption(show_id, "features must be an object")

    return Show(
        id=str(show_id),
        title=row["title"],
        start_date=start,
        end_date=end,
        status=row["status"],
        point=_point_from_row(show_id, row.get("latitude"), row.get("longitude")),
        entry_fee=fee,
        categories=frozenset(str(c) for c in categories),
        features=dict(features),
        description=row.get("description"),
        location=row.get("location"),
        address=row.get("address"),
        series_id=row.get("series_id"),
        organizer_id=row.get("organizer_id"),
        image_url=row.get("image_url"),
        rating=_stored_float(show_id, "rating", row.get("rating")),
        created_at=_stored_datetime(show_id, "created_at", row.get("created_at")),
        updated_at=_stored_datetime(show_id, "updated_at", row.get("updated_at")),
    )


def _stored_datetime(show_id, column: str, value) -> Optional[datetime]:
    # SQLite hands back text, Postgres drivers hand back datetimes.
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise PartialDataCorruption(show_id, f"unparseable {column} {value!r}") from None


def _stored_float(show_id, column: str, value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise PartialDataCorruption(show_id, f"unparseable {column} {value!r}") from None


def _stored_json(show_id, column: str, value):
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        raise PartialDataCorruption(show_id, f"unparseable {column} JSON") from None


def _point_from_row(show_id, lat, lon) -> Optional[GeoPoint]:
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise PartialDataCorruption(show_id, "coordinates are missing latitude or longitude")
    try:
        lat, lon = float(lat), float(lon)
    except (TypeError, ValueError):
        raise PartialDataCorruption(show_id, f"unparseable coordinates ({lat!r}, {lon!r})") from None
    if not validate_coordinates(lat, lon):
        raise PartialDataCorruption(show_id, f"coordinates out of range ({lat}, {lon})")
    return GeoPoint(lat=lat, lon=lon)
