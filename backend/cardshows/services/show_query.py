from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.engine import Engine

from cardshows.domain.errors import InvalidParameter, NotFound, PartialDataCorruption
from cardshows.domain.filters import (
    DEFAULT_RADIUS_MILES,
    DEFAULT_STATUS,
    DEFAULT_WINDOW_DAYS,
    ShowFilters,
    compose_predicate,
    to_utc_naive,
)
from cardshows.domain.geo import validate_coordinates
from cardshows.domain.models import RECOGNIZED_STATUSES, GeoPoint, Show
from cardshows.domain.pagination import Pagination
from cardshows.infra.db.shows_repository import ShowsRepository, show_from_row

logger = logging.getLogger(__name__)

Visibility = Callable[[Show], bool]


def allow_all(show: Show) -> bool:
    return True


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class ShowQuery:
    lat: Optional[float] = None
    lon: Optional[float] = None
    radius_miles: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_entry_fee: Optional[float] = None
    categories: Optional[Sequence[str]] = None
    features: Optional[Dict[str, bool]] = None
    keyword: Optional[str] = None
    status: Optional[str] = DEFAULT_STATUS
    page_size: Optional[int] = None
    page: Optional[int] = None
    strict: bool = False


class ShowQueryService:
    """Read-only show search: radius, filters, ordering and pagination.

    ``visibility`` decides which shows the caller may see at all; it runs
    before the business filters and is never folded into them.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        *,
        repository: Optional[ShowsRepository] = None,
        visibility: Optional[Visibility] = None,
        today: Optional[Callable[[], date]] = None,
        default_radius_miles: float = DEFAULT_RADIUS_MILES,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        if repository is None:
            if engine is None:
                raise ValueError("engine or repository is required")
            repository = ShowsRepository(engine)
        self.repository = repository
        self.visibility = visibility or allow_all
        self.today = today or _utc_today
        self.default_radius_miles = default_radius_miles
        self.window_days = window_days

    def get_paginated_shows(self, query: ShowQuery) -> dict:
        filters = self.build_filters(query)
        pagination = Pagination.from_request(query.page, query.page_size)
        shows, errors = self._load_candidates(filters)

        matches = self._match(shows, filters)
        relaxed = False
        if not matches and not query.strict:
            fallback = filters.relaxed()
            if fallback != filters:
                logger.info("No shows matched the full filter set, retrying with status and date only")
                matches = self._match(shows, fallback, distance_from=filters)
                relaxed = True

        total_count = len(matches)
        page_items = pagination.window(matches)
        response = {
            "data": [shape_show(show, distance) for show, distance in page_items],
            "pagination": pagination.meta(total_count),
        }
        if relaxed:
            response["relaxed"] = True
        if errors:
            response["errors"] = [err.to_annotation() for err in errors]
        return response

    def nearby_shows(
        self,
        lat: float,
        lon: float,
        radius_miles: Optional[float] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = DEFAULT_STATUS,
    ) -> dict:
        if lat is None or lon is None:
            raise InvalidParameter("lat and lon are required for nearby shows")
        filters = self.build_filters(
            ShowQuery(
                lat=lat,
                lon=lon,
                radius_miles=radius_miles,
                start_date=start_date,
                end_date=end_date,
                status=status,
            )
        )
        shows, errors = self._load_candidates(filters)
        response = {"data": [shape_show(show, distance) for show, distance in self._match(shows, filters)]}
        if errors:
            response["errors"] = [err.to_annotation() for err in errors]
        return response

    def get_show_details(self, show_id: str) -> dict:
        row = self.repository.get_row(show_id)
        if row is None:
            raise NotFound(f"Show {show_id} not found")
        show = show_from_row(row)
        if not self.visibility(show):
            raise NotFound(f"Show {show_id} not found")
        return shape_show(show)

    def build_filters(self, query: ShowQuery) -> ShowFilters:
        center = _parse_center(query.lat, query.lon)

        radius = query.radius_miles if query.radius_miles is not None else self.default_radius_miles
        if math.isnan(radius) or radius < 0:
            raise InvalidParameter(f"radius_miles must be >= 0, got {radius}")

        start = query.start_date or self.today()
        end = query.end_date or start + timedelta(days=self.window_days)
        if end < start:
            raise InvalidParameter(f"end_date {end.isoformat()} is before start_date {start.isoformat()}")

        if query.max_entry_fee is not None and query.max_entry_fee < 0:
            raise InvalidParameter("max_entry_fee must be >= 0")

        status = (query.status or DEFAULT_STATUS).strip().lower()
        if status not in RECOGNIZED_STATUSES:
            raise InvalidParameter(f"Unknown status '{query.status}'")

        categories = None
        if query.categories:
            cleaned = frozenset(c.strip() for c in query.categories if c and c.strip())
            categories = cleaned or None

        features = None
        if query.features:
            if not isinstance(query.features, dict):
                raise InvalidParameter("features must be an object of flag -> boolean")
            for flag, value in query.features.items():
                if not isinstance(value, bool):
                    raise InvalidParameter(f"feature '{flag}' must be true or false, got {value!r}")
            features = {str(flag): value for flag, value in query.features.items()}

        keyword = query.keyword.strip() if query.keyword and query.keyword.strip() else None

        return ShowFilters(
            start_date=start,
            end_date=end,
            center=center,
            radius_miles=float(radius),
            status=status,
            max_entry_fee=query.max_entry_fee,
            categories=categories,
            features=features,
            keyword=keyword,
        )

    def _load_candidates(self, filters: ShowFilters) -> Tuple[List[Show], List[PartialDataCorruption]]:
        rows = self.repository.list_candidates(
            filters.window_start.replace(tzinfo=timezone.utc),
            filters.window_end.replace(tzinfo=timezone.utc),
        )
        shows: List[Show] = []
        errors: List[PartialDataCorruption] = []
        for row in rows:
            try:
                show = show_from_row(row)
            except PartialDataCorruption as exc:
                logger.warning("Skipping show %s: %s", exc.show_id, exc.message)
                errors.append(exc)
                continue
            if self.visibility(show):
                shows.append(show)
        return shows, errors

    @staticmethod
    def _match(
        shows: Iterable[Show],
        filters: ShowFilters,
        distance_from: Optional[ShowFilters] = None,
    ) -> List[Tuple[Show, Optional[float]]]:
        predicate = compose_predicate(filters)
        measure = distance_from or filters
        matches = [(show, measure.distance_to(show)) for show in shows if predicate(show)]
        matches.sort(key=_ordering_key)
        return matches


def _ordering_key(item: Tuple[Show, Optional[float]]):
    show, distance = item
    return (
        to_utc_naive(show.start_date),
        distance if distance is not None else math.inf,
        show.id,
    )


def parse_features(raw: Optional[str]) -> Optional[Dict[str, bool]]:
    """Decode a features filter given as a JSON object string."""
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        raise InvalidParameter("features must be a JSON object") from None
    if not isinstance(value, dict):
        raise InvalidParameter("features must be a JSON object")
    return value


def _parse_center(lat: Optional[float], lon: Optional[float]) -> Optional[GeoPoint]:
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise InvalidParameter("lat and lon must be supplied together")
    if not validate_coordinates(lat, lon):
        raise InvalidParameter(f"Coordinates out of range: lat={lat}, lon={lon}")
    return GeoPoint(lat=lat, lon=lon)


def shape_show(show: Show, distance: Optional[float] = None) -> dict:
    payload = {
        "id": show.id,
        "title": show.title,
        "description": show.description,
        "location": show.location,
        "address": show.address,
        "start_date": _to_iso(show.start_date),
        "end_date": _to_iso(show.end_date),
        "entry_fee": show.entry_fee,
        "status": show.status,
        "latitude": show.point.lat if show.point else None,
        "longitude": show.point.lon if show.point else None,
        "categories": sorted(show.categories),
        "features": dict(show.features),
        "series_id": show.series_id,
        "organizer_id": show.organizer_id,
        "image_url": show.image_url,
        "rating": show.rating,
        "created_at": _to_iso(show.created_at),
        "updated_at": _to_iso(show.updated_at),
    }
    if distance is not None:
        payload["distance_miles"] = round(distance, 2)
    return payload


def _to_iso(dt):
    return dt.isoformat() if dt else None
