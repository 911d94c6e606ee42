from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Dict, FrozenSet, List, Optional

from .geo import bounding_box, distance_miles, in_bounding_box, within_radius
from .models import GeoPoint, Show

DEFAULT_RADIUS_MILES = 25.0
DEFAULT_WINDOW_DAYS = 30
DEFAULT_STATUS = "active"
KEYWORD_FIELDS = ("title", "description", "location", "address")

ShowPredicate = Callable[[Show], bool]


@dataclass(frozen=True)
class ShowFilters:
    start_date: date
    end_date: date
    center: Optional[GeoPoint] = None
    radius_miles: float = DEFAULT_RADIUS_MILES
    status: str = DEFAULT_STATUS
    max_entry_fee: Optional[float] = None
    categories: Optional[FrozenSet[str]] = None
    features: Optional[Dict[str, bool]] = None
    keyword: Optional[str] = None

    @property
    def window_start(self) -> datetime:
        return datetime.combine(self.start_date, time.min)

    @property
    def window_end(self) -> datetime:
        # exclusive bound: the whole of end_date is inside the range
        return datetime.combine(self.end_date + timedelta(days=1), time.min)

    def relaxed(self) -> "ShowFilters":
        """Status and date only; the geo, fee, category, feature and keyword filters go."""
        return replace(
            self,
            center=None,
            max_entry_fee=None,
            categories=None,
            features=None,
            keyword=None,
        )

    def distance_to(self, show: Show) -> Optional[float]:
        if self.center is None or show.point is None:
            return None
        return distance_miles(self.center.lat, self.center.lon, show.point.lat, show.point.lon)


def to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def compose_predicate(filters: ShowFilters) -> ShowPredicate:
    checks: List[ShowPredicate] = [_status_check(filters.status), _date_check(filters)]
    if filters.center is not None:
        checks.append(_radius_check(filters.center, filters.radius_miles))
    if filters.max_entry_fee is not None:
        checks.append(_fee_check(filters.max_entry_fee))
    if filters.categories:
        checks.append(_categories_check(filters.categories))
    if filters.features:
        checks.append(_features_check(filters.features))
    keyword = (filters.keyword or "").strip().lower()
    if keyword:
        checks.append(_keyword_check(keyword))

    def predicate(show: Show) -> bool:
        return all(check(show) for check in checks)

    return predicate


def _status_check(status: str) -> ShowPredicate:
    wanted = status.strip().lower()
    return lambda show: show.normalized_status == wanted


def _date_check(filters: ShowFilters) -> ShowPredicate:
    range_start = filters.window_start
    range_end = filters.window_end

    def check(show: Show) -> bool:
        start = to_utc_naive(show.start_date)
        end = to_utc_naive(show.effective_end)
        return end >= range_start and start < range_end

    return check


def _radius_check(center: GeoPoint, radius_miles: float) -> ShowPredicate:
    box = bounding_box(center.lat, center.lon, radius_miles)

    def check(show: Show) -> bool:
        if show.point is None:
            return False
        if not in_bounding_box(box, show.point.lat, show.point.lon):
            return False
        distance = distance_miles(center.lat, center.lon, show.point.lat, show.point.lon)
        return within_radius(distance, radius_miles)

    return check


def _fee_check(max_fee: float) -> ShowPredicate:
    return lambda show: show.entry_fee is None or show.entry_fee <= max_fee


def _categories_check(categories: FrozenSet[str]) -> ShowPredicate:
    return lambda show: bool(show.categories & categories)


def _features_check(features: Dict[str, bool]) -> ShowPredicate:
    def check(show: Show) -> bool:
        return all(bool(show.features.get(flag, False)) == bool(required) for flag, required in features.items())

    return check


def _keyword_check(keyword: str) -> ShowPredicate:
    def check(show: Show) -> bool:
        for field_name in KEYWORD_FIELDS:
            value = getattr(show, field_name)
            if value and keyword in value.lower():
                return True
        return False

    return check
