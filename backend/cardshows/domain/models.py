from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional

RECOGNIZED_STATUSES = frozenset({"active", "upcoming", "completed", "cancelled"})


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float


@dataclass(frozen=True)
class Show:
    id: str
    title: str
    start_date: datetime
    end_date: Optional[datetime]
    status: str
    point: Optional[GeoPoint] = None
    entry_fee: Optional[float] = None
    categories: FrozenSet[str] = field(default_factory=frozenset)
    features: Dict[str, bool] = field(default_factory=dict)
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    series_id: Optional[str] = None
    organizer_id: Optional[str] = None
    image_url: Optional[str] = None
    rating: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def effective_end(self) -> datetime:
        if self.end_date is None or self.end_date < self.start_date:
            return self.start_date
        return self.end_date

    @property
    def normalized_status(self) -> Optional[str]:
        value = (self.status or "").strip().lower()
        return value if value in RECOGNIZED_STATUSES else None
