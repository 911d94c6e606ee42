from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from cardshows.domain.filters import DEFAULT_RADIUS_MILES, DEFAULT_WINDOW_DAYS


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    frontend_origin: str
    default_radius_miles: float
    window_days: int


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        frontend_origin=os.getenv("FRONTEND_ORIGIN", "http://localhost:8081"),
        default_radius_miles=float(os.getenv("SHOWS_DEFAULT_RADIUS_MILES", DEFAULT_RADIUS_MILES)),
        window_days=int(os.getenv("SHOWS_DEFAULT_WINDOW_DAYS", DEFAULT_WINDOW_DAYS)),
    )
