from __future__ import annotations

from typing import Optional

from sqlalchemy.engine import Engine

from cardshows.domain.geo import validate_coordinates
from cardshows.domain.pagination import Pagination
from cardshows.infra.db.shows_repository import ShowsRepository

NULL_COORDINATES = "NULL_COORDINATES"
INVALID_COORDINATES = "INVALID_COORDINATES"


def classify_coordinates(lat, lon) -> Optional[str]:
    if lat is None and lon is None:
        return NULL_COORDINATES
    if validate_coordinates(lat, lon):
        return None
    return INVALID_COORDINATES


class CoordinateReport:
    """Shows that cannot take part in radius searches, for data cleanup."""

    def __init__(self, engine: Optional[Engine] = None, *, repository: Optional[ShowsRepository] = None):
        if repository is None:
            if engine is None:
                raise ValueError("engine or repository is required")
            repository = ShowsRepository(engine)
        self.repository = repository

    def issues(self, page: Optional[int] = None, page_size: Optional[int] = None) -> dict:
        pagination = Pagination.from_request(page, page_size)
        issues = []
        for row in self.repository.list_coordinate_suspects():
            issue_type = classify_coordinates(row.get("latitude"), row.get("longitude"))
            if issue_type is None:
                continue
            issues.append(
                {
                    "show_id": row["id"],
                    "show_title": row.get("title"),
                    "latitude": row.get("latitude"),
                    "longitude": row.get("longitude"),
                    "issue_type": issue_type,
                }
            )
        return {"data": pagination.window(issues), "pagination": pagination.meta(len(issues))}

    def summary(self) -> dict:
        counts = {NULL_COORDINATES: 0, INVALID_COORDINATES: 0}
        for row in self.repository.list_coordinate_suspects():
            issue_type = classify_coordinates(row.get("latitude"), row.get("longitude"))
            if issue_type:
                counts[issue_type] += 1
        return counts
