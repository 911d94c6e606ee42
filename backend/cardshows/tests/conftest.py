from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert

from cardshows.api.deps import get_engine
from cardshows.api.main import create_app
from cardshows.domain.geo import EARTH_RADIUS_M, METERS_PER_MILE
from cardshows.infra.db.tables import metadata, shows_table
from cardshows.services.show_query import ShowQueryService
from cardshows.settings import Settings

TODAY = date(2026, 3, 1)
CENTER = (40.0, -86.0)


def miles_north(miles: float, lat: float = CENTER[0]) -> float:
    return lat + math.degrees(miles * METERS_PER_MILE / EARTH_RADIUS_M)


def _show_row(show_id: str, **overrides) -> dict:
    start = overrides.pop("start_date", datetime(2026, 3, 7, 9, 0, tzinfo=timezone.utc))
    row = {
        "id": show_id,
        "title": f"Card Show {show_id}",
        "description": "Sports cards, Pokemon and memorabilia",
        "location": "County Fairgrounds",
        "address": "100 Main St, Indianapolis, IN",
        "start_date": start,
        "end_date": start + timedelta(hours=8),
        "entry_fee": 5.0,
        "status": "active",
        "latitude": CENTER[0],
        "longitude": CENTER[1],
        "categories": ["sports"],
        "features": {},
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'shows.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    metadata.create_all(engine)
    return engine


@pytest.fixture()
def make_row():
    return _show_row


@pytest.fixture()
def seed(engine):
    def _seed(*rows):
        with engine.begin() as conn:
            for row in rows:
                conn.execute(insert(shows_table).values(**row))

    return _seed


@pytest.fixture()
def service(engine):
    return ShowQueryService(engine, today=lambda: TODAY)


@pytest.fixture()
def app_settings() -> Settings:
    return Settings(
        database_url=None,
        frontend_origin="http://localhost:8081",
        default_radius_miles=25.0,
        window_days=30,
    )


@pytest.fixture()
def api_client(engine, app_settings):
    app = create_app(engine=engine, settings=app_settings)
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def north():
    return miles_north
