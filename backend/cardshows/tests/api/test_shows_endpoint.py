from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from sqlalchemy import text

WINDOW = {"start_date": "2026-03-01", "end_date": "2026-03-31"}


def test_health(api_client):
    assert api_client.get("/health").json() == {"status": "ok"}


def test_list_shows_within_radius(api_client, seed, make_row, north):
    seed(
        make_row("near", latitude=north(10), longitude=-86.0),
        make_row("far", latitude=north(60), longitude=-86.0),
    )
    resp = api_client.get(
        "/api/shows",
        params={"lat": 40.0, "lon": -86.0, "radius_miles": 50, **WINDOW},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [show["id"] for show in body["data"]] == ["near"]
    assert body["data"][0]["distance_miles"] == pytest.approx(10, abs=0.01)
    assert body["pagination"]["total_count"] == 1


def test_list_shows_filters_by_categories_and_features(api_client, seed, make_row):
    seed(
        make_row("pokemon", categories=["pokemon"], features={"freeParking": True}),
        make_row("sports", categories=["sports"], features={"freeParking": True}),
        make_row("pokemon-paid-parking", categories=["pokemon"], features={"freeParking": False}),
    )
    resp = api_client.get(
        "/api/shows",
        params=[
            ("categories", "pokemon"),
            ("categories", "magic"),
            ("features", json.dumps({"freeParking": True})),
            ("start_date", WINDOW["start_date"]),
            ("end_date", WINDOW["end_date"]),
        ],
    )
    assert resp.status_code == 200
    assert [show["id"] for show in resp.json()["data"]] == ["pokemon"]


def test_invalid_coordinates_return_error_shape(api_client):
    resp = api_client.get("/api/shows", params={"lat": 95, "lon": -86.0})
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "INVALID_PARAMETER"
    assert "data" not in body
    assert body["error"]


def test_malformed_features_json_is_invalid(api_client):
    resp = api_client.get("/api/shows", params={"features": "[1, 2"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_PARAMETER"


@pytest.mark.parametrize("flag", ["false", "no", 0, 1, None])
def test_non_boolean_feature_flag_is_invalid(api_client, seed, make_row, flag):
    seed(make_row("paid-parking", features={"freeParking": False}))
    resp = api_client.get("/api/shows", params={"features": json.dumps({"freeParking": flag}), **WINDOW})
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "INVALID_PARAMETER"
    assert "freeParking" in body["error"]


def test_corrupt_stored_date_is_annotated_not_fatal(api_client, engine, seed, make_row):
    seed(make_row("good"), make_row("bad"))
    with engine.begin() as conn:
        conn.execute(text("UPDATE shows SET start_date = '2026-03-07 9am' WHERE id = 'bad'"))
    resp = api_client.get("/api/shows", params=WINDOW)
    assert resp.status_code == 200
    body = resp.json()
    assert [show["id"] for show in body["data"]] == ["good"]
    assert body["errors"][0]["id"] == "bad"


def test_relaxed_flag_in_response(api_client, seed, make_row):
    seed(make_row("anywhere", latitude=None, longitude=None))
    resp = api_client.get("/api/shows", params={"keyword": "nothing-like-this", **WINDOW})
    body = resp.json()
    assert body["relaxed"] is True
    assert [show["id"] for show in body["data"]] == ["anywhere"]


def test_nearby_endpoint_requires_coordinates(api_client):
    assert api_client.get("/api/shows/nearby").status_code == 422


def test_nearby_endpoint(api_client, seed, make_row, north):
    seed(make_row("close", latitude=north(3), longitude=-86.0))
    resp = api_client.get("/api/shows/nearby", params={"lat": 40.0, "lon": -86.0, **WINDOW})
    assert resp.status_code == 200
    assert [show["id"] for show in resp.json()["data"]] == ["close"]


def test_show_details_and_not_found(api_client, seed, make_row):
    seed(make_row("detail-1", start_date=datetime(2026, 5, 2, 9, tzinfo=timezone.utc)))
    resp = api_client.get("/api/shows/detail-1")
    assert resp.status_code == 200
    assert resp.json()["id"] == "detail-1"
    missing = api_client.get("/api/shows/nope")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Show nope not found", "code": "NOT_FOUND"}
