from __future__ import annotations

import csv
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine

from cardshows.infra.db.shows_repository import ShowsRepository
from cardshows.migrations.runner import apply_pending

DEFAULT_DATA_DIR = Path(os.getenv("IMPORT_DATA_DIR", "/data"))
SHOWS_FILENAME = "shows_seed.csv"


def import_shows_from_csv(
    data_dir: str | Path | None = None,
    *,
    engine=None,
    database_url: Optional[str] = None,
) -> int:
    base_path = _resolve_data_dir(data_dir)
    shows_path = base_path / SHOWS_FILENAME

    if engine is None:
        if database_url is None:
            database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL required if engine not provided")
        engine = create_engine(database_url, future=True)
    apply_pending(engine)
    repo = ShowsRepository(engine)

    count = 0
    skipped = 0
    for row in _read_csv(shows_path):
        show_id = row.get("id")
        try:
            payload = _row_to_payload(row)
        except (ValueError, TypeError) as exc:
            print(f"[import_csv] WARNING: skipping show {show_id or row.get('title')}: {exc}")
            skipped += 1
            continue
        repo.upsert_show(show_id, payload)
        count += 1
    db_url = getattr(engine, "url", database_url or os.getenv("DATABASE_URL"))
    print(f"[import_csv] Import complete database={db_url} shows={count} skipped={skipped}")
    return count


def _row_to_payload(row: Dict[str, str]) -> Dict[str, Any]:
    if not row.get("id"):
        raise ValueError("id is required")
    if not row.get("title"):
        raise ValueError("title is required")
    return {
        "series_id": row.get("series_id") or None,
        "organizer_id": row.get("organizer_id") or None,
        "title": row["title"],
        "description": row.get("description") or None,
        "location": row.get("location") or None,
        "address": row.get("address") or None,
        "start_date": _parse_dt(row["start_date"]),
        "end_date": _parse_dt(row["end_date"]) if row.get("end_date") else None,
        "entry_fee": _parse_float(row.get("entry_fee")),
        "image_url": row.get("image_url") or None,
        "rating": _parse_float(row.get("rating")),
        "status": (row.get("status") or "active").strip().lower(),
        "latitude": _parse_float(row.get("latitude")),
        "longitude": _parse_float(row.get("longitude")),
        "categories": _parse_categories(row.get("categories")),
        "features": _parse_features(row.get("features")),
    }


def _resolve_data_dir(data_dir: str | Path | None) -> Path:
    if data_dir is None:
        candidate = DEFAULT_DATA_DIR
    else:
        candidate = Path(data_dir)
    if not candidate.is_absolute():
        candidate = (Path.cwd() / candidate).resolve()
    if not candidate.exists():
        raise FileNotFoundError(f"Data directory not found: {candidate}")
    return candidate


def _read_csv(path: Path):
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            yield {k: (v.strip() if isinstance(v, str) else v) for k, v in row.items()}


def _parse_dt(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value in (None, ""):
        return None
    return float(value)


def _parse_categories(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(";") if item.strip()]


def _parse_features(value: Optional[str]) -> dict:
    if not value:
        return {}
    features = json.loads(value)
    if not isinstance(features, dict):
        raise ValueError("features must be a JSON object")
    for flag, flag_value in features.items():
        if not isinstance(flag_value, bool):
            raise ValueError(f"feature {flag} must be true or false, got {flag_value!r}")
    return {str(k): v for k, v in features.items()}


if __name__ == "__main__":
    import sys
    data_arg = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    import_shows_from_csv(data_arg)
