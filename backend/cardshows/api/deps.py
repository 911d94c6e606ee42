from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.engine import Engine

from cardshows.services.coordinate_report import CoordinateReport
from cardshows.services.show_query import ShowQueryService


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "db_engine", None)
    if engine is None:
        raise HTTPException(status_code=500, detail="Database engine not configured")
    return engine


def get_show_service(request: Request, engine: Engine = Depends(get_engine)) -> ShowQueryService:
    settings = request.app.state.settings
    return ShowQueryService(
        engine,
        visibility=request.app.state.visibility,
        default_radius_miles=settings.default_radius_miles,
        window_days=settings.window_days,
    )


def get_coordinate_report(engine: Engine = Depends(get_engine)) -> CoordinateReport:
    return CoordinateReport(engine)
