from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from cardshows.api.deps import get_show_service
from cardshows.services.show_query import ShowQuery, ShowQueryService, parse_features

router = APIRouter(tags=["shows"])


@router.get("/shows")
def list_shows(
    lat: Optional[float] = Query(None, description="Latitude of the search center"),
    lon: Optional[float] = Query(None, description="Longitude of the search center"),
    radius_miles: Optional[float] = Query(None),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    max_entry_fee: Optional[float] = None,
    categories: Optional[List[str]] = Query(None),
    features: Optional[str] = Query(None, description='JSON object, e.g. {"wheelchairAccessible": true}'),
    keyword: Optional[str] = None,
    status: str = "active",
    page_size: Optional[int] = None,
    page: Optional[int] = None,
    strict: bool = False,
    service: ShowQueryService = Depends(get_show_service),
):
    query = ShowQuery(
        lat=lat,
        lon=lon,
        radius_miles=radius_miles,
        start_date=start_date,
        end_date=end_date,
        max_entry_fee=max_entry_fee,
        categories=categories,
        features=parse_features(features),
        keyword=keyword,
        status=status,
        page_size=page_size,
        page=page,
        strict=strict,
    )
    return service.get_paginated_shows(query)


@router.get("/shows/nearby")
def list_nearby_shows(
    lat: float = Query(...),
    lon: float = Query(...),
    radius_miles: Optional[float] = Query(None),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: ShowQueryService = Depends(get_show_service),
):
    return service.nearby_shows(lat, lon, radius_miles, start_date, end_date)


@router.get("/shows/{show_id}")
def get_show(show_id: str, service: ShowQueryService = Depends(get_show_service)):
    return service.get_show_details(show_id)
