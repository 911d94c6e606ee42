from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from cardshows.api.deps import get_coordinate_report
from cardshows.services.coordinate_report import CoordinateReport

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/coordinate-issues")
def list_coordinate_issues(
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    report: CoordinateReport = Depends(get_coordinate_report),
):
    """Shows with missing or out-of-range coordinates."""
    return report.issues(page, page_size)
