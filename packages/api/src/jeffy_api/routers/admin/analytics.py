"""Sales analytics reports."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_api.responses import wrap_response
from jeffy_api.services import analytics_service
from jeffy_api.utils.filtering import PeriodParams

router = APIRouter(prefix="/analytics", tags=["admin-analytics"])


@router.get("/{report_name}")
async def report(
    report_name: str,
    period: PeriodParams = Depends(),
    limit: int = Query(10, ge=1, le=100),
):
    if report_name not in analytics_service.REPORTS:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown report '{report_name}'. Available: {', '.join(analytics_service.REPORTS)}",
        )
    data = analytics_service.report(report_name, period.start, period.end, limit=limit)
    return wrap_response(data, total_count=len(data))
