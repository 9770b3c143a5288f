"""Delivery calendar routes"""

from typing import Optional

from fastapi import APIRouter, Query

from app.config import settings
from domain.schemas.catalog_schemas import StartDatesResponse
from services import delivery_calendar

router = APIRouter(prefix="/delivery", tags=["Delivery"])


@router.get("/start-dates", response_model=StartDatesResponse)
def list_start_dates(
    horizon_days: Optional[int] = Query(None, ge=1, le=120),
):
    """Selectable start dates: Tuesdays, Thursdays and Saturdays from today on."""
    horizon = horizon_days or settings.start_date_horizon_days
    return StartDatesResponse(
        horizon_days=horizon,
        dates=delivery_calendar.candidate_start_dates(horizon),
    )
