"""
Delivery calendar: pure date arithmetic over the three delivery weekdays.

Nothing here holds state. Functions that depend on "today" take it as an
optional argument so callers (and tests) can pin it; otherwise it is read
fresh on every call.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from app.exceptions import InvalidDeliveryDateError, ServiceValidationError
from domain.enums import DeliveryWeekday

logger = logging.getLogger("selkies.calendar")

DELIVERY_WEEKDAYS = tuple(DeliveryWeekday)
_DELIVERY_INDEXES = frozenset(day.iso_index for day in DELIVERY_WEEKDAYS)

# A full week guarantees every weekday shows up once.
MIN_LOOKAHEAD_DAYS = 7


def is_delivery_day(day: date) -> bool:
    return day.weekday() in _DELIVERY_INDEXES


def weekday_of(day: date) -> DeliveryWeekday:
    """Delivery weekday a date falls on; rejects non-delivery dates."""
    if not is_delivery_day(day):
        raise InvalidDeliveryDateError(
            f"{day.isoformat()} is a {day.strftime('%A')}; we deliver on "
            + ", ".join(d.value for d in DELIVERY_WEEKDAYS),
            details={"date": day.isoformat()},
        )
    return DeliveryWeekday.from_index(day.weekday())


def candidate_start_dates(horizon_days: int, today: Optional[date] = None) -> List[date]:
    """Delivery days from today through today + horizon_days - 1."""
    if horizon_days < 0:
        raise ServiceValidationError("horizon_days must not be negative")
    base = today or date.today()
    days = (base + timedelta(days=offset) for offset in range(horizon_days))
    return [d for d in days if is_delivery_day(d)]


def add_months(day: date, months: int) -> date:
    """Calendar-month addition, clamped to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def next_delivery_day(day: date) -> date:
    """The given date if it is a delivery day, otherwise the next one after it."""
    while not is_delivery_day(day):
        day += timedelta(days=1)
    return day


def default_end_date(start: date) -> date:
    """
    One calendar month after start, moved forward to a delivery day.

    Never moves backward, so the subscription is never shorter than a month.
    """
    return next_delivery_day(add_months(start, 1))


def first_occurrence_per_weekday(
    start: date, lookahead_days: int = 21
) -> Dict[DeliveryWeekday, date]:
    """First date on or after start for each delivery weekday."""
    if lookahead_days < MIN_LOOKAHEAD_DAYS:
        raise ServiceValidationError(
            f"lookahead_days must be at least {MIN_LOOKAHEAD_DAYS} to cover every weekday",
            details={"lookahead_days": lookahead_days},
        )

    found: Dict[DeliveryWeekday, date] = {}
    for offset in range(lookahead_days):
        current = start + timedelta(days=offset)
        if not is_delivery_day(current):
            continue
        found.setdefault(DeliveryWeekday.from_index(current.weekday()), current)
        if len(found) == len(DELIVERY_WEEKDAYS):
            break

    # keep calendar order regardless of which weekday start fell on
    return {day: found[day] for day in DELIVERY_WEEKDAYS}


def delivery_dates_in_range(start: date, end: date) -> List[date]:
    """Every delivery day between start and end, both inclusive."""
    if end < start:
        return []
    span = (end - start).days + 1
    days = (start + timedelta(days=offset) for offset in range(span))
    return [d for d in days if is_delivery_day(d)]


def occurrence_count(weekday: DeliveryWeekday, start: date, end: date) -> int:
    return sum(
        1 for d in delivery_dates_in_range(start, end) if d.weekday() == weekday.iso_index
    )


def validate_start_date(start: date, today: Optional[date] = None) -> DeliveryWeekday:
    """
    Check a requested start date and return its weekday.

    When today is given, dates before it are rejected as well.
    """
    if today is not None and start < today:
        raise InvalidDeliveryDateError(
            f"Start date {start.isoformat()} is in the past",
            details={"start_date": start.isoformat(), "today": today.isoformat()},
        )
    weekday = weekday_of(start)
    logger.debug("Start date %s accepted (%s)", start, weekday.value)
    return weekday


def validate_end_date(start: date, end: date) -> DeliveryWeekday:
    if end < start:
        raise InvalidDeliveryDateError(
            f"End date {end.isoformat()} is before start date {start.isoformat()}",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    return weekday_of(end)
