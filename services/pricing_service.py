"""Pricing for one-time and recurring boxes"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Tuple

from app.exceptions import PlanStateError
from domain.enums import DeliveryWeekday, Recurrence
from services import delivery_calendar
from services.selection_store import SelectionStore

if TYPE_CHECKING:
    from services.subscription_service import SubscriptionPlan

logger = logging.getLogger("selkies.pricing")

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class DayQuote:
    weekday: DeliveryWeekday
    subtotal: Decimal
    occurrences: int

    @property
    def total(self) -> Decimal:
        return self.subtotal * self.occurrences


@dataclass(frozen=True)
class PriceQuote:
    recurrence: Recurrence
    days: Tuple[DayQuote, ...] = field(default_factory=tuple)

    @property
    def total(self) -> Decimal:
        return sum((d.total for d in self.days), ZERO)

    @property
    def deliveries(self) -> int:
        return sum(d.occurrences for d in self.days if d.subtotal > 0)


class PricingService:
    """Deterministic totals. Amounts are Decimal throughout; no floats."""

    @staticmethod
    def day_subtotal(day: DeliveryWeekday, selections: SelectionStore) -> Decimal:
        return sum((entry.line_total for entry in selections.entries(day).values()), ZERO)

    @staticmethod
    def one_time_total(selected_day: DeliveryWeekday, selections: SelectionStore) -> Decimal:
        """A one-time order bills exactly one delivery."""
        return PricingService.day_subtotal(selected_day, selections)

    @staticmethod
    def recurring_total(start: date, end: date, selections: SelectionStore) -> Decimal:
        """
        Each weekday's basket is billed once per calendar occurrence of that
        weekday between start and end inclusive.
        """
        return PricingService._recurring_quote(start, end, selections).total

    @staticmethod
    def _recurring_quote(start: date, end: date, selections: SelectionStore) -> PriceQuote:
        days = tuple(
            DayQuote(
                weekday=day,
                subtotal=PricingService.day_subtotal(day, selections),
                occurrences=delivery_calendar.occurrence_count(day, start, end),
            )
            for day in DeliveryWeekday
        )
        return PriceQuote(recurrence=Recurrence.RECURRING, days=days)

    @staticmethod
    def quote(plan: "SubscriptionPlan") -> PriceQuote:
        """Breakdown of what the plan would cost right now."""
        if plan.start_date is None or plan.recurrence is None:
            raise PlanStateError("Choose a recurrence and dates before pricing the plan")

        if plan.recurrence is Recurrence.ONE_TIME:
            day = delivery_calendar.weekday_of(plan.start_date)
            return PriceQuote(
                recurrence=Recurrence.ONE_TIME,
                days=(
                    DayQuote(
                        weekday=day,
                        subtotal=PricingService.one_time_total(day, plan.selections),
                        occurrences=1,
                    ),
                ),
            )

        return PricingService._recurring_quote(plan.start_date, plan.end_date, plan.selections)

    @staticmethod
    def plan_total(plan: "SubscriptionPlan") -> Decimal:
        total = PricingService.quote(plan).total
        logger.debug("Plan total %s (%s)", total, plan.recurrence.value)
        return total

    @staticmethod
    def to_minor_units(amount: Decimal) -> int:
        """Integer amount in the currency's smallest unit, e.g. paise."""
        if amount < 0:
            raise ValueError("Amount must not be negative")
        return int((amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())
