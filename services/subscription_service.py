"""
Subscription plan configuration.

A plan moves through a fixed sequence of stages:

    unconfigured -> recurrence_chosen -> dates_chosen -> products_selected
        -> address_entered -> ready_for_payment

Any earlier step may be revisited; doing so drops the plan back to that
step and the later steps have to be driven again. Plans are immutable: every
transition returns a new SubscriptionPlan and a rejected transition leaves
the caller's plan exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from app.config import settings
from app.exceptions import EmptySelectionError, PlanStateError, UnserviceableAddressError
from domain.entities import DeliveryAddress, Product
from domain.enums import DeliveryWeekday, PlanStage, Recurrence
from services import delivery_calendar
from services.pricing_service import PricingService
from services.selection_store import SelectionStore

logger = logging.getLogger("selkies.subscriptions")


@dataclass(frozen=True)
class SubscriptionPlan:
    stage: PlanStage = PlanStage.UNCONFIGURED
    recurrence: Optional[Recurrence] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    delivery_dates: Mapping[DeliveryWeekday, date] = field(default_factory=dict)
    selections: SelectionStore = field(default_factory=SelectionStore)
    address: Optional[DeliveryAddress] = None
    total: Optional[Decimal] = None

    @property
    def relevant_days(self) -> Tuple[DeliveryWeekday, ...]:
        """Weekdays the plan actually delivers on."""
        if self.recurrence is Recurrence.ONE_TIME and self.start_date is not None:
            return (delivery_calendar.weekday_of(self.start_date),)
        return tuple(DeliveryWeekday)

    @property
    def total_items(self) -> int:
        return self.selections.items_on(self.relevant_days)


class SubscriptionService:
    """State transitions for a subscription plan."""

    @staticmethod
    def new_plan() -> SubscriptionPlan:
        return SubscriptionPlan()

    @staticmethod
    def _require(plan: SubscriptionPlan, stage: PlanStage, action: str) -> None:
        if not plan.stage.at_least(stage):
            raise PlanStateError(
                f"Cannot {action} while the plan is {plan.stage.value}",
                details={"stage": plan.stage.value, "required": stage.value},
            )

    @staticmethod
    def _rewind(plan: SubscriptionPlan, stage: PlanStage, **changes) -> SubscriptionPlan:
        """Apply changes and cap the plan at the given stage."""
        new_stage = stage if plan.stage.at_least(stage) else plan.stage
        return replace(plan, stage=new_stage, total=None, **changes)

    # ---------- step 1: recurrence ----------

    @staticmethod
    def choose_recurrence(plan: SubscriptionPlan, mode: Recurrence) -> SubscriptionPlan:
        """
        Pick one-time or recurring delivery.

        Switching mode once dates are set discards dates and selections: the
        set of weekdays that matter differs between the two modes.
        """
        mode = Recurrence(mode)
        if plan.recurrence is mode:
            return plan

        if plan.stage.at_least(PlanStage.DATES_CHOSEN):
            logger.info(
                "Recurrence changed %s -> %s, discarding dates and selections",
                plan.recurrence.value,
                mode.value,
            )
            return replace(
                plan,
                stage=PlanStage.RECURRENCE_CHOSEN,
                recurrence=mode,
                start_date=None,
                end_date=None,
                delivery_dates={},
                selections=plan.selections.clear(),
                total=None,
            )

        return replace(plan, stage=PlanStage.RECURRENCE_CHOSEN, recurrence=mode)

    # ---------- step 2: dates ----------

    @staticmethod
    def choose_dates(
        plan: SubscriptionPlan,
        start: date,
        end: Optional[date] = None,
        today: Optional[date] = None,
        lookahead_days: Optional[int] = None,
    ) -> SubscriptionPlan:
        """
        Set the start date (and the end date for recurring plans).

        A recurring plan without an explicit end keeps its current end date
        when that is not before start, and otherwise gets default_end_date(start).
        Selections are keyed by weekday so they survive a date change.
        """
        SubscriptionService._require(plan, PlanStage.RECURRENCE_CHOSEN, "choose dates")

        delivery_calendar.validate_start_date(start, today=today)

        if plan.recurrence is Recurrence.RECURRING:
            if end is None:
                if plan.end_date is not None and plan.end_date >= start:
                    end = plan.end_date
                else:
                    end = delivery_calendar.default_end_date(start)
            delivery_calendar.validate_end_date(start, end)
        else:
            if end is not None:
                logger.debug("Ignoring end date %s for a one-time plan", end)
            end = None

        lookahead = lookahead_days or settings.delivery_lookahead_days
        delivery_dates = delivery_calendar.first_occurrence_per_weekday(start, lookahead)

        logger.info(
            "Dates chosen: %s start=%s end=%s", plan.recurrence.value, start, end
        )
        return replace(
            plan,
            stage=PlanStage.DATES_CHOSEN,
            start_date=start,
            end_date=end,
            delivery_dates=delivery_dates,
            total=None,
        )

    # ---------- step 3: selections ----------

    @staticmethod
    def increment(plan: SubscriptionPlan, day: DeliveryWeekday, product: Product) -> SubscriptionPlan:
        SubscriptionService._require(plan, PlanStage.DATES_CHOSEN, "change selections")
        return SubscriptionService._rewind(
            plan, PlanStage.DATES_CHOSEN, selections=plan.selections.increment(day, product)
        )

    @staticmethod
    def decrement(plan: SubscriptionPlan, day: DeliveryWeekday, product: Product) -> SubscriptionPlan:
        SubscriptionService._require(plan, PlanStage.DATES_CHOSEN, "change selections")
        return SubscriptionService._rewind(
            plan, PlanStage.DATES_CHOSEN, selections=plan.selections.decrement(day, product)
        )

    @staticmethod
    def copy_day(
        plan: SubscriptionPlan, from_day: DeliveryWeekday, to_day: DeliveryWeekday
    ) -> SubscriptionPlan:
        SubscriptionService._require(plan, PlanStage.DATES_CHOSEN, "copy selections")
        return SubscriptionService._rewind(
            plan, PlanStage.DATES_CHOSEN, selections=plan.selections.copy(from_day, to_day)
        )

    @staticmethod
    def confirm_selections(plan: SubscriptionPlan) -> SubscriptionPlan:
        SubscriptionService._require(plan, PlanStage.DATES_CHOSEN, "confirm selections")
        if plan.total_items == 0:
            raise EmptySelectionError(
                details={"days": [d.value for d in plan.relevant_days]},
            )
        return replace(plan, stage=PlanStage.PRODUCTS_SELECTED, total=None)

    # ---------- step 4: address ----------

    @staticmethod
    def enter_address(
        plan: SubscriptionPlan,
        address: DeliveryAddress,
        serviceable_postal_code: Optional[str] = None,
    ) -> SubscriptionPlan:
        SubscriptionService._require(plan, PlanStage.PRODUCTS_SELECTED, "enter an address")

        allowed = serviceable_postal_code or settings.serviceable_postal_code
        postal_code = (address.postal_code or "").strip()
        if postal_code != allowed:
            logger.info("Rejected unserviceable postal code %s", postal_code)
            raise UnserviceableAddressError(
                f"Sorry, we only deliver to postal code {allowed} for now",
                details={"postal_code": postal_code},
            )

        address = replace(address, postal_code=postal_code)
        return replace(plan, stage=PlanStage.ADDRESS_ENTERED, address=address, total=None)

    # ---------- step 5: payment ----------

    @staticmethod
    def prepare_payment(plan: SubscriptionPlan) -> SubscriptionPlan:
        SubscriptionService._require(plan, PlanStage.ADDRESS_ENTERED, "prepare payment")
        total = PricingService.plan_total(plan)
        logger.info("Plan ready for payment: total=%s", total)
        return replace(plan, stage=PlanStage.READY_FOR_PAYMENT, total=total)
