"""Checkout service - hands a priced plan to the payment gateway and records the order"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adapters.payment_gateway import PaymentGateway, get_gateway
from app.config import settings
from app.exceptions import OrderNotRecordedError, PaymentFailedError, PlanStateError
from domain.entities import OrderRecord
from domain.enums import PaymentStatus, PlanStage, Recurrence
from domain.mappers.order_mapper import OrderMapper
from domain.models import SubscriptionOrder
from repositories.order_repository import OrderRepository
from services.pricing_service import PricingService
from services.subscription_service import SubscriptionPlan

logger = logging.getLogger("selkies.checkout")


@dataclass(frozen=True)
class CheckoutResult:
    status: PaymentStatus
    reference: Optional[str] = None
    order: Optional[SubscriptionOrder] = None


class CheckoutService:
    """Payment handoff and order persistence."""

    @staticmethod
    def describe(plan: SubscriptionPlan) -> str:
        """Payment description shown to the customer by the gateway."""
        if plan.recurrence is Recurrence.RECURRING:
            return (
                f"Selkie's recurring box - {plan.start_date.isoformat()} "
                f"to {plan.end_date.isoformat()}"
            )
        return f"Selkie's one-time box - delivery {plan.start_date.isoformat()}"

    @staticmethod
    def build_record(plan: SubscriptionPlan, payment_reference: str) -> OrderRecord:
        snapshot = plan.selections.snapshot()
        # only the days the plan delivers on are part of the order
        selections = {day: snapshot[day] for day in plan.relevant_days}
        return OrderRecord(
            address=plan.address,
            recurrence=plan.recurrence,
            start_date=plan.start_date,
            end_date=plan.end_date,
            selections=selections,
            total=plan.total,
            payment_reference=payment_reference,
        )

    @staticmethod
    def checkout(
        db: Session,
        plan: SubscriptionPlan,
        gateway: Optional[PaymentGateway] = None,
        currency: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Collect payment for a plan that is ready for payment.

        The order is persisted exactly once, from the gateway's success
        callback; repeated callbacks are ignored. A cancelled payment returns
        quietly; a failed one raises PaymentFailedError. In both cases nothing
        is stored and the plan can be retried as is.

        If payment succeeds but the order cannot be stored, the transaction is
        rolled back and OrderNotRecordedError carries the payment reference.
        The caller must not retry the payment.
        """
        if plan.stage is not PlanStage.READY_FOR_PAYMENT or plan.total is None:
            raise PlanStateError(
                "Plan must be ready for payment before checkout",
                details={"stage": plan.stage.value},
            )

        gateway = gateway or get_gateway()
        currency = currency or settings.currency
        amount_minor = PricingService.to_minor_units(plan.total)
        persisted: List[SubscriptionOrder] = []
        unrecorded: List[OrderNotRecordedError] = []

        def on_success(reference: str) -> None:
            if persisted or unrecorded:
                logger.warning("Ignoring repeated success callback for payment %s", reference)
                return
            record = CheckoutService.build_record(plan, reference)
            try:
                order = OrderRepository(db).create(OrderMapper.to_model(record, currency))
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Payment %s captured but the order was not recorded: %s", reference, e)
                error = OrderNotRecordedError(
                    details={"payment_reference": reference, "amount_minor": amount_minor},
                )
                unrecorded.append(error)
                raise error from e
            persisted.append(order)
            logger.info("Order %s recorded for payment %s", order.order_id, reference)

        logger.info("Collecting %d %s minor units", amount_minor, currency)
        result = gateway.collect(amount_minor, currency, CheckoutService.describe(plan), on_success)

        # the gateway may have swallowed the callback's error
        if unrecorded:
            raise unrecorded[0]

        if result.status is PaymentStatus.CANCELLED:
            logger.info("Payment cancelled by customer; plan kept for retry")
            return CheckoutResult(status=PaymentStatus.CANCELLED)

        if result.status is PaymentStatus.FAILED:
            logger.warning("Payment failed: %s", result.failure_reason)
            raise PaymentFailedError(
                f"Payment failed: {result.failure_reason or 'unknown reason'}",
                details={"amount_minor": amount_minor, "currency": currency},
            )

        if not persisted:
            logger.warning("Gateway reported success without calling back; recording order")
            on_success(result.reference)

        return CheckoutResult(
            status=PaymentStatus.SUCCEEDED, reference=result.reference, order=persisted[0]
        )
