"""
Plan domain mappers.
Turns an in-progress SubscriptionPlan into the DTO the box builder renders.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from domain.enums import PlanStage
from domain.schemas.subscription_schemas import (
    AddressRequest,
    DayQuoteResponse,
    PlanResponse,
    QuoteResponse,
    SelectionLineResponse,
)
from services.pricing_service import CENT, PricingService, PriceQuote

if TYPE_CHECKING:
    from repositories.session_repository import PlanSession


def money(amount: Optional[Decimal]) -> Optional[Decimal]:
    return None if amount is None else amount.quantize(CENT)


class PlanMapper:
    """Mapper for plan transformations."""

    @staticmethod
    def quote_to_response(quote: PriceQuote, currency: str) -> QuoteResponse:
        return QuoteResponse(
            recurrence=quote.recurrence,
            days=[
                DayQuoteResponse(
                    weekday=d.weekday,
                    subtotal=money(d.subtotal),
                    occurrences=d.occurrences,
                    total=money(d.total),
                )
                for d in quote.days
            ],
            deliveries=quote.deliveries,
            total=money(quote.total),
            amount_minor=PricingService.to_minor_units(quote.total),
            currency=currency,
        )

    @staticmethod
    def to_response(session: "PlanSession", currency: str) -> PlanResponse:
        """
        Convert a PlanSession to PlanResponse.

        The quote is included from the moment dates are chosen so the
        customer sees the price while still picking items.
        """
        plan = session.plan
        selections = {
            day: [
                SelectionLineResponse(
                    product_id=entry.product.id,
                    name=entry.product.name,
                    unit_price=money(entry.product.price),
                    quantity=entry.quantity,
                    line_total=money(entry.line_total),
                )
                for entry in entries
            ]
            for day, entries in plan.selections.snapshot().items()
        }

        quote = None
        if plan.stage.at_least(PlanStage.DATES_CHOSEN):
            quote = PlanMapper.quote_to_response(PricingService.quote(plan), currency)

        address = AddressRequest.model_validate(plan.address) if plan.address else None

        return PlanResponse(
            session_id=session.session_id,
            stage=plan.stage,
            recurrence=plan.recurrence,
            start_date=plan.start_date,
            end_date=plan.end_date,
            delivery_dates=dict(plan.delivery_dates),
            relevant_days=list(plan.relevant_days) if plan.start_date else [],
            selections=selections,
            total_items=plan.total_items,
            address=address,
            quote=quote,
            total=money(plan.total),
        )
