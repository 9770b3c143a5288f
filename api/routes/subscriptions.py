"""
Subscription box builder routes.

A session holds one plan while the customer walks through the steps:
recurrence, dates, selections, address, payment. Every step answers with
the full plan so the client can render the price as it changes.
"""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from adapters.payment_gateway import PaymentGateway
from api.dependencies import get_db, get_payment_gateway, get_plan_sessions
from api.responses import PLAN_ERROR_RESPONSES
from app.config import settings
from app.exceptions import NotFoundError, OrderNotRecordedError, ServiceValidationError
from domain.entities import DeliveryAddress, Product
from domain.enums import DeliveryWeekday, PaymentStatus
from domain.mappers import OrderMapper, PlanMapper
from domain.schemas.order_schemas import CheckoutResponse
from domain.schemas.subscription_schemas import (
    AddressRequest,
    CopyDayRequest,
    DatesRequest,
    PlanResponse,
    RecurrenceRequest,
)
from repositories.order_repository import OrderRepository
from repositories.session_repository import PlanSession, PlanSessionRepository
from services.catalog_service import CatalogService
from services.checkout_service import CheckoutService
from services.subscription_service import SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])
logger = logging.getLogger("selkies.api.subscriptions")


def _render(session: PlanSession) -> PlanResponse:
    return PlanMapper.to_response(session, settings.currency)


def _product(session: PlanSession, product_id: int) -> Product:
    product = session.products.get(product_id)
    if product is None:
        raise NotFoundError(
            f"Product {product_id} is not offered in this box",
            details={"product_id": product_id},
        )
    return product


@router.post("", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
def open_plan(
    db: Session = Depends(get_db),
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    """
    Start configuring a new plan.

    The box categories are read from the catalog once, here. If the catalog
    cannot be reached the session still opens, with nothing to select.
    """
    products = CatalogService.fetch_products(db, settings.subscription_categories)
    session = sessions.open(SubscriptionService.new_plan(), CatalogService.index(products))
    return _render(session)


@router.get("/{session_id}", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def get_plan(
    session_id: UUID,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    return _render(sessions.get(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, responses=PLAN_ERROR_RESPONSES)
def abandon_plan(
    session_id: UUID,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    """Drop the plan. Not allowed while a checkout holds it."""
    with sessions.lock(session_id):
        sessions.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{session_id}/recurrence", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def choose_recurrence(
    session_id: UUID,
    body: RecurrenceRequest,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.choose_recurrence(session.plan, body.mode)
        return _render(sessions.save_plan(session_id, plan))


@router.put("/{session_id}/dates", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def choose_dates(
    session_id: UUID,
    body: DatesRequest,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    """
    Set the start date, and the end date for recurring plans.

    Without end_date a recurring plan keeps the end date it already has when
    that date is not before the new start; otherwise it gets the default
    end date, one month after start.
    """
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.choose_dates(
            session.plan, body.start_date, body.end_date, today=date.today()
        )
        return _render(sessions.save_plan(session_id, plan))


@router.post(
    "/{session_id}/days/{day}/items/{product_id}/increment",
    response_model=PlanResponse,
    responses=PLAN_ERROR_RESPONSES,
)
def increment_item(
    session_id: UUID,
    day: DeliveryWeekday,
    product_id: int,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    with sessions.lock(session_id) as session:
        product = _product(session, product_id)
        if not product.is_available:
            raise ServiceValidationError(
                f"{product.name} is currently unavailable",
                details={"product_id": product_id},
            )
        plan = SubscriptionService.increment(session.plan, day, product)
        return _render(sessions.save_plan(session_id, plan))


@router.post(
    "/{session_id}/days/{day}/items/{product_id}/decrement",
    response_model=PlanResponse,
    responses=PLAN_ERROR_RESPONSES,
)
def decrement_item(
    session_id: UUID,
    day: DeliveryWeekday,
    product_id: int,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.decrement(session.plan, day, _product(session, product_id))
        return _render(sessions.save_plan(session_id, plan))


@router.post("/{session_id}/days/{day}/copy", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def copy_day(
    session_id: UUID,
    day: DeliveryWeekday,
    body: CopyDayRequest,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    """Replace the selections of {day} with a copy of body.from_day."""
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.copy_day(session.plan, body.from_day, day)
        return _render(sessions.save_plan(session_id, plan))


@router.post("/{session_id}/selections/confirm", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def confirm_selections(
    session_id: UUID,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.confirm_selections(session.plan)
        return _render(sessions.save_plan(session_id, plan))


@router.put("/{session_id}/address", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def enter_address(
    session_id: UUID,
    body: AddressRequest,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    address = DeliveryAddress(**body.model_dump())
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.enter_address(session.plan, address)
        return _render(sessions.save_plan(session_id, plan))


@router.post("/{session_id}/payment", response_model=PlanResponse, responses=PLAN_ERROR_RESPONSES)
def prepare_payment(
    session_id: UUID,
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
):
    """Freeze the total; the plan can now be checked out."""
    with sessions.lock(session_id) as session:
        plan = SubscriptionService.prepare_payment(session.plan)
        return _render(sessions.save_plan(session_id, plan))


@router.post(
    "/{session_id}/checkout",
    response_model=CheckoutResponse,
    responses={
        **PLAN_ERROR_RESPONSES,
        402: {"description": "Payment failed"},
        500: {"description": "Paid, but the order was not recorded"},
    },
)
def checkout(
    session_id: UUID,
    db: Session = Depends(get_db),
    sessions: PlanSessionRepository = Depends(get_plan_sessions),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Collect payment and record the order.

    The session is claimed for the whole payment: a second checkout or an
    edit arriving meanwhile gets 409. On success the session is closed. A
    cancelled or failed payment releases the claim so the customer can try
    again. If the order cannot be stored after payment, the claim is kept
    and the session remembers the payment reference.
    """
    session = sessions.claim_checkout(session_id)
    try:
        result = CheckoutService.checkout(db, session.plan, gateway=gateway, currency=settings.currency)
    except OrderNotRecordedError as e:
        sessions.mark_payment_captured(session_id, e.details["payment_reference"])
        raise
    except Exception:
        sessions.release_checkout(session_id)
        raise

    if result.status is PaymentStatus.CANCELLED:
        sessions.release_checkout(session_id)
        return CheckoutResponse(
            status=result.status,
            message="Payment was cancelled. Your box is saved, you can try again.",
        )

    sessions.discard(session_id)
    order = OrderRepository(db).get_with_lines(result.order.order_id)
    return CheckoutResponse(
        status=result.status,
        message="Thank you! Your order is confirmed.",
        payment_reference=result.reference,
        order=OrderMapper.to_response(order),
    )
