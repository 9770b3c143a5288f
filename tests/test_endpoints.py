"""
API endpoint tests.

Drives the box builder through HTTP the way the storefront does: open a
session, choose recurrence and dates, pick items, enter an address, pay.
Uses the in-memory catalog from test_fixtures and the fake payment gateway.
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from adapters.fake_payment_gateway import FakePaymentGateway
from adapters.payment_gateway import ChargeResult, set_gateway
from api.dependencies import get_plan_sessions
from api.routes import subscriptions
from app.exceptions import CheckoutInProgressError
from domain.enums import DeliveryWeekday, PaymentStatus
from domain.models import SubscriptionOrder
from repositories.product_repository import ProductRepository
from test_fixtures import (
    SERVICEABLE_POSTAL_CODE,
    client,
    db_session,
    fake_gateway,
    seeded_catalog,
)


def next_weekday(day: DeliveryWeekday) -> date:
    """Next date strictly after today falling on the given weekday."""
    today = date.today()
    ahead = (day.iso_index - today.weekday()) % 7 or 7
    return today + timedelta(days=ahead)


ADDRESS = {
    "recipient": "Ananya Rao",
    "line1": "12 Church Street",
    "city": "Bengaluru",
    "postal_code": SERVICEABLE_POSTAL_CODE,
    "phone": "+91 98450 00000",
}


def open_session() -> str:
    response = client.post("/subscriptions")
    assert response.status_code == 201
    return response.json()["session_id"]


def session_with_dates(mode="recurring", start=None, end=None) -> str:
    session_id = open_session()
    assert client.put(f"/subscriptions/{session_id}/recurrence", json={"mode": mode}).status_code == 200

    start = start or next_weekday(DeliveryWeekday.TUESDAY)
    body = {"start_date": start.isoformat()}
    if end:
        body["end_date"] = end.isoformat()
    response = client.put(f"/subscriptions/{session_id}/dates", json=body)
    assert response.status_code == 200, response.text
    return session_id


def increment(session_id, day, product_id):
    return client.post(f"/subscriptions/{session_id}/days/{day}/items/{product_id}/increment")


def ready_session(mode="one-time") -> str:
    session_id = session_with_dates(mode)
    assert increment(session_id, "Tuesday", 1).status_code == 200
    assert client.post(f"/subscriptions/{session_id}/selections/confirm").status_code == 200
    assert client.put(f"/subscriptions/{session_id}/address", json=ADDRESS).status_code == 200
    response = client.post(f"/subscriptions/{session_id}/payment")
    assert response.status_code == 200
    return session_id


# =============================================================================
# HEALTH, CATALOG, CALENDAR
# =============================================================================


def test_health_check():
    response = client.get("/health-check")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "Selkies"


def test_health_check_database(db_session):
    assert client.get("/health-check/db").json() == {"database": "ok"}


def test_list_products_grouped(seeded_catalog):
    response = client.get("/products")
    assert response.status_code == 200
    body = response.json()

    assert body["categories"] == ["Artisanal Breads", "Savouries"]
    breads, savouries = body["groups"]
    assert [p["name"] for p in breads["products"]] == ["Focaccia", "Rye Loaf", "Sourdough Loaf"]
    assert [p["name"] for p in savouries["products"]] == ["Chicken Puff"]
    assert Decimal(breads["products"][0]["price"]) == Decimal("150")


def test_list_products_by_category(seeded_catalog):
    body = client.get("/products", params={"category": "Cakes"}).json()
    assert body["categories"] == ["Cakes"]
    assert [p["id"] for p in body["groups"][0]["products"]] == [5]


def test_list_products_catalog_unavailable(db_session):
    with patch.object(
        ProductRepository,
        "list_by_categories",
        side_effect=OperationalError("SELECT", {}, Exception("connection refused")),
    ):
        response = client.get("/products")

    assert response.status_code == 200
    assert all(group["products"] == [] for group in response.json()["groups"])


def test_menu_veg_with_low_stock(seeded_catalog):
    response = client.get("/menu", params={"diet": "veg"})
    assert response.status_code == 200
    body = response.json()

    assert body["diet_type"] == "veg"
    assert body["categories"] == ["Artisanal Breads", "Cakes", "Savouries"]
    items = {item["name"]: item for group in body["groups"] for item in group["items"]}
    assert set(items) == {"Focaccia", "Rye Loaf", "Sourdough Loaf"}
    assert items["Focaccia"]["low_stock"] is True
    assert items["Sourdough Loaf"]["low_stock"] is False


def test_menu_invalid_diet():
    response = client.get("/menu", params={"diet": "vegan"})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_start_dates():
    response = client.get("/delivery/start-dates", params={"horizon_days": 7})
    assert response.status_code == 200
    body = response.json()
    assert body["horizon_days"] == 7
    dates = [date.fromisoformat(d) for d in body["dates"]]
    assert len(dates) == 3
    assert {d.weekday() for d in dates} == {1, 3, 5}


def test_start_dates_default_horizon():
    body = client.get("/delivery/start-dates").json()
    assert body["horizon_days"] == 30


# =============================================================================
# PLAN CONFIGURATION
# =============================================================================


def test_open_plan(seeded_catalog):
    response = client.post("/subscriptions")
    assert response.status_code == 201
    body = response.json()
    assert body["stage"] == "unconfigured"
    assert body["quote"] is None
    assert body["total_items"] == 0


def test_get_unknown_plan():
    response = client.get("/subscriptions/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_abandon_plan(seeded_catalog):
    session_id = open_session()
    assert client.delete(f"/subscriptions/{session_id}").status_code == 204
    assert client.get(f"/subscriptions/{session_id}").status_code == 404
    assert client.delete(f"/subscriptions/{session_id}").status_code == 404


def test_dates_before_recurrence_conflict(seeded_catalog):
    session_id = open_session()
    response = client.put(
        f"/subscriptions/{session_id}/dates",
        json={"start_date": next_weekday(DeliveryWeekday.TUESDAY).isoformat()},
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_PLAN_STATE"


def test_wednesday_start_rejected(seeded_catalog):
    session_id = open_session()
    client.put(f"/subscriptions/{session_id}/recurrence", json={"mode": "one-time"})
    wednesday = next_weekday(DeliveryWeekday.TUESDAY) + timedelta(days=1)

    response = client.put(
        f"/subscriptions/{session_id}/dates", json={"start_date": wednesday.isoformat()}
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_DELIVERY_DATE"

    plan = client.get(f"/subscriptions/{session_id}").json()
    assert plan["stage"] == "recurrence_chosen"
    assert plan["start_date"] is None


def test_past_start_rejected(seeded_catalog):
    session_id = open_session()
    client.put(f"/subscriptions/{session_id}/recurrence", json={"mode": "one-time"})
    past = next_weekday(DeliveryWeekday.TUESDAY) - timedelta(days=14)

    response = client.put(f"/subscriptions/{session_id}/dates", json={"start_date": past.isoformat()})
    assert response.status_code == 400


def test_recurring_dates_default_end(seeded_catalog):
    session_id = session_with_dates("recurring")
    plan = client.get(f"/subscriptions/{session_id}").json()

    start = date.fromisoformat(plan["start_date"])
    end = date.fromisoformat(plan["end_date"])
    assert end > start + timedelta(days=27)
    assert end.weekday() in (1, 3, 5)
    assert set(plan["delivery_dates"]) == {"Tuesday", "Thursday", "Saturday"}
    assert plan["relevant_days"] == ["Tuesday", "Thursday", "Saturday"]
    assert plan["quote"]["total"] == "0.00"


def test_selection_updates_live_quote(seeded_catalog):
    start = next_weekday(DeliveryWeekday.TUESDAY)
    session_id = session_with_dates("recurring", start, start + timedelta(days=14))

    body = increment(session_id, "Tuesday", 1).json()
    # three Tuesdays in range
    assert body["quote"]["total"] == "300.00"
    assert body["selections"]["Tuesday"][0]["quantity"] == 1

    body = client.post(
        f"/subscriptions/{session_id}/days/Thursday/copy", json={"from_day": "Tuesday"}
    ).json()
    # plus two Thursdays
    assert body["quote"]["total"] == "500.00"
    assert body["quote"]["amount_minor"] == 50000
    assert body["quote"]["currency"] == "INR"
    assert body["total_items"] == 2

    body = client.post(f"/subscriptions/{session_id}/days/Thursday/items/1/decrement").json()
    assert body["selections"]["Thursday"] == []
    assert body["quote"]["total"] == "300.00"


def test_one_time_relevant_day(seeded_catalog):
    start = next_weekday(DeliveryWeekday.SATURDAY)
    session_id = session_with_dates("one-time", start)
    increment(session_id, "Tuesday", 1)
    body = increment(session_id, "Saturday", 2).json()

    assert body["relevant_days"] == ["Saturday"]
    assert body["quote"]["total"] == "150.00"
    assert body["total_items"] == 1


def test_increment_unknown_product(seeded_catalog):
    session_id = session_with_dates()
    response = increment(session_id, "Tuesday", 99)
    assert response.status_code == 404


def test_increment_unavailable_product(seeded_catalog):
    session_id = session_with_dates()
    response = increment(session_id, "Tuesday", 4)
    assert response.status_code == 400
    assert "unavailable" in response.json()["error"]["message"]


def test_increment_product_outside_box_categories(seeded_catalog):
    session_id = session_with_dates()
    # cakes are on the menu but not in the box
    assert increment(session_id, "Tuesday", 5).status_code == 404


def test_increment_invalid_day(seeded_catalog):
    session_id = session_with_dates()
    assert increment(session_id, "Wednesday", 1).status_code == 422


def test_confirm_empty_selection(seeded_catalog):
    session_id = session_with_dates()
    response = client.post(f"/subscriptions/{session_id}/selections/confirm")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EMPTY_SELECTION"


def test_address_before_confirm_conflict(seeded_catalog):
    session_id = session_with_dates()
    increment(session_id, "Tuesday", 1)
    response = client.put(f"/subscriptions/{session_id}/address", json=ADDRESS)
    assert response.status_code == 409


def test_unserviceable_address(seeded_catalog):
    session_id = session_with_dates()
    increment(session_id, "Tuesday", 1)
    client.post(f"/subscriptions/{session_id}/selections/confirm")

    response = client.put(
        f"/subscriptions/{session_id}/address", json={**ADDRESS, "postal_code": "110001"}
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNSERVICEABLE_ADDRESS"
    assert client.get(f"/subscriptions/{session_id}").json()["stage"] == "products_selected"


def test_address_validation(seeded_catalog):
    session_id = session_with_dates()
    response = client.put(f"/subscriptions/{session_id}/address", json={"recipient": "A"})
    assert response.status_code == 422


def test_prepare_payment_sets_total(seeded_catalog):
    session_id = ready_session("one-time")
    body = client.get(f"/subscriptions/{session_id}").json()
    assert body["stage"] == "ready_for_payment"
    assert body["total"] == "100.00"
    assert body["address"]["postal_code"] == SERVICEABLE_POSTAL_CODE


def test_editing_after_payment_prepared_rewinds(seeded_catalog):
    session_id = ready_session()
    body = increment(session_id, "Tuesday", 1).json()
    assert body["stage"] == "dates_chosen"
    assert body["total"] is None
    assert body["address"] is not None


def test_switching_recurrence_resets(seeded_catalog):
    session_id = ready_session("one-time")
    body = client.put(f"/subscriptions/{session_id}/recurrence", json={"mode": "recurring"}).json()
    assert body["stage"] == "recurrence_chosen"
    assert body["start_date"] is None
    assert body["total_items"] == 0


# =============================================================================
# CHECKOUT AND ORDERS
# =============================================================================


def test_checkout_success(seeded_catalog, fake_gateway):
    session_id = ready_session("recurring")

    response = client.post(f"/subscriptions/{session_id}/checkout")
    assert response.status_code == 200, response.text
    body = response.json()

    assert body["status"] == "succeeded"
    assert body["payment_reference"].startswith("fake_pay_")
    order = body["order"]
    assert order["recurrence"] == "recurring"
    assert order["postal_code"] == SERVICEABLE_POSTAL_CODE
    assert [line["weekday"] for line in order["lines"]] == ["Tuesday"]
    assert seeded_catalog.query(SubscriptionOrder).count() == 1

    # the session is closed once paid
    assert client.get(f"/subscriptions/{session_id}").status_code == 404

    fetched = client.get(f"/orders/{order['order_id']}")
    assert fetched.status_code == 200
    assert fetched.json()["payment_reference"] == body["payment_reference"]


def test_checkout_cancelled_keeps_plan(seeded_catalog, fake_gateway):
    fake_gateway.configure(PaymentStatus.CANCELLED)
    session_id = ready_session()

    response = client.post(f"/subscriptions/{session_id}/checkout")
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["order"] is None
    assert seeded_catalog.query(SubscriptionOrder).count() == 0
    assert client.get(f"/subscriptions/{session_id}").json()["stage"] == "ready_for_payment"


def test_checkout_failed(seeded_catalog, fake_gateway):
    fake_gateway.configure(PaymentStatus.FAILED, "Card declined")
    session_id = ready_session()

    response = client.post(f"/subscriptions/{session_id}/checkout")
    assert response.status_code == 402
    assert response.json()["error"]["code"] == "PAYMENT_FAILED"
    assert seeded_catalog.query(SubscriptionOrder).count() == 0

    fake_gateway.configure(PaymentStatus.SUCCEEDED)
    assert client.post(f"/subscriptions/{session_id}/checkout").json()["status"] == "succeeded"


class _ReenteringGateway(FakePaymentGateway):
    """Starts a second checkout of the same session while collecting."""

    def __init__(self, db, session_id):
        super().__init__()
        self.db = db
        self.session_id = session_id
        self.nested_errors = []

    def collect(self, amount_minor: int, currency: str, description: str, on_success: Callable[[str], None]) -> ChargeResult:
        try:
            subscriptions.checkout(
                session_id=self.session_id,
                db=self.db,
                sessions=get_plan_sessions(),
                gateway=self,
            )
        except CheckoutInProgressError as e:
            self.nested_errors.append(e)
        return super().collect(amount_minor, currency, description, on_success)


def test_checkout_while_checkout_in_progress_charges_once(seeded_catalog, fake_gateway):
    session_id = ready_session()
    gateway = _ReenteringGateway(seeded_catalog, uuid.UUID(session_id))
    set_gateway(gateway)

    response = client.post(f"/subscriptions/{session_id}/checkout")

    assert response.status_code == 200, response.text
    assert len(gateway.nested_errors) == 1
    assert len(gateway.calls) == 1
    assert seeded_catalog.query(SubscriptionOrder).count() == 1


def test_edit_during_checkout_conflicts(seeded_catalog, fake_gateway):
    session_id = ready_session()
    sessions = get_plan_sessions()
    sessions.claim_checkout(uuid.UUID(session_id))

    response = increment(session_id, "Tuesday", 1)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CHECKOUT_IN_PROGRESS"
    assert client.delete(f"/subscriptions/{session_id}").status_code == 409
    assert client.post(f"/subscriptions/{session_id}/checkout").status_code == 409
    assert fake_gateway.calls == []

    sessions.release_checkout(uuid.UUID(session_id))
    assert client.post(f"/subscriptions/{session_id}/checkout").json()["status"] == "succeeded"


class _FixedReferenceGateway(FakePaymentGateway):
    def collect(self, amount_minor: int, currency: str, description: str, on_success: Callable[[str], None]) -> ChargeResult:
        self.calls.append({"method": "collect", "amount_minor": amount_minor})
        on_success("ref_reused")
        return ChargeResult(status=PaymentStatus.SUCCEEDED, reference="ref_reused")


def test_checkout_paid_but_not_recorded(seeded_catalog, fake_gateway):
    gateway = _FixedReferenceGateway()
    set_gateway(gateway)
    assert client.post(f"/subscriptions/{ready_session()}/checkout").status_code == 200

    session_id = ready_session()
    response = client.post(f"/subscriptions/{session_id}/checkout")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "ORDER_NOT_RECORDED"
    assert error["details"]["payment_reference"] == "ref_reused"
    assert seeded_catalog.query(SubscriptionOrder).count() == 1

    # the customer has paid; the plan can be viewed but not paid again
    assert client.get(f"/subscriptions/{session_id}").status_code == 200
    retry = client.post(f"/subscriptions/{session_id}/checkout")
    assert retry.status_code == 409
    assert retry.json()["error"]["details"]["payment_reference"] == "ref_reused"
    assert len(gateway.calls) == 2


def test_checkout_not_ready(seeded_catalog, fake_gateway):
    session_id = session_with_dates()
    response = client.post(f"/subscriptions/{session_id}/checkout")
    assert response.status_code == 409
    assert fake_gateway.calls == []


def test_get_unknown_order(db_session):
    response = client.get("/orders/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


def test_serviceable_postal_code_is_configurable(seeded_catalog, monkeypatch):
    from app.config import settings

    monkeypatch.setattr(settings, "serviceable_postal_code", "400001")
    session_id = session_with_dates()
    increment(session_id, "Tuesday", 1)
    client.post(f"/subscriptions/{session_id}/selections/confirm")

    rejected = client.put(f"/subscriptions/{session_id}/address", json=ADDRESS)
    assert rejected.status_code == 400

    accepted = client.put(
        f"/subscriptions/{session_id}/address", json={**ADDRESS, "postal_code": "400001"}
    )
    assert accepted.status_code == 200
    assert accepted.json()["stage"] == "address_entered"
