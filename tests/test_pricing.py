"""
PricingService tests: one-time and recurring totals, quotes and minor units.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.exceptions import PlanStateError
from domain.enums import DeliveryWeekday, Recurrence
from services.pricing_service import PricingService
from services.selection_store import SelectionStore
from services.subscription_service import SubscriptionService
from test_fixtures import TUESDAY, make_product, plan_with_dates

TUE = DeliveryWeekday.TUESDAY
THU = DeliveryWeekday.THURSDAY
SAT = DeliveryWeekday.SATURDAY


def test_one_time_total_bills_selected_day_only():
    loaf = make_product(1, "Sourdough Loaf", "100")
    puff = make_product(3, "Chicken Puff", "60")
    store = SelectionStore().increment(TUE, loaf).increment(THU, puff)

    assert PricingService.one_time_total(TUE, store) == Decimal("100")
    assert PricingService.one_time_total(THU, store) == Decimal("60")
    assert PricingService.one_time_total(SAT, store) == Decimal("0")


def test_recurring_total_counts_occurrences():
    # Tuesdays 2, 9 and 16 January 2024
    store = SelectionStore().increment(TUE, make_product(price="50"))
    total = PricingService.recurring_total(TUESDAY, date(2024, 1, 16), store)
    assert total == Decimal("150")


def test_recurring_total_across_all_days():
    loaf = make_product(1, "Sourdough Loaf", "100")
    puff = make_product(3, "Chicken Puff", "60")
    store = (
        SelectionStore()
        .increment(TUE, loaf)
        .increment(THU, puff)
        .increment(THU, puff)
        .increment(SAT, loaf)
    )
    # 3 Tuesdays, 2 Thursdays, 2 Saturdays
    total = PricingService.recurring_total(TUESDAY, date(2024, 1, 16), store)
    assert total == Decimal("100") * 3 + Decimal("120") * 2 + Decimal("100") * 2


def test_recurring_total_empty_selection_is_zero():
    assert PricingService.recurring_total(TUESDAY, date(2024, 2, 3), SelectionStore()) == 0


def test_fractional_prices_stay_exact():
    store = SelectionStore()
    item = make_product(7, "Cinnamon Roll", "33.33")
    for _ in range(3):
        store = store.increment(TUE, item)
    assert PricingService.one_time_total(TUE, store) == Decimal("99.99")


def test_quote_one_time_uses_start_weekday():
    plan = plan_with_dates(Recurrence.ONE_TIME, TUESDAY)
    plan = SubscriptionService.increment(plan, TUE, make_product(price="100"))
    plan = SubscriptionService.increment(plan, SAT, make_product(2, "Focaccia", "150"))

    quote = PricingService.quote(plan)
    assert quote.recurrence is Recurrence.ONE_TIME
    assert [d.weekday for d in quote.days] == [TUE]
    assert quote.total == Decimal("100")
    assert quote.deliveries == 1


def test_quote_recurring_breakdown():
    plan = plan_with_dates(Recurrence.RECURRING, TUESDAY, date(2024, 1, 16))
    plan = SubscriptionService.increment(plan, TUE, make_product(price="50"))

    quote = PricingService.quote(plan)
    by_day = {d.weekday: d for d in quote.days}
    assert by_day[TUE].occurrences == 3
    assert by_day[TUE].total == Decimal("150")
    assert by_day[THU].subtotal == 0
    assert quote.total == Decimal("150")
    # days with nothing selected are not deliveries
    assert quote.deliveries == 3


def test_quote_requires_dates():
    plan = SubscriptionService.choose_recurrence(
        SubscriptionService.new_plan(), Recurrence.RECURRING
    )
    with pytest.raises(PlanStateError):
        PricingService.quote(plan)


@pytest.mark.parametrize(
    "amount,minor",
    [
        (Decimal("100"), 10000),
        (Decimal("99.99"), 9999),
        (Decimal("0.005"), 1),
        (Decimal("0"), 0),
    ],
)
def test_to_minor_units(amount, minor):
    assert PricingService.to_minor_units(amount) == minor


def test_to_minor_units_rejects_negative():
    with pytest.raises(ValueError):
        PricingService.to_minor_units(Decimal("-1"))


def test_one_time_two_items_at_fifty():
    item = make_product(price="50")
    store = SelectionStore().increment(TUE, item).increment(TUE, item)
    assert PricingService.one_time_total(TUE, store) == Decimal("100")
