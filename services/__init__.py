"""Services package - Business logic layer"""

from services.selection_store import SelectionStore
from services.pricing_service import PricingService, PriceQuote, DayQuote
from services.subscription_service import SubscriptionPlan, SubscriptionService
from services.catalog_service import CatalogService
from services.checkout_service import CheckoutService, CheckoutResult

# Note: delivery_calendar contains plain functions, not a class

__all__ = [
    "SelectionStore",
    "PricingService",
    "PriceQuote",
    "DayQuote",
    "SubscriptionPlan",
    "SubscriptionService",
    "CatalogService",
    "CheckoutService",
    "CheckoutResult",
]
