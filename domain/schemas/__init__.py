"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.catalog_schemas import (
    ProductResponse,
    ProductGroup,
    CatalogResponse,
    MenuItemResponse,
    MenuGroup,
    MenuResponse,
    StartDatesResponse,
)
from domain.schemas.subscription_schemas import (
    RecurrenceRequest,
    DatesRequest,
    CopyDayRequest,
    AddressRequest,
    SelectionLineResponse,
    DayQuoteResponse,
    QuoteResponse,
    PlanResponse,
)
from domain.schemas.order_schemas import (
    OrderLineResponse,
    OrderResponse,
    CheckoutResponse,
)

__all__ = [
    # Catalog schemas
    "ProductResponse",
    "ProductGroup",
    "CatalogResponse",
    "MenuItemResponse",
    "MenuGroup",
    "MenuResponse",
    "StartDatesResponse",
    # Subscription schemas
    "RecurrenceRequest",
    "DatesRequest",
    "CopyDayRequest",
    "AddressRequest",
    "SelectionLineResponse",
    "DayQuoteResponse",
    "QuoteResponse",
    "PlanResponse",
    # Order schemas
    "OrderLineResponse",
    "OrderResponse",
    "CheckoutResponse",
]
