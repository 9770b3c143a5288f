"""
Plain value objects shared by the ordering engine.

ORM rows live in domain.models; these are the immutable copies the engine
works with once a row has been read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from domain.enums import DeliveryWeekday, Recurrence


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    category: str
    price: Decimal
    description: Optional[str] = None
    subcategory: Optional[str] = None
    diet_type: Optional[str] = None
    is_available: bool = True
    stock_quantity: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.price, Decimal):
            # str() first so floats don't leak binary noise into the amount
            object.__setattr__(self, "price", Decimal(str(self.price)))
        if self.price < 0:
            raise ValueError(f"Product {self.id} has a negative price")


@dataclass(frozen=True)
class SelectionEntry:
    """A product picked for one delivery day. Quantity is always >= 1."""

    product: Product
    quantity: int

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("Quantity must be an integer")
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1; remove the entry instead")

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class DeliveryAddress:
    recipient: str
    line1: str
    city: str
    postal_code: str
    line2: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class OrderRecord:
    """Finalized order handed to persistence once payment has succeeded."""

    address: DeliveryAddress
    recurrence: Recurrence
    start_date: date
    end_date: Optional[date]
    selections: Mapping[DeliveryWeekday, Tuple[SelectionEntry, ...]]
    total: Decimal
    payment_reference: str
