from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID
from decimal import Decimal

from domain.enums import DeliveryWeekday, PaymentStatus, Recurrence


class OrderLineResponse(BaseModel):
    weekday: DeliveryWeekday
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Persisted, paid subscription order"""

    order_id: UUID
    recurrence: Recurrence
    start_date: date
    end_date: Optional[date] = None
    total: Decimal
    currency: str
    payment_reference: str
    recipient: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    postal_code: str
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    lines: List[OrderLineResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class CheckoutResponse(BaseModel):
    status: PaymentStatus
    message: str
    payment_reference: Optional[str] = None
    order: Optional[OrderResponse] = None
