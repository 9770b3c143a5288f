from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.enums import DeliveryWeekday, PlanStage, Recurrence


# ---------- requests ----------


class RecurrenceRequest(BaseModel):
    mode: Recurrence


class DatesRequest(BaseModel):
    start_date: date
    end_date: Optional[date] = Field(
        None, description="Recurring plans only; defaults to one month after start"
    )


class CopyDayRequest(BaseModel):
    from_day: DeliveryWeekday


class AddressRequest(BaseModel):
    """Delivery address; only the serviceable postal code is accepted"""

    recipient: str = Field(..., min_length=1, max_length=120)
    line1: str = Field(..., min_length=1, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=80)
    postal_code: str = Field(..., min_length=3, max_length=12)
    phone: Optional[str] = Field(None, max_length=20)

    model_config = {"from_attributes": True}


# ---------- responses ----------


class SelectionLineResponse(BaseModel):
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class DayQuoteResponse(BaseModel):
    weekday: DeliveryWeekday
    subtotal: Decimal
    occurrences: int
    total: Decimal


class QuoteResponse(BaseModel):
    recurrence: Recurrence
    days: List[DayQuoteResponse]
    deliveries: int
    total: Decimal
    amount_minor: int = Field(..., description="Total in the currency's smallest unit")
    currency: str


class PlanResponse(BaseModel):
    """Current state of a plan being configured"""

    session_id: UUID
    stage: PlanStage
    recurrence: Optional[Recurrence] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    delivery_dates: Dict[DeliveryWeekday, date] = Field(default_factory=dict)
    relevant_days: List[DeliveryWeekday] = Field(default_factory=list)
    selections: Dict[DeliveryWeekday, List[SelectionLineResponse]] = Field(default_factory=dict)
    total_items: int = 0
    address: Optional[AddressRequest] = None
    quote: Optional[QuoteResponse] = Field(
        None, description="Live price once dates are chosen"
    )
    total: Optional[Decimal] = Field(None, description="Set once ready for payment")
