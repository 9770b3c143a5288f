"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    AppError,
    ServiceValidationError,
    InvalidDeliveryDateError,
    UnserviceableAddressError,
    EmptySelectionError,
    NotFoundError,
    ConflictError,
    PlanStateError,
    PaymentFailedError,
    CheckoutInProgressError,
    OrderNotRecordedError,
)

__all__ = [
    "settings",
    "AppError",
    "ServiceValidationError",
    "InvalidDeliveryDateError",
    "UnserviceableAddressError",
    "EmptySelectionError",
    "NotFoundError",
    "ConflictError",
    "PlanStateError",
    "PaymentFailedError",
    "CheckoutInProgressError",
    "OrderNotRecordedError",
]
