"""
Adapters package - Integrations with external collaborators.
"""

from adapters.payment_gateway import (
    ChargeResult,
    PaymentGateway,
    get_gateway,
    set_gateway,
    reset_gateway,
)
from adapters.fake_payment_gateway import FakePaymentGateway

__all__ = [
    "ChargeResult",
    "PaymentGateway",
    "FakePaymentGateway",
    "get_gateway",
    "set_gateway",
    "reset_gateway",
]
