"""
Payment gateway port and factory.

CheckoutService only talks to PaymentGateway; get_gateway() / set_gateway()
swap the implementation (FakePaymentGateway by default, and in tests).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from domain.enums import PaymentStatus


@dataclass(frozen=True)
class ChargeResult:
    """What the gateway reported for one collection attempt."""

    status: PaymentStatus
    reference: Optional[str] = None
    failure_reason: Optional[str] = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def collect(
        self,
        amount_minor: int,
        currency: str,
        description: str,
        on_success: Callable[[str], None],
    ) -> ChargeResult:
        """
        Collect amount_minor (smallest currency unit) from the customer.

        on_success is called with the gateway's confirmation reference,
        exactly once and only when the payment succeeds. A customer
        cancelling is reported as PaymentStatus.CANCELLED, not raised.
        """
        ...


_current_gateway: Optional[PaymentGateway] = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakePaymentGateway."""
    global _current_gateway
    if _current_gateway is None:
        from adapters.fake_payment_gateway import FakePaymentGateway

        _current_gateway = FakePaymentGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
