"""
Configurable fake payment gateway for development and testing.

Simulates a hosted checkout without any external calls. The outcome of the
next collections can be switched at runtime between success, customer
cancellation and failure.
"""

from typing import Callable, List
from uuid import uuid4

from adapters.payment_gateway import ChargeResult, PaymentGateway
from domain.enums import PaymentStatus


class FakePaymentGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.outcome: PaymentStatus = PaymentStatus.SUCCEEDED
        self.failure_reason: str = "Card declined"
        self.calls: List[dict] = []

    def configure(self, outcome: PaymentStatus, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.outcome = PaymentStatus(outcome)
        self.failure_reason = failure_reason

    def collect(
        self,
        amount_minor: int,
        currency: str,
        description: str,
        on_success: Callable[[str], None],
    ) -> ChargeResult:
        self.calls.append(
            {
                "method": "collect",
                "amount_minor": amount_minor,
                "currency": currency,
                "description": description,
            }
        )

        if self.outcome is PaymentStatus.SUCCEEDED:
            reference = f"fake_pay_{uuid4().hex[:12]}"
            on_success(reference)
            return ChargeResult(status=PaymentStatus.SUCCEEDED, reference=reference)
        if self.outcome is PaymentStatus.CANCELLED:
            return ChargeResult(status=PaymentStatus.CANCELLED)
        return ChargeResult(status=PaymentStatus.FAILED, failure_reason=self.failure_reason)
