"""
Order domain mappers.
Handles transformation between finalized order records, ORM rows and DTOs.
"""

from domain.entities import OrderRecord
from domain.enums import DeliveryWeekday
from domain.models import SubscriptionOrder, SubscriptionOrderLine
from domain.schemas.order_schemas import OrderLineResponse, OrderResponse


class OrderMapper:
    """Mapper for subscription order transformations."""

    @staticmethod
    def to_model(record: OrderRecord, currency: str) -> SubscriptionOrder:
        """
        Build an unsaved SubscriptionOrder (with lines) from a paid OrderRecord.

        One line per (weekday, product); the unit price is the one the
        customer was quoted, not a fresh catalog price.
        """
        order = SubscriptionOrder(
            recurrence=record.recurrence.value,
            start_date=record.start_date,
            end_date=record.end_date,
            total=record.total,
            currency=currency,
            payment_reference=record.payment_reference,
            recipient=record.address.recipient,
            address_line1=record.address.line1,
            address_line2=record.address.line2,
            city=record.address.city,
            postal_code=record.address.postal_code,
            phone=record.address.phone,
        )

        line_no = 0
        for day in DeliveryWeekday:
            for entry in record.selections.get(day, ()):
                line_no += 1
                order.lines.append(
                    SubscriptionOrderLine(
                        line_no=line_no,
                        weekday=day.value,
                        product_id=entry.product.id,
                        product_name=entry.product.name,
                        unit_price=entry.product.price,
                        quantity=entry.quantity,
                    )
                )
        return order

    @staticmethod
    def to_response(order: SubscriptionOrder) -> OrderResponse:
        """Convert ORM SubscriptionOrder (lines loaded) to OrderResponse DTO."""
        return OrderResponse(
            order_id=order.order_id,
            recurrence=order.recurrence,
            start_date=order.start_date,
            end_date=order.end_date,
            total=order.total,
            currency=order.currency,
            payment_reference=order.payment_reference,
            recipient=order.recipient,
            address_line1=order.address_line1,
            address_line2=order.address_line2,
            city=order.city,
            postal_code=order.postal_code,
            phone=order.phone,
            created_at=order.created_at,
            lines=[OrderLineResponse.model_validate(line) for line in order.lines],
        )
