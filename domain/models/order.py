"""
Subscription order models - finalized, paid orders.
"""

from sqlalchemy import (
    Column,
    Integer,
    Text,
    Date,
    Numeric,
    TIMESTAMP,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class SubscriptionOrder(Base):
    """One paid box subscription (one-time or recurring)"""

    __tablename__ = "subscription_order"

    order_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recurrence = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    total = Column(Numeric(12, 2), nullable=False)
    currency = Column(Text, nullable=False)
    payment_reference = Column(Text, nullable=False)

    recipient = Column(Text, nullable=False)
    address_line1 = Column(Text, nullable=False)
    address_line2 = Column(Text)
    city = Column(Text, nullable=False)
    postal_code = Column(Text, nullable=False)
    phone = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    lines = relationship(
        "SubscriptionOrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="SubscriptionOrderLine.line_no",
    )

    __table_args__ = (
        UniqueConstraint("payment_reference", name="uq_subscription_order_payment_ref"),
        CheckConstraint("total >= 0", name="ck_subscription_order_total"),
    )

    def __repr__(self):
        return f"<SubscriptionOrder(id={self.order_id}, recurrence='{self.recurrence}')>"


class SubscriptionOrderLine(Base):
    """Quantity of one product on one delivery weekday, with the price paid"""

    __tablename__ = "subscription_order_line"

    line_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("subscription_order.order_id", ondelete="CASCADE"),
        nullable=False,
    )
    line_no = Column(Integer, nullable=False)
    weekday = Column(Text, nullable=False)
    product_id = Column(Integer, nullable=False)
    product_name = Column(Text, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("SubscriptionOrder", back_populates="lines")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_subscription_order_line_qty"),
    )
