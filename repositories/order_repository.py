"""
Order Repository - Data access layer for paid subscription orders
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session, selectinload

from repositories.base import BaseRepository
from domain.models import SubscriptionOrder


class OrderRepository(BaseRepository[SubscriptionOrder]):
    """Repository for subscription order persistence"""

    def __init__(self, db: Session):
        super().__init__(db, SubscriptionOrder)

    def get_with_lines(self, order_id: UUID) -> Optional[SubscriptionOrder]:
        """Get order by ID with its lines loaded"""
        return (
            self.db.query(SubscriptionOrder)
            .options(selectinload(SubscriptionOrder.lines))
            .filter(SubscriptionOrder.order_id == order_id)
            .first()
        )

    def get_by_payment_reference(self, reference: str) -> Optional[SubscriptionOrder]:
        return (
            self.db.query(SubscriptionOrder)
            .filter(SubscriptionOrder.payment_reference == reference)
            .first()
        )
