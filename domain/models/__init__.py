"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.product import ProductRow
from domain.models.order import SubscriptionOrder, SubscriptionOrderLine

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # Catalog
    "ProductRow",
    # Orders
    "SubscriptionOrder",
    "SubscriptionOrderLine",
]
