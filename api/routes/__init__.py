"""API routes package"""

from . import health, catalog, delivery, subscriptions, orders

__all__ = ["health", "catalog", "delivery", "subscriptions", "orders"]
