"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.product_repository import ProductRepository
from repositories.order_repository import OrderRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "OrderRepository",
]
