"""
Domain package - Contains all domain models, schemas, and business entities.
"""

from domain.enums import DeliveryWeekday, Recurrence, PlanStage, DietType, PaymentStatus
from domain.entities import Product, SelectionEntry, DeliveryAddress, OrderRecord

__all__ = [
    "DeliveryWeekday",
    "Recurrence",
    "PlanStage",
    "DietType",
    "PaymentStatus",
    "Product",
    "SelectionEntry",
    "DeliveryAddress",
    "OrderRecord",
]
