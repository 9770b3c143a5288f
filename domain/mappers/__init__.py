"""
Domain mappers package.
Handles transformation between ORM models, engine values and DTOs (Data Transfer Objects).
"""

from domain.mappers.order_mapper import OrderMapper
from domain.mappers.plan_mapper import PlanMapper

__all__ = ["OrderMapper", "PlanMapper"]
