"""
Product model - the bakery catalog.
"""

from sqlalchemy import Column, Integer, Text, Boolean, Numeric, TIMESTAMP, CheckConstraint
from sqlalchemy.sql import func

from domain.models.database import Base


class ProductRow(Base):
    """Catalog entry. Read-only from the ordering engine's point of view."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, index=True)
    category = Column(Text, nullable=False, index=True)
    subcategory = Column(Text)
    diet_type = Column(Text)  # veg, egg, non-veg
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    stock_quantity = Column(Integer)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (CheckConstraint("price >= 0", name="ck_products_price_non_negative"),)

    def __repr__(self):
        return f"<ProductRow(id={self.id}, name='{self.name}')>"
