"""Catalog service - read-only product queries"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from domain.entities import Product
from domain.models import ProductRow
from repositories.product_repository import ProductRepository

logger = logging.getLogger("selkies.catalog")


def to_product(row: ProductRow) -> Product:
    """Immutable copy of a catalog row."""
    return Product(
        id=row.id,
        name=row.name,
        category=row.category,
        price=row.price,
        description=row.description,
        subcategory=row.subcategory,
        diet_type=row.diet_type,
        is_available=True if row.is_available is None else bool(row.is_available),
        stock_quantity=row.stock_quantity,
    )


class CatalogService:
    """Business logic for catalog reads."""

    @staticmethod
    def fetch_products(db: Session, categories: Optional[Iterable[str]] = None) -> Tuple[Product, ...]:
        """
        Products in the given categories sorted by name.

        If the catalog cannot be read the result is empty instead of an
        error: selection and pricing keep working, with nothing to select.
        """
        categories = list(categories or settings.subscription_categories)
        try:
            rows = ProductRepository(db).list_by_categories(categories)
        except SQLAlchemyError as e:
            logger.warning("Catalog unavailable, continuing with no products: %s", e)
            db.rollback()
            return ()

        logger.info("Loaded %d products for categories %s", len(rows), categories)
        return tuple(to_product(r) for r in rows)

    @staticmethod
    def group_by_category(
        products: Iterable[Product], categories: Sequence[str]
    ) -> "OrderedDict[str, List[Product]]":
        """Products bucketed by category, in the order the categories were given."""
        groups: "OrderedDict[str, List[Product]]" = OrderedDict((c, []) for c in categories)
        for product in products:
            if product.category in groups:
                groups[product.category].append(product)
        return groups

    @staticmethod
    def menu(
        db: Session,
        diet_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[List[str], "OrderedDict[str, List[Product]]"]:
        """
        Storefront menu: every category (for filter chips) plus the filtered
        products grouped by subcategory, falling back to category.
        """
        repo = ProductRepository(db)
        try:
            categories = repo.list_categories()
            rows = repo.list_all(diet_type=diet_type, category=category)
        except SQLAlchemyError as e:
            logger.warning("Catalog unavailable for menu: %s", e)
            db.rollback()
            return [], OrderedDict()

        groups: "OrderedDict[str, List[Product]]" = OrderedDict()
        for row in rows:
            product = to_product(row)
            key = product.subcategory or product.category or "Others"
            groups.setdefault(key, []).append(product)
        return categories, groups

    @staticmethod
    def is_low_stock(product: Product, threshold: Optional[int] = None) -> bool:
        limit = settings.low_stock_threshold if threshold is None else threshold
        return product.stock_quantity is not None and product.stock_quantity <= limit

    @staticmethod
    def index(products: Iterable[Product]) -> Dict[int, Product]:
        return {p.id: p for p in products}
