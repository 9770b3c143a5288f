"""
Product Repository - Data access layer for the catalog
"""

from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import ProductRow


class ProductRepository(BaseRepository[ProductRow]):
    """Repository for catalog reads"""

    def __init__(self, db: Session):
        super().__init__(db, ProductRow)

    def list_by_categories(self, categories: Iterable[str]) -> List[ProductRow]:
        """All products in the given categories, sorted by name"""
        categories = list(categories)
        if not categories:
            return []
        return (
            self.db.query(ProductRow)
            .filter(ProductRow.category.in_(categories))
            .order_by(ProductRow.name, ProductRow.id)
            .all()
        )

    def list_all(
        self, diet_type: Optional[str] = None, category: Optional[str] = None
    ) -> List[ProductRow]:
        """Menu listing sorted by name, optionally narrowed by diet and category"""
        query = self.db.query(ProductRow)
        if diet_type:
            query = query.filter(ProductRow.diet_type == diet_type)
        if category:
            query = query.filter(ProductRow.category == category)
        return query.order_by(ProductRow.name, ProductRow.id).all()

    def list_categories(self) -> List[str]:
        rows = (
            self.db.query(ProductRow.category)
            .filter(ProductRow.category.isnot(None))
            .distinct()
            .order_by(ProductRow.category)
            .all()
        )
        return [r[0] for r in rows]
