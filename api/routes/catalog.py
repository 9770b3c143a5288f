"""Catalog routes: box builder products and the storefront menu"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import get_db
from app.config import settings
from domain.enums import DietType
from domain.schemas.catalog_schemas import (
    CatalogResponse,
    MenuGroup,
    MenuItemResponse,
    MenuResponse,
    ProductGroup,
    ProductResponse,
)
from services.catalog_service import CatalogService

router = APIRouter(tags=["Catalog"])
logger = logging.getLogger("selkies.api.catalog")


@router.get("/products", response_model=CatalogResponse)
def list_products(
    category: Optional[List[str]] = Query(
        None, description="Categories to include; defaults to the subscription box categories"
    ),
    db: Session = Depends(get_db),
):
    """
    Products offered in the box builder, grouped by category and sorted by name.

    An unreachable catalog yields empty groups rather than an error.
    """
    categories = category or settings.subscription_categories
    products = CatalogService.fetch_products(db, categories)
    groups = CatalogService.group_by_category(products, categories)

    return CatalogResponse(
        categories=list(categories),
        groups=[
            ProductGroup(
                category=name,
                products=[ProductResponse.model_validate(p) for p in items],
            )
            for name, items in groups.items()
        ],
    )


@router.get("/menu", response_model=MenuResponse)
def get_menu(
    diet: Optional[DietType] = Query(None, description="veg, egg or non-veg"),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Full menu, filterable by diet and category, grouped by subcategory."""
    diet_value = diet.value if diet else None
    categories, groups = CatalogService.menu(db, diet_type=diet_value, category=category)

    logger.info("Menu requested diet=%s category=%s -> %d groups", diet_value, category, len(groups))

    return MenuResponse(
        categories=categories,
        diet_type=diet_value,
        category=category,
        groups=[
            MenuGroup(
                name=name,
                items=[
                    MenuItemResponse(
                        **ProductResponse.model_validate(p).model_dump(),
                        low_stock=CatalogService.is_low_stock(p),
                    )
                    for p in items
                ],
            )
            for name, items in groups.items()
        ],
    )
