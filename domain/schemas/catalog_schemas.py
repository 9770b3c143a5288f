from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date
from decimal import Decimal


class ProductResponse(BaseModel):
    """Catalog product as shown in the box builder and menu"""

    id: int
    name: str
    category: str
    subcategory: Optional[str] = None
    diet_type: Optional[str] = None
    description: Optional[str] = None
    price: Decimal
    is_available: bool = True
    stock_quantity: Optional[int] = None

    model_config = {"from_attributes": True}


class ProductGroup(BaseModel):
    """Products of one category, in name order"""

    category: str
    products: List[ProductResponse] = Field(default_factory=list)


class CatalogResponse(BaseModel):
    categories: List[str]
    groups: List[ProductGroup]


class MenuItemResponse(ProductResponse):
    low_stock: bool = Field(
        default=False, description="True when only a few items are left"
    )


class MenuGroup(BaseModel):
    """Menu section keyed by subcategory, falling back to category"""

    name: str
    items: List[MenuItemResponse] = Field(default_factory=list)


class MenuResponse(BaseModel):
    categories: List[str] = Field(..., description="Every category, for filter chips")
    diet_type: Optional[str] = None
    category: Optional[str] = None
    groups: List[MenuGroup]


class StartDatesResponse(BaseModel):
    horizon_days: int
    dates: List[date]
