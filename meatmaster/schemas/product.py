from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from meatmaster.models.product import UnitType


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    unit_type: UnitType


class ProductCreate(ProductBase):
    current_stock: Decimal = Field(Decimal("0"), ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    unit_type: Optional[UnitType] = None
    current_stock: Optional[Decimal] = Field(None, ge=0)


class StockAdd(BaseModel):
    quantity: Decimal = Field(..., gt=0)


class StockReceive(ProductBase):
    """Add stock to the product with this name/unit, creating it when missing."""
    quantity: Decimal = Field(..., gt=0)


class ProductResponse(ProductBase):
    id: str
    current_stock: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    total: int
    products: list[ProductResponse]
