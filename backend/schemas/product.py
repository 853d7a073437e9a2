# backend/schemas/product.py
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from models.types import QUANTITY_MAX


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a product by hand (invoice import creates them too)
class ProductCreate(ORMBase):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    quantity: Decimal = Field(default=Decimal("0"), ge=0, le=QUANTITY_MAX, decimal_places=3)
    unit_value: Decimal = Field(default=Decimal("0"), ge=0)


# Schema for partial product updates; quantity only moves through the ledger
class ProductEditRequest(ORMBase):
    name: Optional[str] = Field(None, min_length=1)
    unit_value: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(ORMBase):
    id: int
    code: str
    name: str
    quantity: Decimal
    unit_value: Decimal
    is_active: bool
    # Quantity currently withdrawn and not yet returned
    outstanding_quantity: Optional[Decimal] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductResponse]
    total: int
    page: int
    page_size: int
