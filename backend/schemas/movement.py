# backend/schemas/movement.py
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional, Literal

from models.types import QUANTITY_MAX

MovementStateName = Literal["OUTSTANDING", "RETURNED"]

# Withdrawal of product stock by an employee
class MovementCreate(BaseModel):
    employee_id: int
    product_id: int
    quantity: Decimal = Field(gt=0, le=QUANTITY_MAX)
    movement_date: Optional[datetime] = None
    observation: Optional[str] = None
    photo_url: Optional[str] = None

# Edit of an outstanding movement; omitted fields are left unchanged
class MovementUpdate(BaseModel):
    employee_id: Optional[int] = None
    product_id: Optional[int] = None
    quantity: Optional[Decimal] = Field(None, gt=0, le=QUANTITY_MAX)
    movement_date: Optional[datetime] = None
    observation: Optional[str] = None
    photo_url: Optional[str] = None

class MovementReturn(BaseModel):
    return_date: Optional[datetime] = None

# Schema for returning movement details
class MovementResponse(BaseModel):
    id: int
    employee_id: int
    product_id: int
    user_id: Optional[int] = None
    quantity: Decimal
    movement_date: datetime
    return_date: Optional[datetime] = None
    observation: Optional[str] = None
    photo_url: Optional[str] = None
    state: MovementStateName
    created_at: Optional[datetime] = None

    employee_name: Optional[str] = None
    product_name: Optional[str] = None
    product_code: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# Paginated response for movement history
class MovementPage(BaseModel):
    items: List[MovementResponse]
    total: int
    page: int
    page_size: int
