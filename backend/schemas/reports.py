# schemas/reports.py
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel

# Schemas for low stock alerting
class LowStockItem(BaseModel):
    product_id: int
    name: str
    code: Optional[str] = None
    quantity: Decimal
    # Withdrawn and not yet returned
    outstanding_quantity: Decimal

class LowStockPage(BaseModel):
    items: List[LowStockItem]
    total: int
    page: int
    page_size: int
