# schemas/invoice.py
from decimal import Decimal
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

# Input schema for a single line item of a supplier invoice
class InvoiceItemCreate(BaseModel):
    product_code: str
    product_name: str
    quantity: Decimal
    unit_value: Decimal = Decimal("0")
    total_value: Optional[Decimal] = None

# Input schema for registering a supplier invoice (also produced by the XML parser)
class InvoiceCreate(BaseModel):
    number: str
    series: Optional[str] = None
    code: Optional[str] = None
    issuer_name: str
    issuer_tax_id: str = ""
    issue_date: Optional[datetime] = None
    access_key: Optional[str] = None
    total_value: Decimal = Decimal("0")
    xml_content: Optional[str] = None
    items: List[InvoiceItemCreate]

# Output schema for an invoice line item
class InvoiceItemResponse(BaseModel):
    product_id: Optional[int] = None
    product_code: str
    product_name: str
    quantity: Decimal
    unit_value: Decimal
    total_value: Decimal

    model_config = ConfigDict(from_attributes=True)

# Output schema for a single invoice
class InvoiceResponse(BaseModel):
    id: int
    number: str
    series: Optional[str] = None
    code: Optional[str] = None
    issuer_name: str
    issuer_tax_id: str
    issue_date: Optional[datetime] = None
    access_key: Optional[str] = None
    total_value: Decimal
    created_at: Optional[datetime] = None
    items: List[InvoiceItemResponse]

    model_config = ConfigDict(from_attributes=True)

# Schema for summary representation in lists
class InvoiceListItem(BaseModel):
    id: int
    number: str
    series: Optional[str] = None
    issuer_name: str
    issue_date: Optional[datetime] = None
    access_key: Optional[str] = None
    total_value: Decimal
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Paginated response wrapper for invoice lists
class InvoiceListPage(BaseModel):
    items: List[InvoiceListItem]
    total: int
    page: int
    page_size: int
