# backend/models/invoice.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Text, func
from sqlalchemy.orm import relationship
from database import Base
from models.types import Quantity

# Represents a supplier invoice (NF-e) whose items were taken into stock
class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String, nullable=False, index=True)
    series = Column(String, nullable=True)

    # Issuer details
    issuer_name = Column(String, nullable=False)
    issuer_tax_id = Column(String, nullable=False)

    issue_date = Column(DateTime(timezone=True), nullable=True)
    # 44-digit NF-e access key, unique when present
    access_key = Column(String, unique=True, nullable=True)
    xml_content = Column(Text, nullable=True)
    # NF-e numeric code (cNF)
    code = Column(String, nullable=True)
    total_value = Column(Numeric(14, 2), nullable=False, default=0)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan")

# Represents a line item on a supplier invoice
class InvoiceItem(Base):
    __tablename__ = "invoice_items"
    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    product_code = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    quantity = Column(Quantity, nullable=False)
    unit_value = Column(Numeric(14, 4), nullable=False)
    total_value = Column(Numeric(14, 2), nullable=False)
    invoice = relationship("Invoice", back_populates="items")
    product = relationship("Product")
