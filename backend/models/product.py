# backend/models/product.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime, CheckConstraint, func
from database import Base
from models.types import Quantity

# Model Product
# A stock-tracked item (PPE, tools, bedding) handed out to employees.
# quantity is mutated only by invoice ingestion, withdrawals and returns.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)

    quantity = Column(Quantity, CheckConstraint("quantity >= 0"), nullable=False, default=0)
    unit_value = Column(Numeric(14, 4), CheckConstraint("unit_value >= 0"), nullable=False, default=0)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
