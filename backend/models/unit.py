# backend/models/unit.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from database import Base

# Represents an operational unit (work site) owning accommodations and employees
class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
