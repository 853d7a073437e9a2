# backend/models/function.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from database import Base

# Job function (role on site) an employee is hired for
class JobFunction(Base):
    __tablename__ = "functions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
