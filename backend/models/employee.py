# backend/models/employee.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Text, func
from sqlalchemy.orm import relationship
from database import Base

# Well-known employee statuses; the column itself stays free text
class EmployeeStatus(str, enum.Enum):
    AWAITING_ONBOARDING = "AWAITING_ONBOARDING"
    ONBOARDED = "ONBOARDED"
    ON_LEAVE = "ON_LEAVE"
    DISMISSED = "DISMISSED"

# Represents a worker (occupant). Room and accommodation are optional; unassigned is valid.
class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    registration_number = Column(String, nullable=False, index=True)
    full_name = Column(String, nullable=False, index=True)

    arrival_date = Column(DateTime(timezone=True), nullable=True)
    departure_date = Column(DateTime(timezone=True), nullable=True)
    observation = Column(Text, nullable=True)

    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False, index=True)
    accommodation_id = Column(Integer, ForeignKey("accommodations.id"), nullable=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True, index=True)
    function_id = Column(Integer, ForeignKey("functions.id"), nullable=True)
    status = Column(String, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    unit = relationship("Unit")
    room = relationship("Room")
    accommodation = relationship("Accommodation")
    function = relationship("JobFunction")
