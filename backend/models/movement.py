# backend/models/movement.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Text, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base
from models.types import Quantity

# A movement is OUTSTANDING until its stock comes back; RETURNED is final
class MovementState(str, enum.Enum):
    OUTSTANDING = "OUTSTANDING"
    RETURNED = "RETURNED"

# Withdrawal of product stock attributed to an employee
class ProductMovement(Base):
    __tablename__ = "product_movements"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Quantity withdrawn, always positive
    quantity = Column(Quantity, CheckConstraint("quantity > 0"), nullable=False)

    movement_date = Column(DateTime(timezone=True), nullable=False)
    return_date = Column(DateTime(timezone=True), nullable=True, index=True)
    observation = Column(Text, nullable=True)
    photo_url = Column(String, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee")
    product = relationship("Product")
    user = relationship("User")

    @property
    def state(self) -> MovementState:
        return MovementState.OUTSTANDING if self.return_date is None else MovementState.RETURNED
