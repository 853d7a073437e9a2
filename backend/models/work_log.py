# backend/models/work_log.py
from sqlalchemy import Column, Integer, ForeignKey, Date, Time, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# One working day of an employee: up to two entry/exit shifts
class WorkLog(Base):
    __tablename__ = "work_logs"
    __table_args__ = (UniqueConstraint("employee_id", "work_date", name="uq_work_logs_employee_day"),)

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    work_date = Column(Date, nullable=False, index=True)

    entry_time_1 = Column(Time, nullable=True)
    exit_time_1 = Column(Time, nullable=True)
    entry_time_2 = Column(Time, nullable=True)
    exit_time_2 = Column(Time, nullable=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
