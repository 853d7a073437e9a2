# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Represents audit logs of create/update/delete operations on business tables
class Log(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Event timestamp and core operation details
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    table_name = Column(String(50), index=True)
    record_id = Column(Integer, index=True, nullable=True)
    operation = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # Before/after snapshots of the record
    old_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)

    # Relationship to the acting user
    user = relationship("User", lazy="joined", uselist=False)
