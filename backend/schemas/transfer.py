# schemas/transfer.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


# Transfer of one or more employees to another unit
class TransferCreate(BaseModel):
    employee_ids: List[int] = Field(min_length=1)
    to_unit_id: int
    departure_at: datetime
    arrival_at: datetime
    observation: Optional[str] = None

class TransferOut(BaseModel):
    id: int
    employee_id: int
    from_unit_id: int
    to_unit_id: int
    departure_at: datetime
    arrival_at: datetime
    observation: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    employee_name: Optional[str] = None
    from_unit_name: Optional[str] = None
    to_unit_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class TransferPage(BaseModel):
    items: List[TransferOut]
    total: int
    page: int
    page_size: int
