# schemas/accommodation.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class AccommodationCreate(BaseModel):
    name: str = Field(min_length=1)
    unit_id: int

class AccommodationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    unit_id: Optional[int] = None
    is_active: Optional[bool] = None

# Accommodation with capacity derived from its active rooms
class AccommodationOut(BaseModel):
    id: int
    name: str
    unit_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    total_beds: int = 0
    occupied_beds: int = 0

    model_config = ConfigDict(from_attributes=True)

class AccommodationList(BaseModel):
    accommodations: List[AccommodationOut]
