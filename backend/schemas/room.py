# schemas/room.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RoomCreate(BaseModel):
    name: str = Field(min_length=1)
    accommodation_id: int
    bed_count: int = Field(ge=1)

class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    accommodation_id: Optional[int] = None
    bed_count: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None

class RoomOut(BaseModel):
    id: int
    name: Optional[str] = None
    accommodation_id: int
    bed_count: int
    is_active: bool
    created_at: Optional[datetime] = None

    # Occupancy, computed from active employees
    occupied_beds: int = 0
    available_beds: int = 0
    # More active occupants than beds (after a capacity reduction)
    over_capacity: bool = False

    model_config = ConfigDict(from_attributes=True)

class RoomList(BaseModel):
    rooms: List[RoomOut]
