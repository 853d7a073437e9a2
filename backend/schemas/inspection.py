# schemas/inspection.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


# Photos are uploaded elsewhere; only their URLs are recorded here
class InspectionCreate(BaseModel):
    accommodation_id: int
    title: str = Field(min_length=1)
    observations: Optional[str] = None
    employee_id: Optional[int] = None
    inspection_date: Optional[datetime] = None
    photo_urls: List[str] = []

class InspectionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    observations: Optional[str] = None
    employee_id: Optional[int] = None
    inspection_date: Optional[datetime] = None
    add_photo_urls: List[str] = []
    remove_photo_urls: List[str] = []

class InspectionPhotoOut(BaseModel):
    id: int
    photo_url: str

    model_config = ConfigDict(from_attributes=True)

class InspectionOut(BaseModel):
    id: int
    accommodation_id: int
    employee_id: Optional[int] = None
    user_id: Optional[int] = None
    title: str
    observations: Optional[str] = None
    inspection_date: datetime
    status: str
    created_at: Optional[datetime] = None

    accommodation_name: Optional[str] = None
    photos: List[InspectionPhotoOut] = []

class InspectionPage(BaseModel):
    items: List[InspectionOut]
    total: int
    page: int
    page_size: int
