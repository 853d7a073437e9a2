# schemas/employee.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmployeeBase(BaseModel):
    arrival_date: Optional[datetime] = None
    departure_date: Optional[datetime] = None
    observation: Optional[str] = None
    accommodation_id: Optional[int] = None
    room_id: Optional[int] = None
    function_id: Optional[int] = None
    status: Optional[str] = None

    # Forms send "" for cleared fields
    @field_validator("arrival_date", "departure_date", "observation", "status", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        return None if v == "" else v


# Onboarding ("integration") of a new employee
class EmployeeCreate(EmployeeBase):
    registration_number: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    unit_id: int

# Schema for partial employee updates
class EmployeeUpdate(EmployeeBase):
    registration_number: Optional[str] = Field(None, min_length=1)
    full_name: Optional[str] = Field(None, min_length=1)
    unit_id: Optional[int] = None
    is_active: Optional[bool] = None

class EmployeeOut(BaseModel):
    id: int
    registration_number: str
    full_name: str
    arrival_date: Optional[datetime] = None
    departure_date: Optional[datetime] = None
    observation: Optional[str] = None
    unit_id: int
    accommodation_id: Optional[int] = None
    room_id: Optional[int] = None
    function_id: Optional[int] = None
    status: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

class EmployeePage(BaseModel):
    items: List[EmployeeOut]
    total: int
    page: int
    page_size: int
