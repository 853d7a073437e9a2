# schemas/function.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FunctionCreate(BaseModel):
    name: str = Field(min_length=1)

class FunctionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None

class FunctionOut(BaseModel):
    id: int
    name: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class FunctionList(BaseModel):
    functions: List[FunctionOut]
