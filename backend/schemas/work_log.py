# schemas/work_log.py
from datetime import date, datetime, time
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_validator

_TIMES = ("entry_time_1", "exit_time_1", "entry_time_2", "exit_time_2")


class WorkLogTimes(BaseModel):
    entry_time_1: Optional[time] = None
    exit_time_1: Optional[time] = None
    entry_time_2: Optional[time] = None
    exit_time_2: Optional[time] = None

    # Time inputs send "" when cleared
    @field_validator(*_TIMES, mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        return None if v == "" else v


class WorkLogCreate(WorkLogTimes):
    employee_id: int
    work_date: date

class WorkLogUpdate(WorkLogTimes):
    work_date: Optional[date] = None

class WorkLogOut(WorkLogTimes):
    id: int
    employee_id: int
    work_date: date
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    employee_name: Optional[str] = None
    unit_id: Optional[int] = None
    worked_minutes: int = 0

    model_config = ConfigDict(from_attributes=True)

class WorkLogPage(BaseModel):
    items: List[WorkLogOut]
    total: int
    page: int
    page_size: int
