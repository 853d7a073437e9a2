# schemas/dashboard.py
from typing import List
from pydantic import BaseModel


class FunctionCount(BaseModel):
    function: str
    count: int

# Headline numbers for the dashboard
class DashboardStats(BaseModel):
    total_employees: int
    active_employees: int
    total_accommodations: int
    total_beds: int
    occupied_beds: int
    available_beds: int
    employees_by_function: List[FunctionCount]
