# backend/routes/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.accommodation import Accommodation
from models.employee import Employee
from models.function import JobFunction
from models.users import User
from utils.capacity import accommodation_capacity
from utils.tokenJWT import get_current_user, unit_scope
from schemas.dashboard import DashboardStats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

# Label for employees without a job function
NO_FUNCTION = "No function"


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    scope = unit_scope(current_user)

    employees = db.query(Employee)
    accommodations = db.query(Accommodation).filter(Accommodation.is_active == True)  # noqa: E712
    if scope is not None:
        employees = employees.filter(Employee.unit_id == scope)
        accommodations = accommodations.filter(Accommodation.unit_id == scope)

    total_employees = employees.count()
    active = employees.filter(Employee.is_active == True)  # noqa: E712
    active_employees = active.count()

    # Beds and occupancy over active rooms of active accommodations
    acc_ids = [a.id for a in accommodations.all()]
    capacity = accommodation_capacity(db, acc_ids)
    total_beds = sum(beds for beds, _ in capacity.values())
    occupied_beds = sum(occupied for _, occupied in capacity.values())

    by_function = (
        active.outerjoin(JobFunction, Employee.function_id == JobFunction.id)
        .with_entities(JobFunction.name, func.count(Employee.id))
        .group_by(JobFunction.name)
        .all()
    )
    employees_by_function = sorted(
        ({"function": name or NO_FUNCTION, "count": count} for name, count in by_function),
        key=lambda row: (-row["count"], row["function"]),
    )

    return DashboardStats(
        total_employees=total_employees,
        active_employees=active_employees,
        total_accommodations=len(acc_ids),
        total_beds=total_beds,
        occupied_beds=occupied_beds,
        available_beds=max(total_beds - occupied_beds, 0),
        employees_by_function=employees_by_function,
    )
