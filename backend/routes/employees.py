# backend/routes/employees.py
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.accommodation import Accommodation
from models.employee import Employee
from models.function import JobFunction
from models.room import Room
from models.unit import Unit
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.capacity import try_assign, try_reactivate
from utils.errors import DomainError, atomic, to_http
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
from schemas.employee import EmployeeCreate, EmployeeOut, EmployeePage, EmployeeUpdate

router = APIRouter(prefix="/employees", tags=["Employees"])


def _get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee


def _check_references(db: Session, unit_id: Optional[int], function_id: Optional[int],
                      accommodation_id: Optional[int], owner_unit_id: int):
    if unit_id is not None:
        unit = db.get(Unit, unit_id)
        if not unit or not unit.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unit not found or inactive")
    if function_id is not None and not db.get(JobFunction, function_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Function not found")
    if accommodation_id is not None:
        acc = db.get(Accommodation, accommodation_id)
        if not acc or not acc.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Accommodation not found or inactive")
        if acc.unit_id != owner_unit_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="Accommodation belongs to another unit")


@router.get("", response_model=EmployeePage)
def list_employees(
    q: Optional[str] = Query(None, description="Search by name or registration number"),
    unit_id: Optional[int] = Query(None),
    accommodation_id: Optional[int] = Query(None),
    room_id: Optional[int] = Query(None),
    function_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    include_inactive: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    sort_by: Literal["full_name", "registration_number", "arrival_date", "id"] = "full_name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Employee)

    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Employee.unit_id == scope)
    elif unit_id is not None:
        query = query.filter(Employee.unit_id == unit_id)

    if not include_inactive:
        query = query.filter(Employee.is_active == True)  # noqa: E712
    if q:
        like = f"%{q}%"
        query = query.filter(Employee.full_name.ilike(like) | Employee.registration_number.ilike(like))
    if accommodation_id is not None:
        query = query.filter(Employee.accommodation_id == accommodation_id)
    if room_id is not None:
        query = query.filter(Employee.room_id == room_id)
    if function_id is not None:
        query = query.filter(Employee.function_id == function_id)
    if status_filter:
        query = query.filter(Employee.status == status_filter)

    sort_map = {
        "full_name": Employee.full_name,
        "registration_number": Employee.registration_number,
        "arrival_date": Employee.arrival_date,
        "id": Employee.id,
    }
    col = sort_map.get(sort_by, Employee.full_name)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    employee = _get_employee(db, employee_id)
    ensure_unit_access(current_user, employee.unit_id, "employee")
    return employee


# Onboarding; a requested room is checked and taken in the same transaction as the insert
@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_unit_access(current_user, payload.unit_id, "employee")
    _check_references(db, payload.unit_id, payload.function_id, payload.accommodation_id, payload.unit_id)

    data = payload.model_dump(exclude={"room_id"})
    try:
        with atomic(db):
            employee = Employee(**data)
            db.add(employee)
            db.flush()
            if payload.room_id is not None:
                try_assign(db, payload.room_id, employee.id)
            employee_id = employee.id
    except DomainError as e:
        raise to_http(e)

    employee = _get_employee(db, employee_id)
    write_log(db, user_id=current_user.id, table="employees", record_id=employee.id,
              operation="CREATE", new=snapshot(employee), ip=client_ip(request))
    return employee


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = _get_employee(db, employee_id)
    ensure_unit_access(current_user, employee.unit_id, "employee")

    data = payload.model_dump(exclude_unset=True)
    for field in ("registration_number", "full_name", "unit_id", "is_active"):
        if field in data and data[field] is None:
            data.pop(field)

    unit_changed = "unit_id" in data and data["unit_id"] != employee.unit_id
    if unit_changed:
        ensure_unit_access(current_user, data["unit_id"], "employee")
    target_unit = data.get("unit_id", employee.unit_id)
    _check_references(
        db,
        data["unit_id"] if unit_changed else None,
        data.get("function_id"),
        data.get("accommodation_id"),
        target_unit,
    )

    old = snapshot(employee)
    room_requested = "room_id" in data
    room_id = data.pop("room_id", None)
    reactivate = data.pop("is_active", None)
    if room_requested and room_id is not None and room_id == employee.room_id and not unit_changed:
        room_requested, room_id = False, None

    # The accommodation always follows the room
    keeps_room = employee.room_id is not None and not room_requested and not unit_changed
    if keeps_room and "accommodation_id" in data:
        current_room = db.get(Room, employee.room_id)
        if data["accommodation_id"] != current_room.accommodation_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="Accommodation must match the employee's room; change the room instead")

    try:
        with atomic(db):
            for field, value in data.items():
                setattr(employee, field, value)
            if room_requested or unit_changed:
                employee.room_id = None
                if unit_changed and "accommodation_id" not in data:
                    # Accommodation belongs to the old unit
                    employee.accommodation_id = None

            if reactivate is True and not employee.is_active:
                db.flush()
                try_reactivate(db, employee.id)
            elif reactivate is False:
                employee.is_active = False

            if room_id is not None:
                if not employee.is_active:
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                        detail="Inactive employees cannot be assigned a room")
                # The employee's own bed never counts against the room
                try_assign(db, room_id, employee.id)
    except DomainError as e:
        raise to_http(e)

    employee = _get_employee(db, employee_id)
    write_log(db, user_id=current_user.id, table="employees", record_id=employee.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return employee


# Soft delete; inactive employees no longer take up a bed
@router.delete("/{employee_id}")
def delete_employee(
    employee_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = _get_employee(db, employee_id)
    ensure_unit_access(current_user, employee.unit_id, "employee")
    old = snapshot(employee)
    employee.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="employees", record_id=employee.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
