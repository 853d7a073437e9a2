# backend/routes/transfers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.employee import Employee
from models.transfer import TransferHistory
from models.users import User
from utils.audit import client_ip, write_log
from utils.errors import DomainError, to_http
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
from utils.transfer import transfer_employees
from schemas.transfer import TransferCreate, TransferOut, TransferPage

router = APIRouter(prefix="/transfers", tags=["Transfers"])


def _serialize(t: TransferHistory) -> dict:
    return {
        "id": t.id,
        "employee_id": t.employee_id,
        "from_unit_id": t.from_unit_id,
        "to_unit_id": t.to_unit_id,
        "departure_at": t.departure_at,
        "arrival_at": t.arrival_at,
        "observation": t.observation,
        "user_id": t.user_id,
        "created_at": t.created_at,
        "employee_name": t.employee.full_name if t.employee else None,
        "from_unit_name": t.from_unit.name if t.from_unit else None,
        "to_unit_name": t.to_unit.name if t.to_unit else None,
    }


@router.get("", response_model=TransferPage)
def list_transfers(
    unit_id: Optional[int] = Query(None, description="Transfers leaving or entering this unit"),
    employee_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(TransferHistory)
    scope = unit_scope(current_user)
    unit_filter = scope if scope is not None else unit_id
    if unit_filter is not None:
        query = query.filter(or_(TransferHistory.from_unit_id == unit_filter,
                                 TransferHistory.to_unit_id == unit_filter))
    if employee_id is not None:
        query = query.filter(TransferHistory.employee_id == employee_id)

    total = query.count()
    items = (query.order_by(TransferHistory.departure_at.desc(), TransferHistory.id.desc())
             .offset((page - 1) * page_size).limit(page_size).all())
    return {"items": [_serialize(t) for t in items], "total": total, "page": page, "page_size": page_size}


# Employees leave the caller's unit for any active unit; the whole batch succeeds or fails together
@router.post("", response_model=List[TransferOut], status_code=201)
def create_transfer(
    payload: TransferCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    for employee in db.query(Employee).filter(Employee.id.in_(payload.employee_ids)).all():
        ensure_unit_access(current_user, employee.unit_id, "employee")

    try:
        records = transfer_employees(
            db,
            payload.employee_ids,
            payload.to_unit_id,
            payload.departure_at,
            payload.arrival_at,
            observation=payload.observation,
            user_id=current_user.id,
        )
    except DomainError as e:
        raise to_http(e)

    for t in records:
        write_log(db, user_id=current_user.id, table="transfer_history", record_id=t.id,
                  operation="TRANSFER",
                  new={"employee_id": t.employee_id, "from_unit_id": t.from_unit_id, "to_unit_id": t.to_unit_id},
                  ip=client_ip(request))
    return [_serialize(t) for t in records]
