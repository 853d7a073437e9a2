# backend/routes/work_logs.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.employee import Employee
from models.users import User
from models.work_log import WorkLog
from utils.audit import client_ip, snapshot, write_log
from utils.errors import DomainError, ErrorKind, atomic, to_http
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
from utils.work_hours import check_shifts, worked_minutes
from schemas.work_log import WorkLogCreate, WorkLogOut, WorkLogPage, WorkLogUpdate

router = APIRouter(prefix="/work-logs", tags=["Work logs"])

_TIMES = ("entry_time_1", "exit_time_1", "entry_time_2", "exit_time_2")


def _serialize(w: WorkLog) -> dict:
    return {
        "id": w.id,
        "employee_id": w.employee_id,
        "work_date": w.work_date,
        "entry_time_1": w.entry_time_1,
        "exit_time_1": w.exit_time_1,
        "entry_time_2": w.entry_time_2,
        "exit_time_2": w.exit_time_2,
        "user_id": w.user_id,
        "created_at": w.created_at,
        "employee_name": w.employee.full_name if w.employee else None,
        "unit_id": w.employee.unit_id if w.employee else None,
        "worked_minutes": worked_minutes(w),
    }


def _get_work_log(db: Session, work_log_id: int, user: User) -> WorkLog:
    w = db.query(WorkLog).filter(WorkLog.id == work_log_id).first()
    if not w:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work log not found")
    ensure_unit_access(user, w.employee.unit_id, "work log")
    return w


def _duplicate_day(employee_id: int, work_date: date) -> DomainError:
    return DomainError(ErrorKind.DUPLICATE, f"Employee {employee_id} already has a work log on {work_date}")


def _day_taken(db: Session, employee_id: int, work_date: date, exclude_id: Optional[int] = None) -> bool:
    query = db.query(WorkLog.id).filter(WorkLog.employee_id == employee_id, WorkLog.work_date == work_date)
    if exclude_id is not None:
        query = query.filter(WorkLog.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=WorkLogPage)
def list_work_logs(
    employee_id: Optional[int] = Query(None),
    unit_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(WorkLog).join(Employee, WorkLog.employee_id == Employee.id)

    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Employee.unit_id == scope)
    elif unit_id is not None:
        query = query.filter(Employee.unit_id == unit_id)
    if employee_id is not None:
        query = query.filter(WorkLog.employee_id == employee_id)
    if date_from:
        query = query.filter(WorkLog.work_date >= date_from)
    if date_to:
        query = query.filter(WorkLog.work_date <= date_to)

    query = query.order_by(WorkLog.work_date.desc(), Employee.full_name.asc())
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_serialize(w) for w in items], "total": total, "page": page, "page_size": page_size}


@router.get("/{work_log_id}", response_model=WorkLogOut)
def get_work_log(work_log_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _serialize(_get_work_log(db, work_log_id, current_user))


@router.post("", response_model=WorkLogOut, status_code=status.HTTP_201_CREATED)
def create_work_log(
    payload: WorkLogCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = db.get(Employee, payload.employee_id)
    if not employee or not employee.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Employee not found or inactive")
    ensure_unit_access(current_user, employee.unit_id, "work log")

    try:
        check_shifts(*(getattr(payload, t) for t in _TIMES))
        if _day_taken(db, payload.employee_id, payload.work_date):
            raise _duplicate_day(payload.employee_id, payload.work_date)
        with atomic(db):
            work_log = WorkLog(**payload.model_dump(), user_id=current_user.id)
            db.add(work_log)
            db.flush()
            work_log_id = work_log.id
    except DomainError as e:
        raise to_http(e)
    except IntegrityError:
        # Same day registered concurrently
        raise to_http(_duplicate_day(payload.employee_id, payload.work_date))

    work_log = db.get(WorkLog, work_log_id)
    write_log(db, user_id=current_user.id, table="work_logs", record_id=work_log.id,
              operation="CREATE", new=snapshot(work_log), ip=client_ip(request))
    return _serialize(work_log)


@router.patch("/{work_log_id}", response_model=WorkLogOut)
def update_work_log(
    work_log_id: int,
    payload: WorkLogUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    work_log = _get_work_log(db, work_log_id, current_user)
    data = payload.model_dump(exclude_unset=True)
    if data.get("work_date") is None:
        data.pop("work_date", None)

    # Shifts are checked on the merged day, not on the patch alone
    merged = {t: data.get(t, getattr(work_log, t)) for t in _TIMES}
    old = snapshot(work_log)
    try:
        check_shifts(*(merged[t] for t in _TIMES))
        if "work_date" in data and _day_taken(db, work_log.employee_id, data["work_date"], exclude_id=work_log.id):
            raise _duplicate_day(work_log.employee_id, data["work_date"])
        with atomic(db):
            for field, value in data.items():
                setattr(work_log, field, value)
    except DomainError as e:
        raise to_http(e)
    except IntegrityError:
        raise to_http(_duplicate_day(work_log.employee_id, data["work_date"]))

    db.refresh(work_log)
    write_log(db, user_id=current_user.id, table="work_logs", record_id=work_log.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return _serialize(work_log)


# Hard delete; a work log has nothing hanging off it
@router.delete("/{work_log_id}")
def delete_work_log(
    work_log_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    work_log = _get_work_log(db, work_log_id, current_user)
    old = snapshot(work_log)
    db.delete(work_log)
    db.commit()
    write_log(db, user_id=current_user.id, table="work_logs", record_id=work_log_id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
