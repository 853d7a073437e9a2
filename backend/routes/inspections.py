# backend/routes/inspections.py
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.accommodation import Accommodation
from models.employee import Employee
from models.inspection import Inspection, InspectionPhoto
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
from schemas.inspection import InspectionCreate, InspectionOut, InspectionPage, InspectionUpdate

router = APIRouter(prefix="/inspections", tags=["Inspections"])


def _serialize(i: Inspection) -> dict:
    return {
        "id": i.id,
        "accommodation_id": i.accommodation_id,
        "employee_id": i.employee_id,
        "user_id": i.user_id,
        "title": i.title,
        "observations": i.observations,
        "inspection_date": i.inspection_date,
        "status": i.status,
        "created_at": i.created_at,
        "accommodation_name": i.accommodation.name if i.accommodation else None,
        "photos": [{"id": p.id, "photo_url": p.photo_url} for p in i.photos if p.is_active],
    }


def _get_inspection(db: Session, inspection_id: int, user: User) -> Inspection:
    inspection = db.query(Inspection).filter(Inspection.id == inspection_id).first()
    if not inspection or not inspection.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inspection not found")
    ensure_unit_access(user, inspection.accommodation.unit_id, "inspection")
    return inspection


def _accommodation_for(db: Session, user: User, accommodation_id: int) -> Accommodation:
    acc = db.get(Accommodation, accommodation_id)
    if not acc or not acc.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Accommodation not found")
    ensure_unit_access(user, acc.unit_id, "inspection")
    return acc


def _check_employee(db: Session, employee_id: Optional[int], acc: Accommodation):
    if employee_id is None:
        return
    employee = db.get(Employee, employee_id)
    if not employee or not employee.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Employee not found or inactive")
    if employee.unit_id != acc.unit_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Employee belongs to another unit than the accommodation")


def _clean_urls(urls) -> list:
    return [u.strip() for u in urls if u and u.strip()]


@router.get("", response_model=InspectionPage)
def list_inspections(
    accommodation_id: Optional[int] = Query(None),
    unit_id: Optional[int] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = (
        db.query(Inspection)
        .join(Accommodation, Inspection.accommodation_id == Accommodation.id)
        .filter(Inspection.is_active == True)  # noqa: E712
    )
    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Accommodation.unit_id == scope)
    elif unit_id is not None:
        query = query.filter(Accommodation.unit_id == unit_id)
    if accommodation_id is not None:
        query = query.filter(Inspection.accommodation_id == accommodation_id)
    if date_from:
        query = query.filter(Inspection.inspection_date >= date_from)
    if date_to:
        query = query.filter(Inspection.inspection_date <= date_to)

    query = query.order_by(Inspection.inspection_date.desc(), Inspection.id.desc())
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_serialize(i) for i in items], "total": total, "page": page, "page_size": page_size}


@router.get("/{inspection_id}", response_model=InspectionOut)
def get_inspection(inspection_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _serialize(_get_inspection(db, inspection_id, current_user))


@router.post("", response_model=InspectionOut, status_code=status.HTTP_201_CREATED)
def create_inspection(
    payload: InspectionCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    acc = _accommodation_for(db, current_user, payload.accommodation_id)
    _check_employee(db, payload.employee_id, acc)

    inspection = Inspection(
        accommodation_id=acc.id,
        employee_id=payload.employee_id,
        user_id=current_user.id,
        title=payload.title.strip().upper(),
        observations=payload.observations.upper() if payload.observations else None,
        inspection_date=payload.inspection_date or datetime.now(timezone.utc),
    )
    db.add(inspection)
    db.flush()
    for url in _clean_urls(payload.photo_urls):
        db.add(InspectionPhoto(inspection_id=inspection.id, photo_url=url))
    db.commit()
    db.refresh(inspection)
    write_log(db, user_id=current_user.id, table="inspections", record_id=inspection.id,
              operation="CREATE", new=payload, ip=client_ip(request))
    return _serialize(inspection)


@router.patch("/{inspection_id}", response_model=InspectionOut)
def update_inspection(
    inspection_id: int,
    payload: InspectionUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    inspection = _get_inspection(db, inspection_id, current_user)
    data = payload.model_dump(exclude_unset=True, exclude={"add_photo_urls", "remove_photo_urls"})
    if data.get("title") is None:
        data.pop("title", None)
    if data.get("inspection_date") is None:
        data.pop("inspection_date", None)
    if data.get("employee_id") is not None:
        _check_employee(db, data["employee_id"], inspection.accommodation)

    old = snapshot(inspection)
    if "title" in data:
        data["title"] = data["title"].strip().upper()
    if "observations" in data:
        data["observations"] = data["observations"].upper() if data["observations"] else None
    for field, value in data.items():
        setattr(inspection, field, value)

    removed = set(_clean_urls(payload.remove_photo_urls))
    for photo in inspection.photos:
        if photo.is_active and photo.photo_url in removed:
            photo.is_active = False
    for url in _clean_urls(payload.add_photo_urls):
        db.add(InspectionPhoto(inspection_id=inspection.id, photo_url=url))

    db.commit()
    db.refresh(inspection)
    write_log(db, user_id=current_user.id, table="inspections", record_id=inspection.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return _serialize(inspection)


# Soft delete of every inspection of one accommodation
@router.delete("/accommodation/{accommodation_id}")
def delete_accommodation_inspections(
    accommodation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    acc = db.get(Accommodation, accommodation_id)
    if not acc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Accommodation not found")
    ensure_unit_access(current_user, acc.unit_id, "inspection")
    deleted = (
        db.query(Inspection)
        .filter(Inspection.accommodation_id == accommodation_id, Inspection.is_active == True)  # noqa: E712
        .update({Inspection.is_active: False}, synchronize_session=False)
    )
    db.commit()
    write_log(db, user_id=current_user.id, table="inspections", record_id=accommodation_id,
              operation="DELETE", new={"accommodation_id": accommodation_id, "deleted": deleted},
              ip=client_ip(request))
    return {"success": True, "deleted": deleted}


@router.delete("/{inspection_id}")
def delete_inspection(
    inspection_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    inspection = _get_inspection(db, inspection_id, current_user)
    old = snapshot(inspection)
    inspection.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="inspections", record_id=inspection.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
