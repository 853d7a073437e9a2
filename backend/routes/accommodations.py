# backend/routes/accommodations.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.accommodation import Accommodation
from models.employee import Employee
from models.room import Room
from models.unit import Unit
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.capacity import accommodation_capacity
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
from schemas.accommodation import AccommodationCreate, AccommodationList, AccommodationOut, AccommodationUpdate

router = APIRouter(prefix="/accommodations", tags=["Accommodations"])


def _get_accommodation(db: Session, accommodation_id: int) -> Accommodation:
    acc = db.query(Accommodation).filter(Accommodation.id == accommodation_id).first()
    if not acc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Accommodation not found")
    return acc


def _active_unit(db: Session, unit_id: int) -> Unit:
    unit = db.get(Unit, unit_id)
    if not unit or not unit.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unit not found or inactive")
    return unit


def _serialize(db: Session, items: List[Accommodation]) -> List[AccommodationOut]:
    capacity = accommodation_capacity(db, [a.id for a in items])
    out = []
    for a in items:
        total_beds, occupied = capacity.get(a.id, (0, 0))
        data = AccommodationOut.model_validate(a)
        data.total_beds = total_beds
        data.occupied_beds = occupied
        out.append(data)
    return out


@router.get("", response_model=AccommodationList)
def list_accommodations(
    unit_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Accommodation).filter(Accommodation.is_active == True)  # noqa: E712
    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Accommodation.unit_id == scope)
    elif unit_id is not None:
        query = query.filter(Accommodation.unit_id == unit_id)
    items = query.order_by(Accommodation.name.asc()).all()
    return {"accommodations": _serialize(db, items)}


@router.get("/{accommodation_id}", response_model=AccommodationOut)
def get_accommodation(
    accommodation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    acc = _get_accommodation(db, accommodation_id)
    ensure_unit_access(current_user, acc.unit_id, "accommodation")
    return _serialize(db, [acc])[0]


@router.post("", response_model=AccommodationOut, status_code=status.HTTP_201_CREATED)
def create_accommodation(
    payload: AccommodationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_unit_access(current_user, payload.unit_id, "accommodation")
    _active_unit(db, payload.unit_id)

    acc = Accommodation(name=payload.name.strip(), unit_id=payload.unit_id)
    db.add(acc)
    db.commit()
    db.refresh(acc)
    write_log(db, user_id=current_user.id, table="accommodations", record_id=acc.id,
              operation="CREATE", new=payload, ip=client_ip(request))
    return _serialize(db, [acc])[0]


@router.patch("/{accommodation_id}", response_model=AccommodationOut)
def update_accommodation(
    accommodation_id: int,
    payload: AccommodationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    acc = _get_accommodation(db, accommodation_id)
    ensure_unit_access(current_user, acc.unit_id, "accommodation")
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if data.get("unit_id") is not None and data["unit_id"] != acc.unit_id:
        ensure_unit_access(current_user, data["unit_id"], "accommodation")
        _active_unit(db, data["unit_id"])
        housed = (
            db.query(Employee.id)
            .outerjoin(Room, Employee.room_id == Room.id)
            .filter(
                Employee.is_active == True,  # noqa: E712
                or_(Room.accommodation_id == acc.id, Employee.accommodation_id == acc.id),
            )
            .first()
        )
        if housed:
            # Occupants would end up housed in another unit
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="Accommodation with housed employees cannot move to another unit")

    old = snapshot(acc)
    for field, value in data.items():
        setattr(acc, field, value)
    db.commit()
    db.refresh(acc)
    write_log(db, user_id=current_user.id, table="accommodations", record_id=acc.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return _serialize(db, [acc])[0]


# Soft delete; its rooms stop taking assignments
@router.delete("/{accommodation_id}")
def delete_accommodation(
    accommodation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    acc = _get_accommodation(db, accommodation_id)
    ensure_unit_access(current_user, acc.unit_id, "accommodation")
    old = snapshot(acc)
    acc.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="accommodations", record_id=acc.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
