# backend/routes/units.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.unit import Unit
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.tokenJWT import get_current_user, super_user_required, unit_scope
from schemas.unit import UnitCreate, UnitList, UnitOut, UnitUpdate

router = APIRouter(prefix="/units", tags=["Units"])


def _get_unit(db: Session, unit_id: int) -> Unit:
    unit = db.query(Unit).filter(Unit.id == unit_id).first()
    if not unit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    return unit


# Active units; a unit-bound user only sees their own
@router.get("", response_model=UnitList)
def list_units(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    query = db.query(Unit).filter(Unit.is_active == True)  # noqa: E712
    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Unit.id == scope)
    return {"units": query.order_by(Unit.name.asc()).all()}


@router.post("", response_model=UnitOut, status_code=status.HTTP_201_CREATED)
def create_unit(
    payload: UnitCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    name = payload.name.strip()
    if db.query(Unit).filter(Unit.name == name).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unit already exists")
    unit = Unit(name=name)
    db.add(unit)
    db.commit()
    db.refresh(unit)
    write_log(db, user_id=current_user.id, table="units", record_id=unit.id,
              operation="CREATE", new=payload, ip=client_ip(request))
    return unit


@router.patch("/{unit_id}", response_model=UnitOut)
def update_unit(
    unit_id: int,
    payload: UnitUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    unit = _get_unit(db, unit_id)
    old = snapshot(unit)
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(unit, field, value)
    db.commit()
    db.refresh(unit)
    write_log(db, user_id=current_user.id, table="units", record_id=unit.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return unit


# Soft delete
@router.delete("/{unit_id}")
def delete_unit(
    unit_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    unit = _get_unit(db, unit_id)
    old = snapshot(unit)
    unit.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="units", record_id=unit.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
