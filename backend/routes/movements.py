# backend/routes/movements.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.employee import Employee
from models.movement import ProductMovement
from models.product import Product
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.errors import DomainError, to_http
from utils import stock_ledger
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
import schemas.movement as movement_schemas

router = APIRouter(prefix="/movements", tags=["Movements"])


def _serialize(m: ProductMovement) -> dict:
    return {
        "id": m.id,
        "employee_id": m.employee_id,
        "product_id": m.product_id,
        "user_id": m.user_id,
        "quantity": m.quantity,
        "movement_date": m.movement_date,
        "return_date": m.return_date,
        "observation": m.observation,
        "photo_url": m.photo_url,
        "state": m.state.value,
        "created_at": m.created_at,
        "employee_name": m.employee.full_name if m.employee else None,
        "product_name": m.product.name if m.product else None,
        "product_code": m.product.code if m.product else None,
    }


def _get_movement(db: Session, movement_id: int, user: User) -> ProductMovement:
    m = db.query(ProductMovement).filter(ProductMovement.id == movement_id).first()
    if not m or not m.is_active:
        raise HTTPException(status_code=404, detail="Movement not found")
    ensure_unit_access(user, m.employee.unit_id, "movement")
    return m


def _check_employee(db: Session, employee_id: int, user: User):
    employee = db.get(Employee, employee_id)
    if employee is not None:
        ensure_unit_access(user, employee.unit_id, "employee")


@router.get("", response_model=movement_schemas.MovementPage)
def list_movements(
    q: Optional[str] = Query(None, description="Search by product name or code"),
    employee_id: Optional[int] = Query(None),
    product_id: Optional[int] = Query(None),
    state: Optional[movement_schemas.MovementStateName] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = (
        db.query(ProductMovement)
        .join(Product, ProductMovement.product_id == Product.id)
        .join(Employee, ProductMovement.employee_id == Employee.id)
        .filter(ProductMovement.is_active == True)  # noqa: E712
    )

    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Employee.unit_id == scope)
    if q:
        like = f"%{q}%"
        query = query.filter(Product.name.ilike(like) | Product.code.ilike(like))
    if employee_id is not None:
        query = query.filter(ProductMovement.employee_id == employee_id)
    if product_id is not None:
        query = query.filter(ProductMovement.product_id == product_id)
    if state == "OUTSTANDING":
        query = query.filter(ProductMovement.return_date.is_(None))
    elif state == "RETURNED":
        query = query.filter(ProductMovement.return_date.isnot(None))
    if date_from:
        query = query.filter(ProductMovement.movement_date >= date_from)
    if date_to:
        query = query.filter(ProductMovement.movement_date <= date_to)

    col = ProductMovement.movement_date
    query = query.order_by(col.desc() if order == "desc" else col.asc(), ProductMovement.id.desc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_serialize(m) for m in items], "total": total, "page": page, "page_size": page_size}


@router.get("/{movement_id}", response_model=movement_schemas.MovementResponse)
def get_movement(movement_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _serialize(_get_movement(db, movement_id, current_user))


# Withdrawal: stock goes out to the employee
@router.post("", response_model=movement_schemas.MovementResponse, status_code=201)
def withdraw(
    payload: movement_schemas.MovementCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _check_employee(db, payload.employee_id, current_user)
    try:
        movement = stock_ledger.withdraw(
            db,
            product_id=payload.product_id,
            employee_id=payload.employee_id,
            quantity=payload.quantity,
            movement_date=payload.movement_date,
            observation=payload.observation,
            photo_url=payload.photo_url,
            user_id=current_user.id,
        )
    except DomainError as e:
        raise to_http(e)

    write_log(db, user_id=current_user.id, table="product_movements", record_id=movement.id,
              operation="CREATE", new=snapshot(movement), ip=client_ip(request))
    return _serialize(movement)


@router.patch("/{movement_id}", response_model=movement_schemas.MovementResponse)
def update_movement(
    movement_id: int,
    payload: movement_schemas.MovementUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    m = _get_movement(db, movement_id, current_user)
    old = snapshot(m)
    if payload.employee_id is not None:
        _check_employee(db, payload.employee_id, current_user)

    changes = payload.model_dump(exclude_unset=True)
    kwargs = {k: changes[k] for k in ("observation", "photo_url") if k in changes}
    try:
        movement = stock_ledger.update_movement(
            db,
            movement_id,
            quantity=payload.quantity,
            product_id=payload.product_id,
            employee_id=payload.employee_id,
            movement_date=payload.movement_date,
            **kwargs,
        )
    except DomainError as e:
        raise to_http(e)

    write_log(db, user_id=current_user.id, table="product_movements", record_id=movement.id,
              operation="UPDATE", old=old, new=snapshot(movement), ip=client_ip(request))
    return _serialize(movement)


@router.post("/{movement_id}/return", response_model=movement_schemas.MovementResponse)
def return_movement(
    movement_id: int,
    request: Request,
    payload: Optional[movement_schemas.MovementReturn] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    m = _get_movement(db, movement_id, current_user)
    old = snapshot(m)
    try:
        movement = stock_ledger.return_movement(db, movement_id, payload.return_date if payload else None)
    except DomainError as e:
        raise to_http(e)

    write_log(db, user_id=current_user.id, table="product_movements", record_id=movement.id,
              operation="RETURN", old=old, new=snapshot(movement), ip=client_ip(request))
    return _serialize(movement)


# Soft delete; an outstanding quantity goes back to stock
@router.delete("/{movement_id}")
def delete_movement(
    movement_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    m = _get_movement(db, movement_id, current_user)
    old = snapshot(m)
    try:
        stock_ledger.delete_movement(db, movement_id)
    except DomainError as e:
        raise to_http(e)

    write_log(db, user_id=current_user.id, table="product_movements", record_id=movement_id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
