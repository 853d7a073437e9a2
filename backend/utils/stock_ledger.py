# backend/utils/stock_ledger.py
"""
Stock ledger: product quantity across withdrawals and returns.

Every quantity change is a conditional UPDATE evaluated by the database
(``quantity = quantity - :q WHERE quantity >= :q``), and every movement state
change first claims the movement row with a conditional UPDATE on
``return_date IS NULL``. Check and write are therefore one statement and
concurrent callers cannot overdraw stock or double-credit a return.

Invariant per product, at every commit:
    product.quantity + sum(outstanding movement quantities) == stock received
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.employee import Employee
from models.movement import ProductMovement
from models.product import Product
from models.types import QUANTITY_MAX, QUANTITY_STEP
from utils.errors import ErrorKind, StockError, atomic

logger = logging.getLogger(__name__)

_UNSET = object()


def to_quantity(value, allow_zero: bool = False) -> Decimal:
    """Coerces user input to a positive Decimal quantity with at most 3 places."""
    try:
        qty = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise StockError(ErrorKind.INVALID_QUANTITY, f"Invalid quantity: {value!r}")
    if not qty.is_finite() or qty < 0 or (qty == 0 and not allow_zero):
        raise StockError(ErrorKind.INVALID_QUANTITY, "Quantity must be positive")
    if qty > QUANTITY_MAX:
        raise StockError(ErrorKind.INVALID_QUANTITY, f"Quantity cannot exceed {QUANTITY_MAX}")
    try:
        exact = qty == qty.quantize(QUANTITY_STEP)
    except InvalidOperation:
        exact = False
    if not exact:
        raise StockError(ErrorKind.INVALID_QUANTITY, "Quantity supports at most 3 decimal places")
    return qty


def _now() -> datetime:
    return datetime.now(timezone.utc)


def take_stock(db: Session, product_id: int, quantity: Decimal) -> None:
    """Decrements stock if enough is on hand. Caller's transaction."""
    updated = (
        db.query(Product)
        .filter(Product.id == product_id, Product.is_active == True, Product.quantity >= quantity)  # noqa: E712
        .update({Product.quantity: Product.quantity - quantity}, synchronize_session=False)
    )
    if updated:
        return
    product = db.get(Product, product_id)
    if product is None or not product.is_active:
        raise StockError(ErrorKind.NOT_FOUND, f"Product {product_id} not found")
    db.refresh(product)
    raise StockError(
        ErrorKind.INSUFFICIENT_STOCK,
        f"Insufficient stock for {product.name} (requested {quantity}, available {product.quantity})",
    )


def put_stock(db: Session, product_id: int, quantity: Decimal) -> None:
    """Increments stock up to QUANTITY_MAX. Inactive products still take their returns back."""
    updated = (
        db.query(Product)
        .filter(Product.id == product_id, Product.quantity <= QUANTITY_MAX - quantity)
        .update({Product.quantity: Product.quantity + quantity}, synchronize_session=False)
    )
    if updated:
        return
    if db.get(Product, product_id) is None:
        raise StockError(ErrorKind.NOT_FOUND, f"Product {product_id} not found")
    raise StockError(ErrorKind.INVALID_QUANTITY, f"Stock of product {product_id} cannot exceed {QUANTITY_MAX}")


def _claim_outstanding(db: Session, movement_id: int) -> ProductMovement:
    """
    Locks an outstanding movement by writing to it under the OUTSTANDING
    condition, then reloads it so the values read are the locked ones.
    """
    claimed = (
        db.query(ProductMovement)
        .filter(
            ProductMovement.id == movement_id,
            ProductMovement.is_active == True,  # noqa: E712
            ProductMovement.return_date.is_(None),
        )
        .update({ProductMovement.return_date: None}, synchronize_session=False)
    )
    movement = db.get(ProductMovement, movement_id)
    if not claimed:
        _raise_unclaimable(movement, movement_id)
    db.refresh(movement)
    return movement


def _raise_unclaimable(movement: Optional[ProductMovement], movement_id: int):
    if movement is None or not movement.is_active:
        raise StockError(ErrorKind.NOT_FOUND, f"Movement {movement_id} not found")
    raise StockError(ErrorKind.ALREADY_RETURNED, f"Movement {movement_id} was already returned")


def _active_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if employee is None or not employee.is_active:
        raise StockError(ErrorKind.NOT_FOUND, f"Employee {employee_id} not found")
    return employee


def withdraw(
    db: Session,
    *,
    product_id: int,
    employee_id: int,
    quantity,
    movement_date: Optional[datetime] = None,
    observation: Optional[str] = None,
    photo_url: Optional[str] = None,
    user_id: Optional[int] = None,
) -> ProductMovement:
    """Hands stock to an employee and records the OUTSTANDING movement."""
    qty = to_quantity(quantity)
    with atomic(db):
        _active_employee(db, employee_id)
        take_stock(db, product_id, qty)
        movement = ProductMovement(
            employee_id=employee_id,
            product_id=product_id,
            user_id=user_id,
            quantity=qty,
            movement_date=movement_date or _now(),
            observation=observation.upper() if observation else None,
            photo_url=photo_url,
        )
        db.add(movement)
        db.flush()
        movement_id = movement.id
    logger.info("Movement %s: %s x product %s to employee %s", movement_id, qty, product_id, employee_id)
    return db.get(ProductMovement, movement_id)


def update_movement(
    db: Session,
    movement_id: int,
    *,
    quantity=None,
    product_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    movement_date: Optional[datetime] = None,
    observation=_UNSET,
    photo_url=_UNSET,
) -> ProductMovement:
    """
    Edits an outstanding movement.

    Stock is reconciled explicitly: the old quantity goes back to the old
    product, then the new quantity is taken from the (possibly different)
    new product with the usual sufficiency check. Both steps and the row
    update share one transaction, so a rejected re-application leaves stock
    exactly as it was.
    """
    new_qty = to_quantity(quantity) if quantity is not None else None
    with atomic(db):
        movement = _claim_outstanding(db, movement_id)
        old_product_id, old_qty = movement.product_id, movement.quantity
        target_product_id = product_id if product_id is not None else old_product_id
        target_qty = new_qty if new_qty is not None else old_qty

        if target_product_id != old_product_id or target_qty != old_qty:
            put_stock(db, old_product_id, old_qty)
            take_stock(db, target_product_id, target_qty)
            movement.product_id = target_product_id
            movement.quantity = target_qty

        if employee_id is not None and employee_id != movement.employee_id:
            _active_employee(db, employee_id)
            movement.employee_id = employee_id
        if movement_date is not None:
            movement.movement_date = movement_date
        if observation is not _UNSET:
            movement.observation = observation.upper() if observation else None
        if photo_url is not _UNSET:
            movement.photo_url = photo_url
    db.refresh(movement)
    return movement


def return_movement(db: Session, movement_id: int, return_date: Optional[datetime] = None) -> ProductMovement:
    """OUTSTANDING -> RETURNED, crediting the stock exactly once."""
    with atomic(db):
        claimed = (
            db.query(ProductMovement)
            .filter(
                ProductMovement.id == movement_id,
                ProductMovement.is_active == True,  # noqa: E712
                ProductMovement.return_date.is_(None),
            )
            .update({ProductMovement.return_date: return_date or _now()}, synchronize_session=False)
        )
        movement = db.get(ProductMovement, movement_id)
        if not claimed:
            _raise_unclaimable(movement, movement_id)
        db.refresh(movement)
        put_stock(db, movement.product_id, movement.quantity)
    db.refresh(movement)
    logger.info("Movement %s returned, %s back to product %s", movement.id, movement.quantity, movement.product_id)
    return movement


def delete_movement(db: Session, movement_id: int) -> ProductMovement:
    """Soft delete; an outstanding movement gives its quantity back to stock."""
    with atomic(db):
        claimed = (
            db.query(ProductMovement)
            .filter(ProductMovement.id == movement_id, ProductMovement.is_active == True)  # noqa: E712
            .update({ProductMovement.is_active: False}, synchronize_session=False)
        )
        movement = db.get(ProductMovement, movement_id)
        if not claimed:
            raise StockError(ErrorKind.NOT_FOUND, f"Movement {movement_id} not found")
        db.refresh(movement)
        if movement.return_date is None:
            put_stock(db, movement.product_id, movement.quantity)
    db.refresh(movement)
    return movement


def receive(db: Session, product_id: int, quantity) -> None:
    """Stock entering from a supplier invoice. Caller's transaction."""
    put_stock(db, product_id, to_quantity(quantity))


def outstanding_quantity(db: Session, product_id: int) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(ProductMovement.quantity), 0))
        .filter(
            ProductMovement.product_id == product_id,
            ProductMovement.is_active == True,  # noqa: E712
            ProductMovement.return_date.is_(None),
        )
        .scalar()
    )
    return Decimal(total or 0)
