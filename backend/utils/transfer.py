# backend/utils/transfer.py
"""
Inter-unit transfer of employees.

The history row and the employee mutation are written in one transaction:
either both exist afterwards or neither does.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from models.employee import Employee, EmployeeStatus
from models.transfer import TransferHistory
from models.unit import Unit
from utils.errors import ErrorKind, TransferError, atomic

logger = logging.getLogger(__name__)


def _transfer_note(departure_at: datetime, from_unit: Unit, to_unit: Unit, observation: Optional[str]) -> str:
    note = f"TRANSFER ON {departure_at:%d/%m/%Y %H:%M} FROM {from_unit.name} TO {to_unit.name}"
    if observation:
        note += f" | OBS: {observation}"
    return note.upper()


def _append_observation(employee: Employee, note: str) -> None:
    previous = (employee.observation or "").upper()
    employee.observation = " | ".join(part for part in (previous, note) if part)


def _target_unit(db: Session, to_unit_id: int) -> Unit:
    unit = db.get(Unit, to_unit_id)
    if unit is None:
        raise TransferError(ErrorKind.NOT_FOUND, f"Unit {to_unit_id} not found")
    if not unit.is_active:
        raise TransferError(ErrorKind.RESOURCE_INACTIVE, f"Unit {unit.name} is inactive")
    return unit


def _transfer_one(
    db: Session,
    employee_id: int,
    to_unit: Unit,
    departure_at: datetime,
    arrival_at: datetime,
    observation: Optional[str],
    user_id: Optional[int],
) -> TransferHistory:
    employee = db.get(Employee, employee_id)
    if employee is None or not employee.is_active:
        raise TransferError(ErrorKind.NOT_FOUND, f"Employee {employee_id} not found")
    if employee.unit_id == to_unit.id:
        raise TransferError(ErrorKind.INVALID_TRANSFER, f"{employee.full_name} already belongs to {to_unit.name}")
    from_unit = db.get(Unit, employee.unit_id)

    history = TransferHistory(
        employee_id=employee.id,
        from_unit_id=from_unit.id,
        to_unit_id=to_unit.id,
        departure_at=departure_at,
        arrival_at=arrival_at,
        observation=observation.upper() if observation else None,
        user_id=user_id,
    )
    db.add(history)
    db.flush()

    # Room and accommodation belong to the old unit
    employee.unit_id = to_unit.id
    employee.room_id = None
    employee.accommodation_id = None
    employee.status = EmployeeStatus.AWAITING_ONBOARDING.value
    employee.departure_date = departure_at
    _append_observation(employee, _transfer_note(departure_at, from_unit, to_unit, observation))
    db.flush()
    return history


def transfer_employees(
    db: Session,
    employee_ids: Iterable[int],
    to_unit_id: int,
    departure_at: datetime,
    arrival_at: datetime,
    observation: Optional[str] = None,
    user_id: Optional[int] = None,
) -> List[TransferHistory]:
    """Transfers a batch of employees; the whole batch commits or none of it."""
    ids = list(dict.fromkeys(employee_ids))
    if not ids:
        raise TransferError(ErrorKind.INVALID_TRANSFER, "No employees selected")
    if arrival_at < departure_at:
        raise TransferError(ErrorKind.INVALID_TRANSFER, "Arrival cannot precede departure")

    with atomic(db):
        to_unit = _target_unit(db, to_unit_id)
        records = [
            _transfer_one(db, employee_id, to_unit, departure_at, arrival_at, observation, user_id)
            for employee_id in ids
        ]
        record_ids = [r.id for r in records]
    logger.info("Transferred %s employee(s) to unit %s", len(record_ids), to_unit_id)
    return db.query(TransferHistory).filter(TransferHistory.id.in_(record_ids)).order_by(TransferHistory.id).all()


def transfer_employee(db: Session, employee_id: int, to_unit_id: int, departure_at: datetime,
                      arrival_at: datetime, observation: Optional[str] = None,
                      user_id: Optional[int] = None) -> TransferHistory:
    return transfer_employees(db, [employee_id], to_unit_id, departure_at, arrival_at, observation, user_id)[0]
