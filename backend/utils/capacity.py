# backend/utils/capacity.py
"""
Bed capacity rules for rooms.

Occupancy is never stored; it is the number of active employees whose
room_id points at the room. The count and the assignment happen in a single
conditional UPDATE, issued after the room row has been locked, so two
concurrent requests can never both take the last bed.
"""
import logging
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, aliased

from models.accommodation import Accommodation
from models.employee import Employee
from models.room import Room
from utils.errors import CapacityError, ErrorKind, atomic

logger = logging.getLogger(__name__)


def _occupants_subquery(room_id: int, exclude_employee_id: Optional[int]):
    # Aliased so the subquery is never correlated with the employee row being updated
    occupant = aliased(Employee)
    q = select(func.count(occupant.id)).where(occupant.room_id == room_id, occupant.is_active == True)  # noqa: E712
    if exclude_employee_id is not None:
        q = q.where(occupant.id != exclude_employee_id)
    return q.scalar_subquery()


def _capacity_subquery(room_id: int):
    return select(Room.bed_count).where(Room.id == room_id, Room.is_active == True).scalar_subquery()  # noqa: E712


def _lock_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).with_for_update().first()
    if room is None:
        raise CapacityError(ErrorKind.NOT_FOUND, f"Room {room_id} not found")
    if not room.is_active:
        raise CapacityError(ErrorKind.RESOURCE_INACTIVE, f"Room {room_id} is inactive")
    accommodation = db.get(Accommodation, room.accommodation_id)
    if accommodation is None or not accommodation.is_active:
        raise CapacityError(ErrorKind.RESOURCE_INACTIVE, f"Accommodation of room {room_id} is inactive")
    return room


def try_assign(db: Session, room_id: int, employee_id: int, exclude_employee_id: Optional[int] = None) -> Room:
    """
    Places an employee in a room if a bed is free.

    Counts active occupants of the room (without ``exclude_employee_id``,
    which defaults to the employee being placed so updates never count
    themselves) and writes room_id/accommodation_id in the same statement.
    Runs inside the caller's transaction; nothing is committed here.

    Raises CapacityError with NOT_FOUND, RESOURCE_INACTIVE, UNIT_MISMATCH or
    CAPACITY_EXCEEDED.
    """
    db.flush()
    room = _lock_room(db, room_id)

    employee = db.get(Employee, employee_id)
    if employee is None or not employee.is_active:
        raise CapacityError(ErrorKind.NOT_FOUND, f"Employee {employee_id} not found")
    if room.accommodation.unit_id != employee.unit_id:
        raise CapacityError(ErrorKind.UNIT_MISMATCH, f"Room {room_id} belongs to another unit")
    if employee.room_id == room_id:
        return room

    if exclude_employee_id is None:
        exclude_employee_id = employee_id

    updated = (
        db.query(Employee)
        .filter(
            Employee.id == employee_id,
            _occupants_subquery(room_id, exclude_employee_id) < _capacity_subquery(room_id),
        )
        .update(
            {Employee.room_id: room_id, Employee.accommodation_id: room.accommodation_id},
            synchronize_session=False,
        )
    )
    if not updated:
        raise CapacityError(ErrorKind.CAPACITY_EXCEEDED, f"Room {room.name or room.id} is full ({room.bed_count} beds)")

    db.expire(employee, ["room_id", "accommodation_id"])
    return room


def assign(db: Session, room_id: int, employee_id: int) -> Room:
    """try_assign as a standalone transaction."""
    with atomic(db):
        room = try_assign(db, room_id, employee_id)
    return room


def unassign(db: Session, employee_id: int) -> None:
    with atomic(db):
        updated = db.query(Employee).filter(Employee.id == employee_id).update(
            {Employee.room_id: None}, synchronize_session=False
        )
        if not updated:
            raise CapacityError(ErrorKind.NOT_FOUND, f"Employee {employee_id} not found")


def try_reactivate(db: Session, employee_id: int) -> None:
    """
    Flips an inactive employee back to active without overbooking the room
    they still point at. Runs inside the caller's transaction.
    """
    db.flush()
    employee = db.get(Employee, employee_id)
    if employee is None:
        raise CapacityError(ErrorKind.NOT_FOUND, f"Employee {employee_id} not found")
    if employee.is_active:
        return
    if employee.room_id is None:
        db.query(Employee).filter(Employee.id == employee_id).update({Employee.is_active: True}, synchronize_session=False)
    else:
        _lock_room(db, employee.room_id)
        updated = (
            db.query(Employee)
            .filter(
                Employee.id == employee_id,
                _occupants_subquery(employee.room_id, employee_id) < _capacity_subquery(employee.room_id),
            )
            .update({Employee.is_active: True}, synchronize_session=False)
        )
        if not updated:
            raise CapacityError(ErrorKind.CAPACITY_EXCEEDED, f"Room {employee.room_id} is full")
    db.expire(employee, ["is_active"])


def occupancy(db: Session, room_ids: Iterable[int]) -> Dict[int, int]:
    """Active occupants per room id."""
    ids = list(room_ids)
    if not ids:
        return {}
    rows = (
        db.query(Employee.room_id, func.count(Employee.id))
        .filter(Employee.room_id.in_(ids), Employee.is_active == True)  # noqa: E712
        .group_by(Employee.room_id)
        .all()
    )
    counts = {room_id: 0 for room_id in ids}
    counts.update({room_id: count for room_id, count in rows})
    return counts


def flag_over_capacity(db: Session, room: Room) -> bool:
    """
    Capacity edits are not blocked when current occupancy already exceeds the
    new bed count; the room is reported and logged instead.
    """
    occupied = occupancy(db, [room.id])[room.id]
    if occupied > room.bed_count:
        logger.warning(
            "Room %s holds %s active employees but now declares %s beds",
            room.id, occupied, room.bed_count,
        )
        return True
    return False


def accommodation_capacity(db: Session, accommodation_ids: Iterable[int]) -> Dict[int, Tuple[int, int]]:
    """(total beds, occupied beds) per accommodation, over its active rooms only."""
    ids = list(accommodation_ids)
    if not ids:
        return {}
    beds = dict(
        db.query(Room.accommodation_id, func.coalesce(func.sum(Room.bed_count), 0))
        .filter(Room.accommodation_id.in_(ids), Room.is_active == True)  # noqa: E712
        .group_by(Room.accommodation_id)
        .all()
    )
    occupied = dict(
        db.query(Room.accommodation_id, func.count(Employee.id))
        .join(Employee, Employee.room_id == Room.id)
        .filter(Room.accommodation_id.in_(ids), Room.is_active == True, Employee.is_active == True)  # noqa: E712
        .group_by(Room.accommodation_id)
        .all()
    )
    return {i: (int(beds.get(i, 0)), int(occupied.get(i, 0))) for i in ids}
