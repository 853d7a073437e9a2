# backend/routes/rooms.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.accommodation import Accommodation
from models.employee import Employee
from models.room import Room
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.capacity import flag_over_capacity, occupancy
from utils.tokenJWT import ensure_unit_access, get_current_user, unit_scope
from schemas.room import RoomCreate, RoomList, RoomOut, RoomUpdate

router = APIRouter(prefix="/rooms", tags=["Rooms"])


def _get_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


def _accommodation_for(db: Session, user: User, accommodation_id: int) -> Accommodation:
    acc = db.get(Accommodation, accommodation_id)
    if not acc or not acc.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Accommodation not found")
    ensure_unit_access(user, acc.unit_id, "room")
    return acc


def _serialize(db: Session, rooms: List[Room]) -> List[RoomOut]:
    counts = occupancy(db, [r.id for r in rooms])
    out = []
    for r in rooms:
        data = RoomOut.model_validate(r)
        data.occupied_beds = counts.get(r.id, 0)
        data.available_beds = max(r.bed_count - data.occupied_beds, 0)
        data.over_capacity = data.occupied_beds > r.bed_count
        out.append(data)
    return out


@router.get("", response_model=RoomList)
def list_rooms(
    accommodation_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Room).join(Accommodation).filter(Room.is_active == True)  # noqa: E712
    scope = unit_scope(current_user)
    if scope is not None:
        query = query.filter(Accommodation.unit_id == scope)
    if accommodation_id is not None:
        query = query.filter(Room.accommodation_id == accommodation_id)
    rooms = query.order_by(Room.id.asc()).all()
    return {"rooms": _serialize(db, rooms)}


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    room = _get_room(db, room_id)
    ensure_unit_access(current_user, room.accommodation.unit_id, "room")
    return _serialize(db, [room])[0]


@router.post("", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _accommodation_for(db, current_user, payload.accommodation_id)
    room = Room(name=payload.name.strip(), accommodation_id=payload.accommodation_id, bed_count=payload.bed_count)
    db.add(room)
    db.commit()
    db.refresh(room)
    write_log(db, user_id=current_user.id, table="rooms", record_id=room.id,
              operation="CREATE", new=payload, ip=client_ip(request))
    return _serialize(db, [room])[0]


# Shrinking bed_count below current occupancy is accepted and reported as over_capacity
@router.patch("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    payload: RoomUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    room = _get_room(db, room_id)
    ensure_unit_access(current_user, room.accommodation.unit_id, "room")
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if data.get("accommodation_id") is not None and data["accommodation_id"] != room.accommodation_id:
        target = _accommodation_for(db, current_user, data["accommodation_id"])
        if target.unit_id != room.accommodation.unit_id:
            # Occupants would end up housed in another unit
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="Room cannot move to an accommodation of another unit")

    old = snapshot(room)
    for field, value in data.items():
        setattr(room, field, value)
    if "accommodation_id" in data:
        # Occupants follow their room
        db.query(Employee).filter(Employee.room_id == room.id).update(
            {Employee.accommodation_id: room.accommodation_id}, synchronize_session=False
        )
    db.commit()
    db.refresh(room)

    if "bed_count" in data:
        flag_over_capacity(db, room)
    write_log(db, user_id=current_user.id, table="rooms", record_id=room.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return _serialize(db, [room])[0]


# Soft delete; occupants keep their room reference but the room takes no new assignments
@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    room = _get_room(db, room_id)
    ensure_unit_access(current_user, room.accommodation.unit_id, "room")
    old = snapshot(room)
    room.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="rooms", record_id=room.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
