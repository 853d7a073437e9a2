# backend/routes/users.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from typing import List, Optional, Literal
from sqlalchemy.orm import Session
from pydantic import BaseModel

from database import get_db
from models.users import User
from models.unit import Unit
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import get_current_user, super_user_required
from utils.audit import client_ip, snapshot, write_log
from schemas.user import PasswordChange, PasswordReset, UserCreate, UserResponse, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])

# Schema for paginated user list response
class PaginatedUsersResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int


def _check_unit(db: Session, unit_id: Optional[int]):
    if unit_id is not None and not db.get(Unit, unit_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")


def _public(user: User) -> dict:
    data = snapshot(user)
    data.pop("password_hash", None)
    return data


# Retrieve a list of users with filtering, sorting, and pagination (super user only)
@router.get("", response_model=PaginatedUsersResponse)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by username or name"),
    unit_id: Optional[int] = Query(None),
    include_inactive: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "username", "name"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(User.username.ilike(like) | User.name.ilike(like))
    if unit_id is not None:
        query = query.filter(User.unit_id == unit_id)
    if not include_inactive:
        query = query.filter(User.is_active == True)  # noqa: E712

    sort_map = {
        "id": User.id,
        "username": User.username,
        "name": User.name,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    username = payload.username.strip()
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    _check_unit(db, payload.unit_id)

    user = User(
        username=username,
        password_hash=get_password_hash(payload.password),
        name=payload.name,
        is_super_user=payload.is_super_user,
        unit_id=payload.unit_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, table="users", record_id=user.id,
              operation="CREATE", new=_public(user), ip=client_ip(request))
    return user


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    old = _public(user)

    # unit_id may be cleared; other fields ignore explicit nulls
    data = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "unit_id"}
    if "unit_id" in data:
        _check_unit(db, data["unit_id"])
    if "password" in data:
        user.password_hash = get_password_hash(data.pop("password"))
    for field, value in data.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, table="users", record_id=user.id,
              operation="UPDATE", old=old, new=_public(user), ip=client_ip(request))
    return user


# Deactivate a user account (super user only)
@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    old = _public(user)
    user.is_active = False
    db.commit()

    write_log(db, user_id=current_user.id, table="users", record_id=user.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}


@router.post("/change-password")
def change_password(
    payload: PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.old_password, current_user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid old password")
    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()

    write_log(db, user_id=current_user.id, table="users", record_id=current_user.id,
              operation="CHANGE_PASSWORD", ip=client_ip(request))
    return {"success": True}


@router.post("/{user_id}/reset-password")
def reset_password(
    user_id: int,
    payload: PasswordReset,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    user.password_hash = get_password_hash(payload.new_password)
    db.commit()

    write_log(db, user_id=current_user.id, table="users", record_id=user.id,
              operation="RESET_PASSWORD", ip=client_ip(request))
    return {"success": True}
