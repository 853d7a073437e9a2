# backend/routes/functions.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.function import JobFunction
from models.users import User
from utils.audit import client_ip, snapshot, write_log
from utils.tokenJWT import get_current_user
from schemas.function import FunctionCreate, FunctionList, FunctionOut, FunctionUpdate

router = APIRouter(prefix="/functions", tags=["Functions"])


def _get_function(db: Session, function_id: int) -> JobFunction:
    fn = db.query(JobFunction).filter(JobFunction.id == function_id).first()
    if not fn:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Function not found")
    return fn


@router.get("", response_model=FunctionList)
def list_functions(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = db.query(JobFunction).filter(JobFunction.is_active == True).order_by(JobFunction.name.asc()).all()  # noqa: E712
    return {"functions": items}


@router.post("", response_model=FunctionOut, status_code=status.HTTP_201_CREATED)
def create_function(
    payload: FunctionCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = payload.name.strip()
    if db.query(JobFunction).filter(JobFunction.name == name).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Function already exists")
    fn = JobFunction(name=name)
    db.add(fn)
    db.commit()
    db.refresh(fn)
    write_log(db, user_id=current_user.id, table="functions", record_id=fn.id,
              operation="CREATE", new=payload, ip=client_ip(request))
    return fn


@router.patch("/{function_id}", response_model=FunctionOut)
def update_function(
    function_id: int,
    payload: FunctionUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fn = _get_function(db, function_id)
    old = snapshot(fn)
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(fn, field, value)
    db.commit()
    db.refresh(fn)
    write_log(db, user_id=current_user.id, table="functions", record_id=fn.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return fn


@router.delete("/{function_id}")
def delete_function(
    function_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fn = _get_function(db, function_id)
    old = snapshot(fn)
    fn.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="functions", record_id=fn.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
