# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from database import get_db
from models.log import Log
from models.users import User
from utils.tokenJWT import super_user_required

router = APIRouter(prefix="/logs", tags=["Logs"])

# --- SCHEMAS ---
class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    table_name: str
    record_id: Optional[int] = None
    operation: str
    ip: Optional[str] = None
    ts: datetime
    old_data: Optional[Any] = None
    new_data: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

# --- ENDPOINT ---
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    table: Optional[str] = Query(None, description="Filter by table"),
    record_id: Optional[int] = Query(None, description="Filter by record ID"),
    operation: Optional[str] = Query(None, description="Filter by operation (CREATE/UPDATE/DELETE/...)"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(super_user_required),
):
    query = db.query(Log)

    if table:
        query = query.filter(Log.table_name == table)
    if record_id is not None:
        query = query.filter(Log.record_id == record_id)
    if operation:
        query = query.filter(Log.operation == operation.upper())
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)

    if date_from:
        try:
            query = query.filter(Log.ts >= datetime.fromisoformat(date_from))
        except ValueError:
            pass  # malformed dates are ignored

    if date_to:
        try:
            # A bare date covers the whole day
            dt_to_str = date_to
            if len(dt_to_str) == 10:
                dt_to_str += " 23:59:59"
            query = query.filter(Log.ts <= datetime.fromisoformat(dt_to_str))
        except ValueError:
            pass

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
