# routes/reports.py
from decimal import Decimal
from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.stock_ledger import outstanding_quantity
from models.users import User
from models.product import Product
from schemas.reports import LowStockPage, LowStockItem

router = APIRouter(prefix="/reports", tags=["Reports"])

# -----------------------------
# Low stock
# -----------------------------
@router.get("/low-stock", response_model=LowStockPage)
def report_low_stock(
    threshold: Decimal = Query(Decimal("10"), ge=0, description="Stock threshold (<=)"),
    q: Optional[str] = Query(None, description="Search by name or code"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product).filter(Product.is_active == True, Product.quantity <= threshold)  # noqa: E712
    if q:
        like = f"%{q}%"
        query = query.filter((Product.name.ilike(like)) | (Product.code.ilike(like)))

    total = query.count()
    rows = (query
            .order_by(Product.quantity.asc(), Product.name.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all())

    items: List[LowStockItem] = [
        LowStockItem(
            product_id=p.id,
            name=p.name,
            code=p.code,
            quantity=p.quantity,
            outstanding_quantity=outstanding_quantity(db, p.id),
        )
        for p in rows
    ]
    return {"items": items, "total": total, "page": page, "page_size": page_size}
