# backend/routes/products.py
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import client_ip, snapshot, write_log
from utils.errors import DomainError, atomic, to_http
from utils.invoice_import import norm_code
from utils.stock_ledger import outstanding_quantity, to_quantity
from models.users import User
from models.product import Product
import schemas.product as product_schemas

router = APIRouter(tags=["Products"])


def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _serialize(db: Session, p: Product, with_outstanding: bool = False) -> product_schemas.ProductResponse:
    data = product_schemas.ProductResponse.model_validate(p)
    if with_outstanding:
        data.outstanding_quantity = outstanding_quantity(db, p.id)
    return data


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name or code"),
    code: Optional[str] = Query(None),
    in_stock: bool = False,
    include_inactive: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=1000),
    sort_by: str = Query("name"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product)

    if q:
        like = f"%{q}%"
        query = query.filter(Product.name.ilike(like) | Product.code.ilike(like))
    if code:
        query = query.filter(Product.code == norm_code(code))
    if in_stock:
        query = query.filter(Product.quantity > 0)
    if not include_inactive:
        query = query.filter(Product.is_active == True)  # noqa: E712

    allowed = {
        "id": Product.id, "code": Product.code, "name": Product.name,
        "quantity": Product.quantity, "unit_value": Product.unit_value,
        "created_at": Product.created_at,
    }
    sort_col = allowed.get(sort_by.lower(), Product.name)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": [_serialize(db, p) for p in items], "total": total, "page": page, "page_size": page_size}


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _serialize(db, _get_product(db, product_id), with_outstanding=True)


# =========================
# MANUAL PRODUCT REGISTRATION
# =========================
@router.post("/products", response_model=product_schemas.ProductResponse, status_code=201)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    code = norm_code(payload.code)
    if not code:
        raise HTTPException(status_code=400, detail="Product code is required")
    if db.query(Product).filter(Product.code == code).first():
        raise HTTPException(status_code=409, detail="Product code already exists")
    try:
        quantity = to_quantity(payload.quantity, allow_zero=True)
        with atomic(db):
            product = Product(code=code, name=payload.name.strip(), quantity=quantity,
                              unit_value=payload.unit_value)
            db.add(product)
    except DomainError as e:
        raise to_http(e)
    db.refresh(product)

    write_log(db, user_id=current_user.id, table="products", record_id=product.id,
              operation="CREATE", new=snapshot(product), ip=client_ip(request))
    return _serialize(db, product)


# =========================
# PARTIAL PRODUCT EDIT
# =========================
# Quantity is not editable here; it moves through invoices, withdrawals and returns only
@router.patch("/products/{product_id}", response_model=product_schemas.ProductResponse)
def edit_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    p = _get_product(db, product_id)
    old = snapshot(p)

    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(p, key, value)
    db.commit()
    db.refresh(p)

    write_log(db, user_id=current_user.id, table="products", record_id=p.id,
              operation="UPDATE", old=old, new=payload, ip=client_ip(request))
    return _serialize(db, p, with_outstanding=True)


# Soft delete; outstanding withdrawals can still be returned
@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    p = _get_product(db, product_id)
    old = snapshot(p)
    p.is_active = False
    db.commit()
    write_log(db, user_id=current_user.id, table="products", record_id=p.id,
              operation="DELETE", old=old, ip=client_ip(request))
    return {"success": True}
