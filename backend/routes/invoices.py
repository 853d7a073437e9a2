# backend/routes/invoices.py
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from models.invoice import Invoice
from models.users import User
from utils.audit import client_ip, write_log
from utils.errors import DomainError, to_http
from utils.invoice_import import ingest_invoice, parse_nfe_xml
from utils.tokenJWT import get_current_user
from schemas.invoice import InvoiceCreate, InvoiceListPage, InvoiceResponse

router = APIRouter(prefix="/invoices", tags=["Invoices"])

XML_CONTENT_TYPES = {"text/xml", "application/xml", "application/octet-stream"}


def _summary(invoice: Invoice) -> dict:
    return {
        "number": invoice.number,
        "issuer_name": invoice.issuer_name,
        "access_key": invoice.access_key,
        "items": len(invoice.items),
    }


async def _read_xml(file: UploadFile) -> str:
    if file.content_type and file.content_type not in XML_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type, XML expected")
    raw = await file.read()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")
    finally:
        await file.close()


@router.get("", response_model=InvoiceListPage)
def list_invoices(
    q: Optional[str] = Query(None, description="Search by number, issuer or access key"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Invoice)
    if q:
        like = f"%{q}%"
        query = query.filter(
            Invoice.number.ilike(like) | Invoice.issuer_name.ilike(like) | Invoice.access_key.ilike(like)
        )
    total = query.count()
    items = (query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
             .offset((page - 1) * page_size).limit(page_size).all())
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


# Register an invoice typed in by hand; items raise product stock
@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        invoice = ingest_invoice(db, payload, user_id=current_user.id)
    except DomainError as e:
        raise to_http(e)
    write_log(db, user_id=current_user.id, table="invoices", record_id=invoice.id,
              operation="CREATE", new=_summary(invoice), ip=client_ip(request))
    return invoice


# Parse an NF-e XML without storing anything, for review before import
@router.post("/xml/preview", response_model=InvoiceCreate)
async def preview_invoice_xml(file: UploadFile = File(...), current_user: User = Depends(get_current_user)):
    xml_content = await _read_xml(file)
    try:
        parsed = parse_nfe_xml(xml_content)
    except DomainError as e:
        raise to_http(e)
    parsed.xml_content = None
    return parsed


@router.post("/xml", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def import_invoice_xml(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    xml_content = await _read_xml(file)
    try:
        invoice = ingest_invoice(db, parse_nfe_xml(xml_content), user_id=current_user.id)
    except DomainError as e:
        raise to_http(e)
    write_log(db, user_id=current_user.id, table="invoices", record_id=invoice.id,
              operation="IMPORT_XML", new=_summary(invoice), ip=client_ip(request))
    return invoice
