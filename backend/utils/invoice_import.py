# utils/invoice_import.py
"""
Supplier invoice (NF-e) ingestion: every item raises the stock of the
product with the same code, creating the product on first sight.
"""
import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.invoice import Invoice, InvoiceItem
from models.product import Product
from schemas.invoice import InvoiceCreate, InvoiceItemCreate
from utils.errors import ErrorKind, InvoiceError, atomic
from utils.stock_ledger import receive, to_quantity

logger = logging.getLogger(__name__)


def norm_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    c = code.strip().upper()
    return c if c else None


def _text(node, path: str) -> Optional[str]:
    if node is None:
        return None
    found = node.find(path)
    if found is None or found.text is None:
        return None
    return found.text.strip()


def _decimal(raw: Optional[str], field: str) -> Decimal:
    try:
        return Decimal(raw or "0")
    except InvalidOperation:
        raise InvoiceError(ErrorKind.INVALID_DOCUMENT, f"Invalid number in <{field}>: {raw!r}")


def _issue_date(ide) -> Optional[datetime]:
    raw = _text(ide, "{*}dhEmi") or _text(ide, "{*}dEmi")
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def parse_nfe_xml(xml_content: str) -> InvoiceCreate:
    """Reads an NF-e document (any layout version, namespaced or not)."""
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise InvoiceError(ErrorKind.INVALID_DOCUMENT, f"Malformed XML: {e}")

    inf = root if root.tag.endswith("infNFe") else root.find(".//{*}infNFe")
    ide = root.find(".//{*}ide")
    emit = root.find(".//{*}emit")
    if inf is None or ide is None or emit is None:
        raise InvoiceError(ErrorKind.INVALID_DOCUMENT, "Not an NF-e document (infNFe/ide/emit missing)")

    access_key = (inf.get("Id") or "").removeprefix("NFe") or None

    items = []
    for det in root.findall(".//{*}det"):
        prod = det.find("{*}prod")
        if prod is None:
            continue
        items.append(InvoiceItemCreate(
            product_code=_text(prod, "{*}cProd") or "",
            product_name=_text(prod, "{*}xProd") or "",
            quantity=_decimal(_text(prod, "{*}qCom"), "qCom"),
            unit_value=_decimal(_text(prod, "{*}vUnCom"), "vUnCom"),
            total_value=_decimal(_text(prod, "{*}vProd"), "vProd"),
        ))

    return InvoiceCreate(
        number=_text(ide, "{*}nNF") or "",
        series=_text(ide, "{*}serie"),
        code=_text(ide, "{*}cNF"),
        issuer_name=_text(emit, "{*}xNome") or "",
        issuer_tax_id=_text(emit, "{*}CNPJ") or _text(emit, "{*}CPF") or "",
        issue_date=_issue_date(ide),
        access_key=access_key,
        total_value=_decimal(_text(root.find(".//{*}ICMSTot"), "{*}vNF"), "vNF"),
        xml_content=xml_content,
        items=items,
    )


def _stock_in(db: Session, item: InvoiceItemCreate) -> Product:
    code = norm_code(item.product_code)
    if not code:
        raise InvoiceError(ErrorKind.INVALID_DOCUMENT, f"Item '{item.product_name}' has no product code")
    qty = to_quantity(item.quantity)

    product = db.query(Product).filter(Product.code == code).first()
    if product is None:
        product = Product(code=code, name=item.product_name, quantity=qty, unit_value=item.unit_value)
        db.add(product)
        db.flush()
        return product

    receive(db, product.id, qty)
    # Latest purchase price wins
    product.unit_value = item.unit_value
    if not product.is_active:
        product.is_active = True
    return product


def ingest_invoice(db: Session, data: InvoiceCreate, user_id: Optional[int] = None) -> Invoice:
    if not data.items:
        raise InvoiceError(ErrorKind.INVALID_DOCUMENT, "Invoice has no items")
    if data.access_key and db.query(Invoice.id).filter(Invoice.access_key == data.access_key).first():
        raise InvoiceError(ErrorKind.DUPLICATE, f"Invoice {data.access_key} was already imported")

    try:
        with atomic(db):
            invoice = Invoice(
                number=data.number, series=data.series, code=data.code,
                issuer_name=data.issuer_name, issuer_tax_id=data.issuer_tax_id,
                issue_date=data.issue_date, access_key=data.access_key,
                xml_content=data.xml_content, total_value=data.total_value,
                created_by=user_id,
            )
            for item in data.items:
                product = _stock_in(db, item)
                invoice.items.append(InvoiceItem(
                    product_id=product.id,
                    product_code=product.code,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_value=item.unit_value,
                    total_value=item.total_value if item.total_value is not None else item.unit_value * item.quantity,
                ))
            db.add(invoice)
            db.flush()
            invoice_id = invoice.id
    except IntegrityError as e:
        # Two imports racing on the same access key or the same new product code
        logger.warning("Invoice import conflict: %s", e.orig)
        raise InvoiceError(ErrorKind.DUPLICATE, "Invoice or product code registered concurrently, retry") from e

    logger.info("Invoice %s imported with %s item(s)", invoice_id, len(data.items))
    return db.get(Invoice, invoice_id)
