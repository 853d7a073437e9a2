"""Supplier invoice ingestion, by hand and from NF-e XML."""
from decimal import Decimal

import pytest

from models.invoice import Invoice
from models.product import Product
from schemas.invoice import InvoiceCreate, InvoiceItemCreate
from utils.errors import DomainError, ErrorKind, InvoiceError
from utils.invoice_import import ingest_invoice, parse_nfe_xml

ACCESS_KEY = "35260512345678000199550010000012341000012345"

NFE_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<nfeProc xmlns="http://www.portalfiscal.inf.br/nfe" versao="4.00">
  <NFe>
    <infNFe Id="NFe{ACCESS_KEY}" versao="4.00">
      <ide>
        <cNF>00001234</cNF>
        <serie>1</serie>
        <nNF>1234</nNF>
        <dhEmi>2026-05-02T10:15:00-03:00</dhEmi>
      </ide>
      <emit>
        <CNPJ>12345678000199</CNPJ>
        <xNome>EPI SUPPLIES LTDA</xNome>
      </emit>
      <det nItem="1">
        <prod>
          <cProd>epi-001 </cProd>
          <xProd>SAFETY HELMET</xProd>
          <qCom>10.0000</qCom>
          <vUnCom>35.9000000000</vUnCom>
          <vProd>359.00</vProd>
        </prod>
      </det>
      <det nItem="2">
        <prod>
          <cProd>CAB-010</cProd>
          <xProd>ELECTRIC CABLE 2.5MM</xProd>
          <qCom>100.5000</qCom>
          <vUnCom>3.2000000000</vUnCom>
          <vProd>321.60</vProd>
        </prod>
      </det>
      <total>
        <ICMSTot>
          <vNF>680.60</vNF>
        </ICMSTot>
      </total>
    </infNFe>
  </NFe>
</nfeProc>
"""


def _invoice(access_key=None, *items):
    return InvoiceCreate(
        number="77",
        issuer_name="LOCAL STORE",
        access_key=access_key,
        items=list(items) or [InvoiceItemCreate(product_code="EPI-001", product_name="SAFETY HELMET",
                                                quantity=Decimal("5"), unit_value=Decimal("30"))],
    )


class TestParseNfe:

    def test_header_and_items(self):
        parsed = parse_nfe_xml(NFE_XML)

        assert parsed.access_key == ACCESS_KEY
        assert parsed.number == "1234"
        assert parsed.series == "1"
        assert parsed.code == "00001234"
        assert parsed.issuer_name == "EPI SUPPLIES LTDA"
        assert parsed.issuer_tax_id == "12345678000199"
        assert parsed.total_value == Decimal("680.60")
        assert parsed.issue_date.year == 2026
        assert [(i.product_code, i.quantity) for i in parsed.items] == [
            ("epi-001", Decimal("10.0000")),
            ("CAB-010", Decimal("100.5000")),
        ]

    def test_malformed_xml(self):
        with pytest.raises(InvoiceError) as exc:
            parse_nfe_xml("<nfeProc><NFe>")
        assert exc.value.kind == ErrorKind.INVALID_DOCUMENT

    def test_xml_that_is_not_an_nfe(self):
        with pytest.raises(InvoiceError) as exc:
            parse_nfe_xml("<catalog><item/></catalog>")
        assert exc.value.kind == ErrorKind.INVALID_DOCUMENT


class TestIngest:

    def test_xml_import_creates_products_with_stock(self, db):
        invoice = ingest_invoice(db, parse_nfe_xml(NFE_XML))

        assert len(invoice.items) == 2
        helmet = db.query(Product).filter(Product.code == "EPI-001").one()
        cable = db.query(Product).filter(Product.code == "CAB-010").one()
        assert helmet.quantity == Decimal("10")
        assert cable.quantity == Decimal("100.5")
        assert helmet.unit_value == Decimal("35.9")

    def test_existing_product_is_restocked_at_latest_price(self, db, make_product):
        product = make_product(code="EPI-001", quantity="2", unit_value=Decimal("20"))

        ingest_invoice(db, _invoice())

        db.refresh(product)
        assert product.quantity == Decimal("7")
        assert product.unit_value == Decimal("30")

    def test_inactive_product_is_reactivated(self, db, make_product):
        product = make_product(code="EPI-001", quantity="0", is_active=False)
        ingest_invoice(db, _invoice())
        db.refresh(product)
        assert product.is_active is True

    def test_duplicate_access_key_is_rejected(self, db):
        ingest_invoice(db, parse_nfe_xml(NFE_XML))

        with pytest.raises(InvoiceError) as exc:
            ingest_invoice(db, parse_nfe_xml(NFE_XML))
        assert exc.value.kind == ErrorKind.DUPLICATE

        helmet = db.query(Product).filter(Product.code == "EPI-001").one()
        assert helmet.quantity == Decimal("10")
        assert db.query(Invoice).count() == 1

    def test_invoices_without_key_may_repeat(self, db):
        ingest_invoice(db, _invoice())
        ingest_invoice(db, _invoice())
        assert db.query(Invoice).count() == 2

    def test_bad_item_rolls_back_whole_invoice(self, db):
        good = InvoiceItemCreate(product_code="GOOD", product_name="GOOD", quantity=Decimal("1"))
        bad = InvoiceItemCreate(product_code="BAD", product_name="BAD", quantity=Decimal("-1"))

        with pytest.raises(DomainError) as exc:
            ingest_invoice(db, _invoice(None, good, bad))
        assert exc.value.kind == ErrorKind.INVALID_QUANTITY

        assert db.query(Product).count() == 0
        assert db.query(Invoice).count() == 0

    def test_oversized_item_quantity(self, db):
        item = InvoiceItemCreate(product_code="BULK", product_name="BULK", quantity=Decimal("1E+30"))
        with pytest.raises(DomainError) as exc:
            ingest_invoice(db, _invoice(None, item))
        assert exc.value.kind == ErrorKind.INVALID_QUANTITY
        assert db.query(Product).count() == 0

    def test_item_without_code(self, db):
        item = InvoiceItemCreate(product_code="  ", product_name="MYSTERY", quantity=Decimal("1"))
        with pytest.raises(InvoiceError) as exc:
            ingest_invoice(db, _invoice(None, item))
        assert exc.value.kind == ErrorKind.INVALID_DOCUMENT

    def test_invoice_without_items(self, db):
        empty = InvoiceCreate(number="1", issuer_name="X", items=[])
        with pytest.raises(InvoiceError) as exc:
            ingest_invoice(db, empty)
        assert exc.value.kind == ErrorKind.INVALID_DOCUMENT
