# backend/utils/errors.py
"""
Business-rule errors raised by the capacity, stock and transfer rules.

Every failure carries an ErrorKind so the HTTP layer can translate it into a
user-facing response; nothing below the routes turns these into messages.
"""
import enum
import logging
from contextlib import contextmanager

from fastapi import HTTPException
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    RESOURCE_INACTIVE = "RESOURCE_INACTIVE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ALREADY_RETURNED = "ALREADY_RETURNED"
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT_IO = "TRANSIENT_IO"
    # Room of another unit than the employee's
    UNIT_MISMATCH = "UNIT_MISMATCH"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    DUPLICATE = "DUPLICATE"
    INVALID_TRANSFER = "INVALID_TRANSFER"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    INVALID_SHIFT = "INVALID_SHIFT"


class DomainError(Exception):
    """Base class for all business-rule errors."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class CapacityError(DomainError):
    """Room assignment rejected."""


class StockError(DomainError):
    """Withdrawal, update or return rejected by the stock ledger."""


class TransferError(DomainError):
    """Unit transfer rejected."""


class InvoiceError(DomainError):
    """Invoice ingestion rejected."""


# Business-rule violations are the caller's to fix (400); the rest map 1:1
HTTP_STATUS = {
    ErrorKind.CAPACITY_EXCEEDED: 400,
    ErrorKind.RESOURCE_INACTIVE: 400,
    ErrorKind.INSUFFICIENT_STOCK: 400,
    ErrorKind.INVALID_QUANTITY: 400,
    ErrorKind.UNIT_MISMATCH: 400,
    ErrorKind.INVALID_TRANSFER: 400,
    ErrorKind.INVALID_DOCUMENT: 400,
    ErrorKind.INVALID_SHIFT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_RETURNED: 409,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.TRANSIENT_IO: 503,
}


def to_http(exc: DomainError) -> HTTPException:
    return HTTPException(
        status_code=HTTP_STATUS.get(exc.kind, 400),
        detail={"kind": exc.kind.value, "message": exc.message},
    )


@contextmanager
def atomic(db: Session):
    """
    Runs a block as one transaction: commit on success, rollback on any error.

    Connection loss and statement timeouts surface as DomainError(TRANSIENT_IO).
    The write half of a check-then-write is never retried here; the caller
    decides after reconciling.
    """
    try:
        yield
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        logger.warning("Database round trip failed: %s", e)
        raise DomainError(ErrorKind.TRANSIENT_IO, "Database temporarily unavailable") from e
    except DBAPIError as e:
        db.rollback()
        if e.connection_invalidated:
            logger.warning("Database connection lost: %s", e)
            raise DomainError(ErrorKind.TRANSIENT_IO, "Database connection lost") from e
        raise
    except Exception:
        db.rollback()
        raise
