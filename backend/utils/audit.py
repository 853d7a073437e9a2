import logging
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import inspect
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)


def snapshot(obj) -> dict:
    """Column values of an ORM object as a JSON-safe dict."""
    if obj is None:
        return None
    data = {}
    for attr in inspect(obj).mapper.column_attrs:
        value = getattr(obj, attr.key)
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, (datetime, date, time)):
            value = value.isoformat()
        data[attr.key] = value
    return data


def _json_safe(data):
    if data is None or isinstance(data, dict) and not data:
        return data
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", exclude_unset=True)
    return {k: (str(v) if isinstance(v, (Decimal, datetime, date, time)) else v) for k, v in dict(data).items()}


def write_log(db: Session, *, user_id, table, record_id, operation, old=None, new=None, ip=None):
    # Fire-and-forget: a failing audit write never fails the operation it describes
    try:
        entry = Log(
            user_id=user_id, table_name=table, record_id=record_id, operation=operation,
            ip=ip, old_data=_json_safe(old), new_data=_json_safe(new),
        )
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Audit write failed for %s #%s (%s)", table, record_id, operation)


def client_ip(request) -> str:
    if request is None or request.client is None:
        return None
    return request.client.host
