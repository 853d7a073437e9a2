# backend/models/types.py
from decimal import Decimal, ROUND_HALF_EVEN
from sqlalchemy import BigInteger, TypeDecorator

QUANTITY_SCALE = 1000
QUANTITY_STEP = Decimal("0.001")
# Largest quantity accepted anywhere; sums of many such values still fit the BigInteger column
QUANTITY_MAX = Decimal("999999999999.999")


class Quantity(TypeDecorator):
    """
    Decimal stock quantity stored as an integer number of thousandths.

    Keeps SQL-side arithmetic (``quantity - :q``, ``quantity >= :q``) exact on
    every backend, SQLite included, so repeated partial withdrawals and
    returns never drift.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        scaled = Decimal(str(value)).quantize(QUANTITY_STEP, rounding=ROUND_HALF_EVEN) * QUANTITY_SCALE
        return int(scaled)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return Decimal(value) / QUANTITY_SCALE

    def coerce_compared_value(self, op, value):
        # Literals compared with or added to a quantity column are quantities too
        return self
