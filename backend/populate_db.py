import os
import sys
from datetime import datetime, timezone
from decimal import Decimal

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

# Database models and setup
from database import SessionLocal, init_db
from models.unit import Unit
from models.function import JobFunction
from models.users import User
from models.accommodation import Accommodation
from models.room import Room
from models.product import Product
from utils.hashing import get_password_hash

# Configuration
ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
UNITS = ["HEADQUARTERS", "NORTH SITE"]
FUNCTIONS = ["ELECTRICIAN", "WELDER", "MASON", "DRIVER", "COOK"]
# (accommodation, [(room, beds), ...]) created in every unit
HOUSING = [
    ("HOUSE A", [("101", 2), ("102", 4), ("103", 4)]),
    ("HOUSE B", [("201", 3), ("202", 3)]),
]
PRODUCTS = [
    ("EPI-001", "SAFETY HELMET", Decimal("40"), Decimal("35.90")),
    ("EPI-002", "SAFETY BOOTS 42", Decimal("25"), Decimal("129.00")),
    ("EPI-003", "LEATHER GLOVES", Decimal("120"), Decimal("12.50")),
    ("CAB-010", "ELECTRIC CABLE 2.5MM (M)", Decimal("350.5"), Decimal("3.20")),
    ("BED-001", "BED SHEET SET", Decimal("60"), Decimal("49.90")),
]
# End Configuration


def _get_or_create(session, model, defaults=None, **lookup):
    instance = session.query(model).filter_by(**lookup).first()
    if instance:
        return instance, False
    instance = model(**lookup, **(defaults or {}))
    session.add(instance)
    session.flush()
    return instance, True


def populate():
    """Seeds a super user, units, housing, job functions and a starting stock."""
    init_db()
    session = SessionLocal()
    try:
        units = [_get_or_create(session, Unit, name=name)[0] for name in UNITS]

        _, created = _get_or_create(
            session, User, username=ADMIN_USERNAME,
            defaults={"password_hash": get_password_hash(ADMIN_PASSWORD), "name": "Administrator",
                      "is_super_user": True},
        )
        if created:
            print(f"Super user '{ADMIN_USERNAME}' created.")

        for name in FUNCTIONS:
            _get_or_create(session, JobFunction, name=name)

        rooms = 0
        for unit in units:
            for acc_name, room_defs in HOUSING:
                acc, _ = _get_or_create(session, Accommodation, name=acc_name, unit_id=unit.id)
                for room_name, beds in room_defs:
                    _, created = _get_or_create(session, Room, name=room_name, accommodation_id=acc.id,
                                                defaults={"bed_count": beds})
                    rooms += created

        products = 0
        for code, name, quantity, unit_value in PRODUCTS:
            _, created = _get_or_create(session, Product, code=code,
                                        defaults={"name": name, "quantity": quantity, "unit_value": unit_value})
            products += created

        session.commit()
        print(f"Seed finished at {datetime.now(timezone.utc):%Y-%m-%d %H:%M}: "
              f"{len(units)} units, {rooms} new rooms, {products} new products.")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    populate()
