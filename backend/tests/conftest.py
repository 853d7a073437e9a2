"""Shared fixtures: an in-memory database per test, builders for the domain
rows every test needs, and an API client bound to the same database."""
import os

# Settings are read at import time; keep tests away from any local .env database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from models.accommodation import Accommodation
from models.employee import Employee
from models.function import JobFunction
from models.inspection import Inspection, InspectionPhoto  # noqa: F401
from models.invoice import Invoice  # noqa: F401
from models.log import Log  # noqa: F401
from models.movement import ProductMovement  # noqa: F401
from models.product import Product
from models.room import Room
from models.transfer import TransferHistory  # noqa: F401
from models.unit import Unit
from models.users import User
from models.work_log import WorkLog  # noqa: F401
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# --- builders ---

@pytest.fixture
def make_unit(db):
    def _make(name="HEADQUARTERS", **kw):
        unit = Unit(name=name, **kw)
        db.add(unit)
        db.commit()
        return unit
    return _make


@pytest.fixture
def make_accommodation(db):
    def _make(unit, name="HOUSE A", **kw):
        acc = Accommodation(name=name, unit_id=unit.id, **kw)
        db.add(acc)
        db.commit()
        return acc
    return _make


@pytest.fixture
def make_room(db):
    def _make(accommodation, bed_count=2, name="101", **kw):
        room = Room(name=name, accommodation_id=accommodation.id, bed_count=bed_count, **kw)
        db.add(room)
        db.commit()
        return room
    return _make


@pytest.fixture
def make_employee(db):
    counter = iter(range(1, 10_000))

    def _make(unit, full_name=None, **kw):
        n = next(counter)
        employee = Employee(
            registration_number=kw.pop("registration_number", f"R{n:04d}"),
            full_name=full_name or f"EMPLOYEE {n}",
            unit_id=unit.id,
            **kw,
        )
        db.add(employee)
        db.commit()
        return employee
    return _make


@pytest.fixture
def make_product(db):
    def _make(code="EPI-001", quantity="10", name=None, **kw):
        product = Product(code=code, name=name or f"PRODUCT {code}", quantity=Decimal(quantity), **kw)
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def make_function(db):
    def _make(name="WELDER"):
        fn = JobFunction(name=name)
        db.add(fn)
        db.commit()
        return fn
    return _make


@pytest.fixture
def make_user(db):
    def _make(username="operator", is_super_user=False, unit=None, **kw):
        user = User(
            username=username,
            password_hash=get_password_hash(PASSWORD),
            name=kw.pop("name", username.title()),
            is_super_user=is_super_user,
            unit_id=unit.id if unit else None,
            **kw,
        )
        db.add(user)
        db.commit()
        return user
    return _make


# --- API ---

@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(data={'sub': user.username})}"}
    return _headers
