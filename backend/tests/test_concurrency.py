"""Races against a file database: many sessions, one thread each."""
import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base, engine_options, use_immediate_transactions
from models.accommodation import Accommodation
from models.employee import Employee
from models.product import Product
from models.room import Room
from models.unit import Unit
from utils.capacity import assign
from utils.errors import DomainError, ErrorKind
from utils.stock_ledger import return_movement, withdraw

WORKERS = 10


@pytest.fixture
def file_sessions(tmp_path):
    url = f"sqlite:///{tmp_path / 'race.db'}"
    options = engine_options(url)
    options["connect_args"]["timeout"] = 30
    engine = use_immediate_transactions(create_engine(url, **options))
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _race(factory, work, n=WORKERS):
    """Runs work(session, i) in n threads released together; returns successes and error kinds."""
    barrier = threading.Barrier(n)
    lock = threading.Lock()
    ok, failed = [], []

    def run(i):
        session = factory()
        try:
            barrier.wait()
            work(session, i)
            with lock:
                ok.append(i)
        except DomainError as e:
            with lock:
                failed.append(e.kind)
        finally:
            session.close()

    threads = [threading.Thread(target=run, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return ok, failed


def _setup_stock(factory, quantity, employees):
    with factory() as s:
        unit = Unit(name="HEADQUARTERS")
        s.add(unit)
        s.flush()
        product = Product(code="EPI-001", name="GLOVES", quantity=Decimal(quantity))
        staff = [Employee(registration_number=f"R{i}", full_name=f"EMPLOYEE {i}", unit_id=unit.id)
                 for i in range(employees)]
        s.add(product)
        s.add_all(staff)
        s.commit()
        return product.id, [e.id for e in staff]


class TestStockRaces:

    def test_last_units_are_never_overdrawn(self, file_sessions):
        product_id, staff = _setup_stock(file_sessions, "5", WORKERS)

        ok, failed = _race(
            file_sessions,
            lambda s, i: withdraw(s, product_id=product_id, employee_id=staff[i], quantity=1),
        )

        assert len(ok) == 5
        assert failed == [ErrorKind.INSUFFICIENT_STOCK] * 5
        with file_sessions() as s:
            assert s.get(Product, product_id).quantity == Decimal("0")

    def test_concurrent_returns_credit_once(self, file_sessions):
        product_id, staff = _setup_stock(file_sessions, "3", 1)
        with file_sessions() as s:
            movement_id = withdraw(s, product_id=product_id, employee_id=staff[0], quantity="2").id

        ok, failed = _race(file_sessions, lambda s, i: return_movement(s, movement_id))

        assert len(ok) == 1
        assert failed == [ErrorKind.ALREADY_RETURNED] * (WORKERS - 1)
        with file_sessions() as s:
            assert s.get(Product, product_id).quantity == Decimal("3")


class TestRoomRaces:

    def test_last_bed_goes_to_exactly_one(self, file_sessions):
        with file_sessions() as s:
            unit = Unit(name="HEADQUARTERS")
            s.add(unit)
            s.flush()
            acc = Accommodation(name="HOUSE A", unit_id=unit.id)
            s.add(acc)
            s.flush()
            room = Room(name="101", accommodation_id=acc.id, bed_count=2)
            staff = [Employee(registration_number=f"R{i}", full_name=f"EMPLOYEE {i}", unit_id=unit.id)
                     for i in range(WORKERS)]
            s.add(room)
            s.add_all(staff)
            s.commit()
            room_id, staff_ids = room.id, [e.id for e in staff]

        ok, failed = _race(file_sessions, lambda s, i: assign(s, room_id, staff_ids[i]))

        assert len(ok) == 2
        assert failed == [ErrorKind.CAPACITY_EXCEEDED] * (WORKERS - 2)
        with file_sessions() as s:
            housed = s.query(Employee).filter(Employee.room_id == room_id).count()
            assert housed == 2
