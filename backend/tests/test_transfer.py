"""Inter-unit transfers: history and employee change commit together."""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func

import utils.transfer as transfer_module
from models.employee import Employee, EmployeeStatus
from models.transfer import TransferHistory
from utils.capacity import assign
from utils.errors import ErrorKind, TransferError
from utils.transfer import transfer_employee, transfer_employees

DEPARTURE = datetime(2026, 5, 4, 7, 0, tzinfo=timezone.utc)
ARRIVAL = DEPARTURE + timedelta(hours=9)


@pytest.fixture
def origin(make_unit):
    return make_unit("HEADQUARTERS")


@pytest.fixture
def destination(make_unit):
    return make_unit("NORTH SITE")


@pytest.fixture
def housed_employee(db, make_accommodation, make_room, make_employee, origin):
    room = make_room(make_accommodation(origin), bed_count=2)
    employee = make_employee(origin, observation="night shift", status=EmployeeStatus.ONBOARDED.value)
    assign(db, room.id, employee.id)
    return employee


def _history_count(db) -> int:
    return db.query(func.count(TransferHistory.id)).scalar()


class TestTransfer:

    def test_transfer_moves_employee_and_records_history(self, db, housed_employee, origin, destination):
        record = transfer_employee(db, housed_employee.id, destination.id, DEPARTURE, ARRIVAL,
                                   observation="bus 12")

        assert record.from_unit_id == origin.id
        assert record.to_unit_id == destination.id
        assert record.observation == "BUS 12"

        employee = db.get(Employee, housed_employee.id)
        db.refresh(employee)
        assert employee.unit_id == destination.id
        assert employee.room_id is None
        assert employee.accommodation_id is None
        assert employee.status == EmployeeStatus.AWAITING_ONBOARDING.value
        assert employee.departure_date.replace(tzinfo=None) == DEPARTURE.replace(tzinfo=None)

    def test_observation_keeps_previous_notes(self, db, housed_employee, destination):
        transfer_employee(db, housed_employee.id, destination.id, DEPARTURE, ARRIVAL, observation="bus 12")

        employee = db.get(Employee, housed_employee.id)
        db.refresh(employee)
        assert employee.observation == (
            "NIGHT SHIFT | TRANSFER ON 04/05/2026 07:00 FROM HEADQUARTERS TO NORTH SITE | OBS: BUS 12"
        )

    def test_failure_after_history_insert_rolls_back_both(self, db, monkeypatch, housed_employee, origin, destination):
        def broken(employee, note):
            raise RuntimeError("disk full")

        monkeypatch.setattr(transfer_module, "_append_observation", broken)

        with pytest.raises(RuntimeError):
            transfer_employee(db, housed_employee.id, destination.id, DEPARTURE, ARRIVAL)

        assert _history_count(db) == 0
        employee = db.get(Employee, housed_employee.id)
        db.refresh(employee)
        assert employee.unit_id == origin.id
        assert employee.room_id is not None

    def test_batch_is_all_or_nothing(self, db, make_employee, housed_employee, origin, destination):
        already_there = make_employee(destination)

        with pytest.raises(TransferError) as exc:
            transfer_employees(db, [housed_employee.id, already_there.id], destination.id, DEPARTURE, ARRIVAL)
        assert exc.value.kind == ErrorKind.INVALID_TRANSFER

        assert _history_count(db) == 0
        db.refresh(housed_employee)
        assert housed_employee.unit_id == origin.id

    def test_batch_transfer(self, db, make_employee, origin, destination):
        team = [make_employee(origin) for _ in range(3)]

        records = transfer_employees(db, [e.id for e in team], destination.id, DEPARTURE, ARRIVAL)

        assert [r.employee_id for r in records] == [e.id for e in team]
        assert db.query(Employee).filter(Employee.unit_id == destination.id).count() == 3

    def test_duplicate_ids_are_transferred_once(self, db, make_employee, origin, destination):
        employee = make_employee(origin)
        records = transfer_employees(db, [employee.id, employee.id], destination.id, DEPARTURE, ARRIVAL)
        assert len(records) == 1

    def test_arrival_before_departure(self, db, housed_employee, destination):
        with pytest.raises(TransferError) as exc:
            transfer_employee(db, housed_employee.id, destination.id, ARRIVAL, DEPARTURE)
        assert exc.value.kind == ErrorKind.INVALID_TRANSFER

    def test_inactive_destination(self, db, make_unit, housed_employee):
        closed = make_unit("CLOSED SITE", is_active=False)
        with pytest.raises(TransferError) as exc:
            transfer_employee(db, housed_employee.id, closed.id, DEPARTURE, ARRIVAL)
        assert exc.value.kind == ErrorKind.RESOURCE_INACTIVE

    def test_unknown_destination_and_employee(self, db, housed_employee, destination):
        with pytest.raises(TransferError) as exc:
            transfer_employee(db, housed_employee.id, 999, DEPARTURE, ARRIVAL)
        assert exc.value.kind == ErrorKind.NOT_FOUND

        with pytest.raises(TransferError) as exc:
            transfer_employee(db, 999, destination.id, DEPARTURE, ARRIVAL)
        assert exc.value.kind == ErrorKind.NOT_FOUND

    def test_empty_batch(self, db, destination):
        with pytest.raises(TransferError) as exc:
            transfer_employees(db, [], destination.id, DEPARTURE, ARRIVAL)
        assert exc.value.kind == ErrorKind.INVALID_TRANSFER
