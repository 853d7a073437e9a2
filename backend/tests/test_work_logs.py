"""Work-hour logging over the HTTP surface."""
import pytest

from models.work_log import WorkLog


@pytest.fixture
def unit(make_unit):
    return make_unit()


@pytest.fixture
def other_unit(make_unit):
    return make_unit("NORTH SITE")


@pytest.fixture
def operator(make_user, unit):
    return make_user("operator", unit=unit)


@pytest.fixture
def worker(make_employee, unit):
    return make_employee(unit, full_name="JOHN SMITH")


def _day(employee_id, work_date="2026-10-05", **times):
    return {"employee_id": employee_id, "work_date": work_date, **times}


class TestWorkLogs:

    def test_log_a_split_day(self, client, auth_headers, operator, worker, unit):
        res = client.post("/work-logs", headers=auth_headers(operator), json=_day(
            worker.id, entry_time_1="07:00", exit_time_1="11:00", entry_time_2="12:00", exit_time_2="16:30",
        ))

        assert res.status_code == 201
        body = res.json()
        assert body["employee_name"] == "JOHN SMITH"
        assert body["unit_id"] == unit.id
        assert body["user_id"] == operator.id
        assert body["worked_minutes"] == 240 + 270

    def test_night_shift(self, client, auth_headers, operator, worker):
        res = client.post("/work-logs", headers=auth_headers(operator),
                          json=_day(worker.id, entry_time_1="22:00", exit_time_1="06:00"))
        assert res.status_code == 201
        assert res.json()["worked_minutes"] == 480

    def test_overlapping_shifts_are_rejected(self, client, auth_headers, operator, worker, db):
        res = client.post("/work-logs", headers=auth_headers(operator), json=_day(
            worker.id, entry_time_1="08:00", exit_time_1="12:00", entry_time_2="11:00", exit_time_2="17:00",
        ))
        assert res.status_code == 400
        assert res.json()["detail"]["kind"] == "INVALID_SHIFT"
        assert db.query(WorkLog).count() == 0

    def test_one_log_per_employee_and_day(self, client, auth_headers, operator, worker):
        headers = auth_headers(operator)
        assert client.post("/work-logs", headers=headers, json=_day(worker.id, entry_time_1="08:00")).status_code == 201

        again = client.post("/work-logs", headers=headers, json=_day(worker.id, entry_time_1="09:00"))
        assert again.status_code == 409
        assert again.json()["detail"]["kind"] == "DUPLICATE"

        next_day = client.post("/work-logs", headers=headers, json=_day(worker.id, work_date="2026-10-06"))
        assert next_day.status_code == 201

    def test_update_checks_the_merged_day(self, client, auth_headers, operator, worker):
        headers = auth_headers(operator)
        created = client.post("/work-logs", headers=headers, json=_day(
            worker.id, entry_time_1="08:00", exit_time_1="12:00",
        )).json()

        bad = client.patch(f"/work-logs/{created['id']}", headers=headers,
                           json={"entry_time_2": "10:00", "exit_time_2": "15:00"})
        assert bad.status_code == 400

        good = client.patch(f"/work-logs/{created['id']}", headers=headers,
                            json={"entry_time_2": "13:00", "exit_time_2": "15:00"})
        assert good.status_code == 200
        assert good.json()["worked_minutes"] == 240 + 120

        # Clearing the second shift from a time input
        cleared = client.patch(f"/work-logs/{created['id']}", headers=headers,
                               json={"entry_time_2": "", "exit_time_2": ""})
        assert cleared.status_code == 200
        assert cleared.json()["entry_time_2"] is None
        assert cleared.json()["worked_minutes"] == 240

    def test_moving_onto_a_taken_day(self, client, auth_headers, operator, worker):
        headers = auth_headers(operator)
        client.post("/work-logs", headers=headers, json=_day(worker.id, work_date="2026-10-05"))
        second = client.post("/work-logs", headers=headers, json=_day(worker.id, work_date="2026-10-06")).json()

        res = client.patch(f"/work-logs/{second['id']}", headers=headers, json={"work_date": "2026-10-05"})
        assert res.status_code == 409

    def test_inactive_employee(self, client, auth_headers, operator, make_employee, unit):
        gone = make_employee(unit, is_active=False)
        res = client.post("/work-logs", headers=auth_headers(operator), json=_day(gone.id))
        assert res.status_code == 400

    def test_other_unit_is_forbidden_and_hidden(self, client, auth_headers, operator, other_unit,
                                                make_employee, make_user, worker):
        stranger = make_employee(other_unit)
        assert client.post("/work-logs", headers=auth_headers(operator),
                           json=_day(stranger.id)).status_code == 403

        admin = make_user("admin", is_super_user=True)
        foreign = client.post("/work-logs", headers=auth_headers(admin), json=_day(stranger.id)).json()
        client.post("/work-logs", headers=auth_headers(operator), json=_day(worker.id))

        listed = client.get("/work-logs", headers=auth_headers(operator)).json()
        assert listed["total"] == 1
        assert listed["items"][0]["employee_id"] == worker.id
        assert client.get(f"/work-logs/{foreign['id']}", headers=auth_headers(operator)).status_code == 403

        everything = client.get("/work-logs", headers=auth_headers(admin)).json()
        assert everything["total"] == 2

    def test_delete_removes_the_row(self, client, auth_headers, operator, worker, db):
        headers = auth_headers(operator)
        created = client.post("/work-logs", headers=headers, json=_day(worker.id)).json()

        assert client.delete(f"/work-logs/{created['id']}", headers=headers).status_code == 200
        assert db.query(WorkLog).count() == 0
        assert client.get(f"/work-logs/{created['id']}", headers=headers).status_code == 404
