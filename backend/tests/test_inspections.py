"""Accommodation inspections: unit scoping, photo references and soft deletes."""
import pytest

from models.inspection import Inspection
from models.log import Log


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
def house(make_accommodation, unit):
    return make_accommodation(unit)


def _create(client, headers, accommodation_id, **kw):
    body = {"accommodation_id": accommodation_id, "title": "monthly check", **kw}
    return client.post("/inspections", headers=headers, json=body)


class TestInspections:

    def test_create_with_photos(self, client, auth_headers, operator, house, make_employee, unit, db):
        inspector = make_employee(unit)
        res = _create(client, auth_headers(operator), house.id,
                      observations="broken window", employee_id=inspector.id,
                      photo_urls=["https://cdn.example.com/a.jpg", "  ", "https://cdn.example.com/b.jpg"])

        assert res.status_code == 201
        body = res.json()
        assert body["title"] == "MONTHLY CHECK"
        assert body["observations"] == "BROKEN WINDOW"
        assert body["status"] == "DONE"
        assert body["user_id"] == operator.id
        assert body["accommodation_name"] == house.name
        assert [p["photo_url"] for p in body["photos"]] == [
            "https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg",
        ]
        assert db.query(Log).filter(Log.table_name == "inspections", Log.operation == "CREATE").count() == 1

    def test_accommodation_of_another_unit_is_forbidden(self, client, auth_headers, operator, other_unit,
                                                        make_accommodation):
        foreign = make_accommodation(other_unit, name="FAR HOUSE")
        assert _create(client, auth_headers(operator), foreign.id).status_code == 403

    def test_employee_must_share_the_unit(self, client, auth_headers, operator, house, other_unit,
                                          make_employee):
        stranger = make_employee(other_unit)
        res = _create(client, auth_headers(operator), house.id, employee_id=stranger.id)
        assert res.status_code == 400

    def test_unknown_accommodation(self, client, auth_headers, operator):
        assert _create(client, auth_headers(operator), 999).status_code == 404

    def test_update_swaps_photos(self, client, auth_headers, operator, house):
        headers = auth_headers(operator)
        created = _create(client, headers, house.id, photo_urls=["old.jpg", "kept.jpg"]).json()

        res = client.patch(f"/inspections/{created['id']}", headers=headers,
                           json={"title": "follow-up", "add_photo_urls": ["new.jpg"],
                                 "remove_photo_urls": ["old.jpg"]})

        assert res.status_code == 200
        assert res.json()["title"] == "FOLLOW-UP"
        assert [p["photo_url"] for p in res.json()["photos"]] == ["kept.jpg", "new.jpg"]

    def test_list_is_scoped_and_newest_first(self, client, auth_headers, operator, house, other_unit,
                                             make_accommodation, make_user):
        headers = auth_headers(operator)
        _create(client, headers, house.id, title="first", inspection_date="2026-09-01T10:00:00")
        _create(client, headers, house.id, title="second", inspection_date="2026-10-01T10:00:00")
        foreign = make_accommodation(other_unit, name="FAR HOUSE")
        _create(client, auth_headers(make_user("admin", is_super_user=True)), foreign.id)

        res = client.get("/inspections", headers=headers)

        assert res.status_code == 200
        assert res.json()["total"] == 2
        assert [i["title"] for i in res.json()["items"]] == ["SECOND", "FIRST"]

        ranged = client.get("/inspections", headers=headers,
                            params={"date_from": "2026-09-15T00:00:00"}).json()
        assert [i["title"] for i in ranged["items"]] == ["SECOND"]

    def test_delete_hides_the_inspection(self, client, auth_headers, operator, house):
        headers = auth_headers(operator)
        created = _create(client, headers, house.id).json()

        assert client.delete(f"/inspections/{created['id']}", headers=headers).status_code == 200
        assert client.get(f"/inspections/{created['id']}", headers=headers).status_code == 404

    def test_bulk_delete_per_accommodation(self, client, auth_headers, operator, house, make_accommodation,
                                           unit, db):
        headers = auth_headers(operator)
        other_house = make_accommodation(unit, name="HOUSE B")
        for _ in range(3):
            _create(client, headers, house.id)
        survivor = _create(client, headers, other_house.id).json()

        res = client.delete(f"/inspections/accommodation/{house.id}", headers=headers)

        assert res.status_code == 200
        assert res.json()["deleted"] == 3
        assert db.query(Inspection).filter(Inspection.is_active == True).count() == 1  # noqa: E712
        assert client.get(f"/inspections/{survivor['id']}", headers=headers).status_code == 200
