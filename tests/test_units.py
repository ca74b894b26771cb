from __future__ import annotations

import pytest

from lms_admin.constants import UserRole
from lms_admin.models import Unit


@pytest.fixture()
def admin(login_as):
    return login_as(UserRole.ADMIN)


def _category(client, name="Math") -> int:
    return client.post("/api/categories", json={"name": name}).get_json()["data"]["id"]


def _unit(client, name, **fields) -> dict:
    response = client.post("/api/units", json={"name": name, **fields})
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def _orders(client, category_id) -> list[tuple[str, int]]:
    units = client.get(f"/api/units?categoryId={category_id}").get_json()["data"]
    return [(u["name"], u["order"]) for u in units]


def test_create_unit_requires_name(client, admin) -> None:
    response = client.post("/api/units", json={"description": "x"})

    assert response.status_code == 400
    assert response.get_json()["message"] == "Unit name is required"


def test_create_unit_with_unknown_category_is_404(client, admin) -> None:
    response = client.post("/api/units", json={"name": "U", "categoryId": 77})

    assert response.status_code == 404
    assert response.get_json()["message"] == "Category not found"


def test_units_are_appended_per_category(client, admin) -> None:
    math = _category(client, "Math")
    art = _category(client, "Art")

    _unit(client, "Numbers", categoryId=math)
    _unit(client, "Colors", categoryId=art)
    _unit(client, "Fractions", categoryId=math)

    assert _orders(client, math) == [("Numbers", 0), ("Fractions", 1)]
    assert _orders(client, art) == [("Colors", 0)]


def test_create_unit_at_position_shifts_siblings(client, admin) -> None:
    math = _category(client)
    _unit(client, "A", categoryId=math)
    _unit(client, "B", categoryId=math)

    _unit(client, "Intro", categoryId=math, order=0)

    assert _orders(client, math) == [("Intro", 0), ("A", 1), ("B", 2)]


def test_list_filters_by_active_flag(client, admin) -> None:
    _unit(client, "On")
    _unit(client, "Off", isActive=False)

    active = client.get("/api/units?active=true").get_json()["data"]
    inactive = client.get("/api/units?active=false").get_json()["data"]

    assert [u["name"] for u in active] == ["On"]
    assert [u["name"] for u in inactive] == ["Off"]


def test_update_unit_fields(client, admin) -> None:
    unit = _unit(client, "Old", description="d")

    response = client.put(f"/api/units/{unit['id']}", json={"name": "New", "isActive": False})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["id"] == unit["id"]
    assert data["name"] == "New"
    assert data["description"] == "d"
    assert data["isActive"] is False


def test_update_missing_unit_is_404(client, admin) -> None:
    assert client.put("/api/units/5", json={"name": "x"}).status_code == 404


def test_update_with_stale_version_conflicts(client, admin) -> None:
    unit = _unit(client, "U")
    client.put(f"/api/units/{unit['id']}", json={"name": "U2"})

    response = client.put(f"/api/units/{unit['id']}", json={"name": "U3", "version": unit["version"]})

    assert response.status_code == 409


def test_moving_unit_to_other_category_renumbers_both(client, admin) -> None:
    math = _category(client, "Math")
    art = _category(client, "Art")
    first = _unit(client, "First", categoryId=math)
    _unit(client, "Second", categoryId=math)
    _unit(client, "Colors", categoryId=art)

    client.put(f"/api/units/{first['id']}", json={"categoryId": art})

    assert _orders(client, math) == [("Second", 0)]
    assert _orders(client, art) == [("Colors", 0), ("First", 1)]


def test_delete_unit_closes_gap(client, admin) -> None:
    math = _category(client)
    _unit(client, "A", categoryId=math)
    middle = _unit(client, "B", categoryId=math)
    _unit(client, "C", categoryId=math)

    response = client.delete(f"/api/units/{middle['id']}")

    assert response.status_code == 200
    assert _orders(client, math) == [("A", 0), ("C", 1)]
    assert client.get(f"/api/units/{middle['id']}").status_code == 404


def test_delete_missing_unit_is_404(client, admin) -> None:
    assert client.delete("/api/units/404").status_code == 404


def test_reorder_by_ids(client, admin) -> None:
    math = _category(client)
    a = _unit(client, "A", categoryId=math)
    b = _unit(client, "B", categoryId=math)
    c = _unit(client, "C", categoryId=math)

    response = client.post("/api/units/reorder", json={"ids": [c["id"], a["id"], b["id"]]})

    assert response.status_code == 200
    assert [u["name"] for u in response.get_json()["data"]] == ["C", "A", "B"]
    assert _orders(client, math) == [("C", 0), ("A", 1), ("B", 2)]


def test_partial_reorder_keeps_sequence_contiguous(client, admin) -> None:
    math = _category(client)
    _unit(client, "A", categoryId=math)
    _unit(client, "B", categoryId=math)
    c = _unit(client, "C", categoryId=math)
    _unit(client, "D", categoryId=math)

    client.post("/api/units/reorder", json={"units": [{"id": c["id"], "order": 0}]})

    assert _orders(client, math) == [("C", 0), ("A", 1), ("B", 2), ("D", 3)]


def test_reorder_with_unknown_id_changes_nothing(app, client, admin) -> None:
    math = _category(client)
    a = _unit(client, "A", categoryId=math)
    b = _unit(client, "B", categoryId=math)

    response = client.post("/api/units/reorder", json={"ids": [b["id"], a["id"], 999]})

    assert response.status_code == 404
    assert response.get_json()["errors"] == [{"id": 999}]
    assert _orders(client, math) == [("A", 0), ("B", 1)]


def test_reorder_with_stale_version_changes_nothing(client, admin) -> None:
    math = _category(client)
    a = _unit(client, "A", categoryId=math)
    b = _unit(client, "B", categoryId=math)
    client.put(f"/api/units/{a['id']}", json={"description": "edited elsewhere"})

    response = client.post(
        "/api/units/reorder",
        json={"units": [
            {"id": a["id"], "order": 1, "version": a["version"]},
            {"id": b["id"], "order": 0, "version": b["version"]},
        ]},
    )

    assert response.status_code == 409
    assert _orders(client, math) == [("A", 0), ("B", 1)]


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"ids": []},
        {"ids": [1, 1]},
        {"ids": ["1"]},
        {"units": [{"id": 1}]},
        {"units": [{"id": 1, "order": -1}]},
    ],
)
def test_reorder_rejects_malformed_payloads(client, admin, payload) -> None:
    _unit(client, "A")

    response = client.post("/api/units/reorder", json=payload)

    assert response.status_code == 400


def test_reorder_rejects_duplicate_positions_in_a_category(client, admin) -> None:
    math = _category(client)
    a = _unit(client, "A", categoryId=math)
    b = _unit(client, "B", categoryId=math)

    response = client.post(
        "/api/units/reorder",
        json={"units": [{"id": a["id"], "order": 0}, {"id": b["id"], "order": 0}]},
    )

    assert response.status_code == 400


def test_reorder_spanning_categories_renumbers_each(app, client, admin) -> None:
    math = _category(client, "Math")
    art = _category(client, "Art")
    m1 = _unit(client, "M1", categoryId=math)
    m2 = _unit(client, "M2", categoryId=math)
    a1 = _unit(client, "A1", categoryId=art)
    a2 = _unit(client, "A2", categoryId=art)

    response = client.post("/api/units/reorder", json={"units": [
        {"id": m2["id"], "order": 0},
        {"id": m1["id"], "order": 1},
        {"id": a2["id"], "order": 0},
        {"id": a1["id"], "order": 1},
    ]})

    assert response.status_code == 200
    assert _orders(client, math) == [("M2", 0), ("M1", 1)]
    assert _orders(client, art) == [("A2", 0), ("A1", 1)]
    with app.app_context():
        assert Unit.query.count() == 4


def test_employee_can_read_but_not_reorder(client, login_as) -> None:
    login_as(UserRole.EMPLOYEE)

    assert client.get("/api/units").status_code == 200
    assert client.post("/api/units/reorder", json={"ids": [1]}).status_code == 403
    assert client.post("/api/units", json={"name": "x"}).status_code == 403


def test_update_with_non_object_body_is_400(client, admin) -> None:
    unit = _unit(client, "Intro")

    response = client.put(f"/api/units/{unit['id']}", json=[{"name": "Renamed"}])

    assert response.status_code == 400
    assert response.get_json()["message"] == "Request body must be a JSON object"


def test_non_string_unit_name_is_rejected(client, admin) -> None:
    response = client.post("/api/units", json={"name": ["Intro"]})

    assert response.status_code == 400
    assert response.get_json()["message"] == "Unit name is required"
