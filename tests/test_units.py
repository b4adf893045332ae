from sqlalchemy import text

from models import Unit


def test_reorder_units_updates_rows(client, seeded):
    r = client.put(
        "/api/units/reorder",
        json={"units": [{"id": "a", "order_index": 1}, {"id": "b", "order_index": 2}]},
    )
    assert r.status_code == 200
    assert r.json() == {"success": True}

    with seeded.session() as db:
        assert db.get(Unit, "a").order_index == 1
        assert db.get(Unit, "b").order_index == 2


def test_reorder_units_requires_list(client, seeded):
    r = client.put("/api/units/reorder", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Units array is required"}

    r = client.put("/api/units/reorder", json={"units": "a,b"})
    assert r.status_code == 400


def test_reorder_units_bad_item(client, seeded):
    r = client.put("/api/units/reorder", json={"units": [{"id": "a"}]})
    assert r.status_code == 400


def test_reorder_units_partial_failure(client, seeded):
    # unit b refuses updates; a is committed on its own
    with seeded.engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TRIGGER units_lock_b BEFORE UPDATE ON units WHEN OLD.id = 'b' "
                "BEGIN SELECT RAISE(ABORT, 'unit b is locked'); END"
            )
        )

    r = client.put(
        "/api/units/reorder",
        json={"units": [{"id": "a", "order_index": 7}, {"id": "b", "order_index": 8}]},
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to reorder units"}

    with seeded.session() as db:
        assert db.get(Unit, "a").order_index == 7
        assert db.get(Unit, "b").order_index == 1


def test_rename_unit(client, seeded):
    r = client.patch("/api/units/a", json={"name": "  Renamed  "})
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"

    r = client.patch("/api/units/a", json={"name": "   "})
    assert r.status_code == 400

    r = client.patch("/api/units/missing", json={"name": "x"})
    assert r.status_code == 404


def test_delete_unit(client, seeded):
    r = client.delete("/api/units/b")
    assert r.status_code == 200 and r.json() == {"success": True}
    with seeded.session() as db:
        assert db.get(Unit, "b") is None
