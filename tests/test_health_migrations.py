from sqlalchemy import text


def test_health_db(client):
    r = client.get("/health/db")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "dialect": "sqlite"}


def test_health_migrations_unstamped(client):
    r = client.get("/health/migrations")
    assert r.status_code == 200
    b = r.json()
    assert b["code_heads"] == ["0001_initial"]
    # tables come from create_all, so there is no alembic_version row
    assert b["db_version"] is None and b["ok"] is False


def test_health_migrations_synced(client, database):
    with database.engine.begin() as conn:
        conn.execute(text("CREATE TABLE alembic_version (version_num VARCHAR(32) NOT NULL)"))
        conn.execute(text("INSERT INTO alembic_version VALUES ('0001_initial')"))

    b = client.get("/health/migrations").json()
    assert b == {"ok": True, "synced": True, "db_version": "0001_initial", "code_heads": ["0001_initial"]}
