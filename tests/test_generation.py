from fastapi.testclient import TestClient

from config import Settings
from main import create_app


def test_generate_missing_is_501(client):
    r = client.post("/api/generation/generate-missing")
    assert r.status_code == 501
    assert r.json() == {"error": "Not implemented yet"}


def test_generate_missing_ignores_body(client):
    for body in ({"passageIds": ["p1"], "targetSlots": ["body"]}, {}, None):
        r = client.post("/api/generation/generate-missing", json=body)
        assert r.status_code == 501

    r = client.post(
        "/api/generation/generate-missing",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 501


def test_root_ok(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json().get("ok") is True


def test_client_key_required_when_configured(tmp_path):
    settings = Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'auth.db'}",
        SUPABASE_ANON_KEY="anon",
        SUPABASE_SERVICE_ROLE_KEY="service",
    )
    app = create_app(settings)
    app.state.db.create_all()
    c = TestClient(app)

    assert c.get("/api/generated-questions/all").status_code == 401
    assert c.get("/api/generated-questions/all", headers={"x-api-key": "wrong"}).status_code == 401
    assert c.get("/api/generated-questions/all", headers={"x-api-key": "anon"}).status_code == 200
    assert c.get("/api/generated-questions/all", headers={"x-admin-token": "service"}).status_code == 200
    # 401 keeps the error envelope
    assert c.get("/api/prompts").json() == {"error": "Unauthorized."}
