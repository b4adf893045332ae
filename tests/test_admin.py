from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from config import Settings
from conftest import add_question
from main import create_app
from models import GeneratedQuestion

ADMIN = {"x-admin-token": "service"}


@pytest.fixture
def admin_client(tmp_path, seeded):
    settings = Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        SUPABASE_SERVICE_ROLE_KEY="service",
    )
    return TestClient(create_app(settings, database=seeded))


def test_admin_requires_configured_key(client):
    r = client.post("/api/admin/generated-questions/dedupe", json={})
    assert r.status_code == 500
    assert "error" in r.json()


def test_admin_rejects_wrong_token(admin_client):
    r = admin_client.post("/api/admin/generated-questions/dedupe", json={})
    assert r.status_code == 401
    r = admin_client.post(
        "/api/admin/generated-questions/dedupe", json={}, headers={"x-admin-token": "nope"}
    )
    assert r.status_code == 401


def test_dedupe_dry_run_then_apply(admin_client, seeded):
    add_question(seeded, "old", created_at=datetime(2025, 1, 1))
    add_question(seeded, "new", created_at=datetime(2025, 2, 1))
    add_question(seeded, "other", passage_id="p2", created_at=datetime(2025, 1, 1))

    r = admin_client.post("/api/admin/generated-questions/dedupe", json={}, headers=ADMIN)
    assert r.status_code == 200
    body = r.json()
    assert body["dryRun"] is True and body["duplicateCount"] == 1
    assert body["duplicates"][0]["id"] == "old"

    r = admin_client.post(
        "/api/admin/generated-questions/dedupe", json={"dryRun": False}, headers=ADMIN
    )
    assert r.json() == {"success": True, "deletedCount": 1, "deletedIds": ["old"]}
    with seeded.session() as db:
        assert {q.id for q in db.query(GeneratedQuestion)} == {"new", "other"}


def test_cleanup_matches_dummy_bodies(admin_client, seeded):
    add_question(seeded, "bad", body="The rise of social media has changed everything.")
    add_question(seeded, "good", passage_id="p2", body="What is the main idea?")

    r = admin_client.post("/api/admin/generated-questions/cleanup", json={}, headers=ADMIN)
    body = r.json()
    assert body["totalQuestions"] == 2 and body["badQuestionsCount"] == 1
    assert body["badQuestions"][0]["bodyPreview"].startswith("The rise")

    r = admin_client.post(
        "/api/admin/generated-questions/cleanup",
        json={"dryRun": False, "patterns": ["main idea"]},
        headers=ADMIN,
    )
    assert r.json()["deletedIds"] == ["good"]
