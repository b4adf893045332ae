from models import QuestionType


def test_create_prompt_extracts_variables(client):
    r = client.post(
        "/api/prompts",
        json={"label": "Summary", "prompt": "Summarise [[passage]] in [[count]] lines, [[passage]]"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["variables"] == ["passage", "count"]
    assert body["category"] == "general" and body["status"] == "draft"


def test_create_prompt_requires_label(client):
    r = client.post("/api/prompts", json={"prompt": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "Prompt label is required"}


def test_list_filter_and_get(client):
    client.post("/api/prompts", json={"label": "A", "prompt": "", "category": "vocab"})
    client.post("/api/prompts", json={"label": "B", "prompt": "", "category": "grammar"})

    r = client.get("/api/prompts", params={"category": "vocab"})
    assert r.status_code == 200
    assert [p["label"] for p in r.json()] == ["A"]

    pid = r.json()[0]["id"]
    assert client.get(f"/api/prompts/{pid}").json()["label"] == "A"
    r = client.get("/api/prompts/nope")
    assert r.status_code == 404 and r.json() == {"error": "Prompt not found"}


def test_update_recomputes_variables(client, seeded):
    r = client.put("/api/prompts/t1", json={"prompt": "Only [[sentence]] now"})
    assert r.status_code == 200
    assert r.json()["variables"] == ["sentence"]

    r = client.put("/api/prompts/t1", json={"status": "confirmed"})
    assert r.json()["status"] == "confirmed"
    assert r.json()["variables"] == ["sentence"]

    assert client.put("/api/prompts/missing", json={"status": "x"}).status_code == 404


def test_delete_prompt_removes_its_question_types(client, seeded):
    r = client.delete("/api/prompts/t1")
    assert r.status_code == 200
    assert client.get("/api/prompts/t1").status_code == 404
    with seeded.session() as db:
        assert db.get(QuestionType, "qt1") is None


def test_render_with_passage(client, seeded):
    r = client.post("/api/prompts/t1/render", json={"passageId": "p1", "values": {"count": 5}})
    assert r.status_code == 200
    body = r.json()
    assert body["prompt"] == "Read The cat sat. and write 5 questions."
    assert body["missing"] == []


def test_render_reports_missing(client, seeded):
    r = client.post("/api/prompts/t1/render", json={"values": {"passage": "X"}})
    assert r.status_code == 200
    assert r.json()["missing"] == ["count"]
    assert "[[count]]" in r.json()["prompt"]


def test_render_unknown_passage_is_404(client, seeded):
    r = client.post("/api/prompts/t1/render", json={"passageId": "nope"})
    assert r.status_code == 404
    assert r.json() == {"error": "Passage not found"}


def test_lint(client, seeded):
    r = client.get("/api/prompts/t1/lint")
    assert r.json() == {"id": "t1", "placeholder": "passage", "present": True}

    r = client.get("/api/prompts/t1/lint", params={"placeholder": "korean"})
    assert r.json()["present"] is False
