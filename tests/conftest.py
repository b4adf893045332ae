import pytest
from fastapi.testclient import TestClient

from config import Settings
from db import Database
from main import create_app
from models import GeneratedQuestion, Group, Passage, PromptTemplate, QuestionType, Textbook, Unit


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def client(settings, database):
    app = create_app(settings, database=database)
    return TestClient(app)


@pytest.fixture
def seeded(database):
    """One group/textbook/unit tree with two passages, a template and a question type."""
    with database.session() as db:
        g = Group(id="g1", name="Grade 1")
        tb = Textbook(id="tb1", group_id="g1", name="Reading 1")
        u1 = Unit(id="a", textbook_id="tb1", name="Unit A", order_index=0)
        u2 = Unit(id="b", textbook_id="tb1", name="Unit B", order_index=1)
        p1 = Passage(id="p1", unit_id="a", name="P1", content="The cat sat.")
        p2 = Passage(id="p2", unit_id="a", name="P2", content="The dog ran.")
        tpl = PromptTemplate(
            id="t1",
            label="Main idea",
            prompt="Read [[passage]] and write [[count]] questions.",
            variables=["passage", "count"],
        )
        qt = QuestionType(id="qt1", name="Main idea", prompt_template_id="t1")
        db.add_all([g, tb, u1, u2, p1, p2, tpl, qt])
        db.commit()
    return database


def add_question(database, qid, passage_id="p1", question_type_id="qt1", **kw):
    with database.session() as db:
        db.add(
            GeneratedQuestion(
                id=qid, passage_id=passage_id, question_type_id=question_type_id, **kw
            )
        )
        db.commit()
