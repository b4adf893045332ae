from datetime import datetime

from conftest import add_question
from models import GeneratedQuestion, QuestionType
from tools import maintenance


def test_lint_prompts(seeded, capsys):
    assert maintenance.main(["lint-prompts"], database=seeded) == 0
    assert "1/1 prompt templates reference [[passage]]" in capsys.readouterr().out

    assert maintenance.main(["lint-prompts", "--placeholder", "korean"], database=seeded) == 1
    assert "MISSING [[korean]]: Main idea (t1)" in capsys.readouterr().out


def test_dedupe_is_dry_run_by_default(seeded, capsys):
    add_question(seeded, "old", created_at=datetime(2025, 1, 1))
    add_question(seeded, "new", created_at=datetime(2025, 2, 1))

    assert maintenance.main(["dedupe-generated"], database=seeded) == 0
    assert "1 duplicate(s) found" in capsys.readouterr().out
    with seeded.session() as db:
        assert db.get(GeneratedQuestion, "old") is not None

    maintenance.main(["dedupe-generated", "--apply"], database=seeded)
    with seeded.session() as db:
        assert db.get(GeneratedQuestion, "old") is None


def test_cleanup_with_pattern(seeded, capsys):
    add_question(seeded, "q1", body="lorem ipsum")
    maintenance.main(["cleanup-generated", "--pattern", "lorem", "--apply"], database=seeded)
    assert "deleted 1 generated question(s)" in capsys.readouterr().out


def test_generation_report(seeded, capsys):
    add_question(seeded, "q1", status="completed")
    add_question(seeded, "q2", passage_id="p2", status="failed")
    assert maintenance.main(["generation-report", "--question-type", "Main idea"], database=seeded) == 0
    out = capsys.readouterr().out
    assert '2 generated question(s) for "Main idea"' in out
    assert "failed: 1" in out


def test_link_question_types(seeded, capsys):
    with seeded.session() as db:
        db.get(QuestionType, "qt1").prompt_template_id = None
        db.commit()

    maintenance.main(["link-question-types"], database=seeded)
    assert "1 question type(s) can be linked" in capsys.readouterr().out

    maintenance.main(["link-question-types", "--apply"], database=seeded)
    with seeded.session() as db:
        assert db.get(QuestionType, "qt1").prompt_template_id == "t1"


def test_delete_question_types_needs_yes(seeded):
    assert maintenance.main(["delete-question-types"], database=seeded) == 2
    assert maintenance.main(["delete-question-types", "--yes"], database=seeded) == 0
    with seeded.session() as db:
        assert db.query(QuestionType).count() == 0


def test_check_migrations_single_head(capsys):
    assert maintenance.main(["check-migrations"]) == 0
    assert "Alembic head OK: 0001_initial" in capsys.readouterr().out
