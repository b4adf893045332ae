#!/usr/bin/env python
"""
Administrative commands run against the same data layer as the API.

    python tools/maintenance.py lint-prompts --placeholder passage
    python tools/maintenance.py dedupe-generated --apply
    python tools/maintenance.py check-migrations

Mutating commands are dry runs unless --apply (or --yes) is given.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from alembic.config import Config  # noqa: E402
from alembic.script import ScriptDirectory  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

import crud  # noqa: E402
from config import get_settings  # noqa: E402
from db import Database  # noqa: E402

logger = logging.getLogger("content-admin.maintenance")


def cmd_lint_prompts(db: Session, args: argparse.Namespace) -> int:
    missing = crud.templates_missing_placeholder(db, args.placeholder)
    total = len(crud.list_prompt_templates(db))
    for tpl in missing:
        print(f"MISSING [[{args.placeholder}]]: {tpl.label} ({tpl.id})")
    print(f"{total - len(missing)}/{total} prompt templates reference [[{args.placeholder}]]")
    return 1 if missing else 0


def cmd_dedupe_generated(db: Session, args: argparse.Namespace) -> int:
    dupes = crud.find_duplicate_generated(db)
    for q in dupes:
        print(f"duplicate: {q.id} passage={q.passage_id} type={q.question_type_id} at {q.created_at}")
    if not args.apply:
        print(f"{len(dupes)} duplicate(s) found (dry run; pass --apply to delete)")
        return 0
    n = crud.delete_generated_ids(db, [q.id for q in dupes])
    print(f"deleted {n} duplicate generated question(s)")
    return 0


def cmd_cleanup_generated(db: Session, args: argparse.Namespace) -> int:
    patterns = args.pattern or list(crud.DUMMY_BODY_PATTERNS)
    bad = crud.find_dummy_generated(db, patterns)
    for q in bad:
        print(f"dummy body: {q.id} passage={q.passage_id} {(q.body or '')[:60]!r}")
    if not args.apply:
        print(f"{len(bad)} question(s) match (dry run; pass --apply to delete)")
        return 0
    n = crud.delete_generated_ids(db, [q.id for q in bad])
    print(f"deleted {n} generated question(s)")
    return 0


def cmd_generation_report(db: Session, args: argparse.Namespace) -> int:
    report = crud.generation_report(db, question_type_name=args.question_type, limit=args.limit)
    scope = f'"{args.question_type}"' if args.question_type else "all question types"
    print(f"{report['total']} generated question(s) for {scope}")
    for i, q in enumerate(report["recent"], 1):
        passage = q.passage.name if q.passage else "unknown"
        print(f"{i:>3}. {passage}  status={q.status or 'null'}  created={q.created_at}")
    for status, count in sorted(report["by_status"].items()):
        print(f"  {status}: {count}")
    return 0


def cmd_link_question_types(db: Session, args: argparse.Namespace) -> int:
    pairs = crud.unlinked_question_type_matches(db)
    if not pairs:
        print("nothing to link")
        return 0
    for qt, tpl in pairs:
        print(f'link "{qt.name}" -> "{tpl.label}" ({tpl.id})')
    if not args.apply:
        print(f"{len(pairs)} question type(s) can be linked (dry run; pass --apply)")
        return 0
    n = crud.link_question_types(db, pairs)
    print(f"linked {n} question type(s)")
    return 0


def cmd_delete_question_types(db: Session, args: argparse.Namespace) -> int:
    if not args.yes:
        print("refusing to delete every question type without --yes")
        return 2
    n = crud.delete_all_question_types(db)
    print(f"deleted {n} question type(s)")
    return 0


def find_up(name: str, start: Path) -> Optional[Path]:
    p = start.resolve()
    while True:
        cand = p / name
        if cand.exists():
            return cand
        if p.parent == p:
            return None
        p = p.parent


def cmd_check_migrations(args: argparse.Namespace) -> int:
    ini = find_up("alembic.ini", Path(__file__).resolve().parent)
    if not ini:
        print("Error: could not find alembic.ini")
        return 1

    cfg = Config(str(ini))
    cfg.set_main_option("script_location", str(ini.parent / "migrations"))
    heads = ScriptDirectory.from_config(cfg).get_heads()
    if len(heads) != 1:
        print(f"Error: expected 1 Alembic head, found {len(heads)}: {heads}")
        return 1
    print(f"Alembic head OK: {heads[0]}")
    return 0


DB_COMMANDS: Dict[str, Callable[[Session, argparse.Namespace], int]] = {
    "lint-prompts": cmd_lint_prompts,
    "dedupe-generated": cmd_dedupe_generated,
    "cleanup-generated": cmd_cleanup_generated,
    "generation-report": cmd_generation_report,
    "link-question-types": cmd_link_question_types,
    "delete-question-types": cmd_delete_question_types,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="maintenance", description=__doc__.splitlines()[1])
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("lint-prompts", help="report templates missing a placeholder")
    p.add_argument("--placeholder", default="passage")

    p = sub.add_parser("dedupe-generated", help="keep the newest question per passage/type")
    p.add_argument("--apply", action="store_true")

    p = sub.add_parser("cleanup-generated", help="delete questions with dummy bodies")
    p.add_argument("--apply", action="store_true")
    p.add_argument("--pattern", action="append", help="body substring (repeatable)")

    p = sub.add_parser("generation-report", help="recent generated questions and status counts")
    p.add_argument("--question-type", default=None)
    p.add_argument("--limit", type=int, default=10)

    p = sub.add_parser("link-question-types", help="attach templates to question types by name")
    p.add_argument("--apply", action="store_true")

    p = sub.add_parser("delete-question-types", help="delete every question type")
    p.add_argument("--yes", action="store_true")

    sub.add_parser("check-migrations", help="verify there is exactly one Alembic head")
    return parser


def main(argv: Optional[List[str]] = None, database: Optional[Database] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "check-migrations":
        return cmd_check_migrations(args)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logger.info("running %s", args.command)
    own_db = database is None
    if own_db:
        database = Database(settings.database_url)

    try:
        with database.session() as db:
            return DB_COMMANDS[args.command](db, args)
    finally:
        if own_db:
            database.dispose()


if __name__ == "__main__":
    sys.exit(main())
