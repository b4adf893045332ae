from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_error, api_success
from deps.auth import require_admin
from deps.db import get_db
from schemas.generated import MaintenanceRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _preview(q) -> dict:
    body = q.body or ""
    return {
        "id": q.id,
        "passage_id": q.passage_id,
        "question_type_id": q.question_type_id,
        "bodyPreview": body[:100] + ("..." if len(body) > 100 else ""),
        "created_at": q.created_at,
    }


@router.post("/generated-questions/dedupe")
def dedupe_generated(payload: MaintenanceRequest, db: Session = Depends(get_db)):
    """Keep the newest question per passage and question type; drop the rest."""
    try:
        dupes = crud.find_duplicate_generated(db)
        if payload.dryRun:
            return api_success(
                {"dryRun": True, "duplicateCount": len(dupes), "duplicates": [_preview(q) for q in dupes]}
            )
        ids = [q.id for q in dupes]
        n = crud.delete_generated_ids(db, ids)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to dedupe questions")

    logger.info("dedupe removed %d generated questions", n)
    return api_success({"success": True, "deletedCount": n, "deletedIds": ids})


@router.post("/generated-questions/cleanup")
def cleanup_generated(payload: MaintenanceRequest, db: Session = Depends(get_db)):
    patterns = payload.patterns or crud.DUMMY_BODY_PATTERNS
    try:
        total = len(crud.list_generated_questions(db))
        bad = crud.find_dummy_generated(db, patterns)
        if payload.dryRun:
            return api_success(
                {
                    "dryRun": True,
                    "totalQuestions": total,
                    "badQuestionsCount": len(bad),
                    "badQuestions": [_preview(q) for q in bad],
                }
            )
        ids = [q.id for q in bad]
        n = crud.delete_generated_ids(db, ids)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to cleanup questions")

    logger.info("cleanup removed %d of %d generated questions", n, total)
    return api_success({"success": True, "deletedCount": n, "deletedIds": ids})
