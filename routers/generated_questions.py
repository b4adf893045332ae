from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_bad_request, api_error, api_not_found, api_success
from deps.auth import require_client
from deps.db import get_db
from models import QuestionType
from prompt_utils import question_fields_from_output
from schemas.generated import (
    CheckExistingRequest,
    DeleteByPassageRequest,
    GeneratedQuestionImport,
    GeneratedQuestionOut,
    GeneratedQuestionSummary,
)

router = APIRouter(
    prefix="/api/generated-questions",
    tags=["generated-questions"],
    dependencies=[Depends(require_client)],
)


@router.get("/all")
def list_all_generated(db: Session = Depends(get_db)):
    # used by the duplicate-cleanup tooling; newest first
    try:
        rows = crud.list_generated_questions(db)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch generated questions")

    questions = [GeneratedQuestionSummary.model_validate(q) for q in rows]
    return api_success({"questions": questions, "count": len(questions)})


@router.delete("/delete-by-passage")
def delete_by_passage(payload: DeleteByPassageRequest, db: Session = Depends(get_db)):
    """Remove the questions of one passage/question type before regenerating them."""
    if not payload.passageId or not payload.questionTypeId:
        return api_bad_request("passageId and questionTypeId are required")

    try:
        n = crud.delete_generated_by_passage(db, payload.passageId, payload.questionTypeId)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete existing question")

    return api_success({"success": True, "message": "Existing questions deleted", "deleted": n})


@router.post("/check")
def check_existing(payload: CheckExistingRequest, db: Session = Depends(get_db)):
    if not payload.passageIds:
        return api_bad_request("passageIds array is required")
    if not payload.questionTypeId:
        return api_bad_request("questionTypeId is required")

    try:
        ids = crud.existing_passage_ids(db, payload.passageIds, payload.questionTypeId)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to check existing questions")
    return api_success({"existingPassageIds": ids})


@router.post("")
def import_generated(payload: GeneratedQuestionImport, db: Session = Depends(get_db)):
    """Store one question parsed from tagged model output."""
    if not payload.passageId or not payload.questionTypeId or not (payload.output or "").strip():
        return api_bad_request("passageId, questionTypeId and output are required")

    fields, parsed = question_fields_from_output(payload.output)
    if not fields:
        return api_bad_request("No question tags found in output")

    try:
        if crud.get_passage(db, payload.passageId) is None:
            return api_not_found("Passage")
        if db.get(QuestionType, payload.questionTypeId) is None:
            return api_not_found("Question type")
        q = crud.create_generated_question(db, payload.passageId, payload.questionTypeId, fields)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to save question")

    return api_success(
        {"question": GeneratedQuestionOut.model_validate(q), "warnings": parsed.warnings},
        status=201,
    )


@router.get("/{question_id}")
def get_generated(question_id: str, db: Session = Depends(get_db)):
    try:
        q = crud.get_generated_question(db, question_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch question")
    if not q:
        return api_not_found("Question")
    return api_success(GeneratedQuestionOut.model_validate(q))


@router.delete("/{question_id}")
def delete_generated(question_id: str, db: Session = Depends(get_db)):
    try:
        deleted = crud.delete_generated_question(db, question_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete question")
    if not deleted:
        return api_not_found("Question")
    return api_success({"success": True, "message": "Question deleted"})
