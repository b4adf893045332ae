from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_bad_request, api_error, api_not_found, api_success
from deps.auth import require_client
from deps.db import get_db
from models import Passage
from schemas.content import PassageOut
from schemas.generated import BatchDeleteRequest, GeneratedQuestionOut
from schemas.prompts import QuestionTypeOut

router = APIRouter(prefix="/api/passages", tags=["passages"], dependencies=[Depends(require_client)])

DELETE_TYPES = ("all", "byQuestionType")


@router.post("/batch-delete-generated")
def batch_delete_generated(payload: BatchDeleteRequest, db: Session = Depends(get_db)):
    """Delete generated questions for several passages, optionally for one question type."""
    if not payload.passageIds:
        return api_bad_request("passageIds array is required")
    if not payload.deleteType:
        return api_bad_request("deleteType is required")
    if payload.deleteType not in DELETE_TYPES:
        return api_bad_request(f"Unknown deleteType: {payload.deleteType}")
    if payload.deleteType == "byQuestionType" and not payload.questionTypeId:
        return api_bad_request("questionTypeId is required")

    type_id = payload.questionTypeId if payload.deleteType == "byQuestionType" else None
    try:
        n = crud.delete_generated_for_passages(db, payload.passageIds, type_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete generated questions")

    return api_success(
        {
            "success": True,
            "message": f"Deleted {n} question(s) from {len(payload.passageIds)} passage(s)",
            "deletedQuestionCount": n,
        }
    )


@router.get("/{passage_id}")
def get_passage(passage_id: str, db: Session = Depends(get_db)):
    try:
        p = crud.get_passage(db, passage_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch passage")
    if not p:
        return api_not_found("Passage")
    return api_success(PassageOut.model_validate(p))


@router.get("/{passage_id}/generated")
def passage_generated(passage_id: str, db: Session = Depends(get_db)):
    # detail panel: the passage, its questions and every type for comparison
    try:
        p = crud.get_passage(db, passage_id)
        if not p:
            return api_not_found("Passage")
        questions = crud.list_generated_for_passage(db, passage_id)
        types = crud.list_question_types(db)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch passage details")

    return api_success(
        {
            "passage": PassageOut.model_validate(p),
            "generatedQuestions": [GeneratedQuestionOut.model_validate(q) for q in questions],
            "allQuestionTypes": [QuestionTypeOut.model_validate(t) for t in types],
        }
    )


@router.delete("/{passage_id}")
def delete_passage(passage_id: str, db: Session = Depends(get_db)):
    # generated questions for the passage are removed by the FK cascade
    try:
        crud.delete_row(db, Passage, passage_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete passage")
    return api_success({"success": True})
