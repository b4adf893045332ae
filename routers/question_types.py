from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_bad_request, api_error, api_not_found, api_success
from deps.auth import require_client
from deps.db import get_db
from models import QuestionType
from schemas.prompts import QuestionTypeCreate, QuestionTypeOut, QuestionTypeUpdate

router = APIRouter(
    prefix="/api/question-types",
    tags=["question-types"],
    dependencies=[Depends(require_client)],
)

# request field -> column
_UPDATE_FIELDS = {
    "name": "name",
    "promptTemplateId": "prompt_template_id",
    "questionGroup": "question_group",
    "displayOrder": "display_order",
}

# NOT NULL columns; prompt_template_id may be cleared
_REQUIRED = ("name", "question_group", "display_order")


@router.get("")
def list_question_types(db: Session = Depends(get_db)):
    try:
        rows = crud.list_question_types(db)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch question types")
    return api_success([QuestionTypeOut.model_validate(r) for r in rows])


@router.post("")
def create_question_type(payload: QuestionTypeCreate, db: Session = Depends(get_db)):
    name = (payload.name or "").strip()
    if not name:
        return api_bad_request("Question type name is required")

    try:
        if payload.promptTemplateId and not crud.get_prompt_template(db, payload.promptTemplateId):
            return api_not_found("Prompt")
        qt = crud.create_question_type(
            db,
            name=name,
            prompt_template_id=payload.promptTemplateId,
            question_group=payload.questionGroup,
            display_order=payload.displayOrder,
        )
    except SQLAlchemyError as e:
        return api_error(e, "Failed to create question type")
    return api_success(QuestionTypeOut.model_validate(qt), status=201)


@router.patch("/{question_type_id}")
def update_question_type(
    question_type_id: str, payload: QuestionTypeUpdate, db: Session = Depends(get_db)
):
    sent = payload.model_dump(exclude_unset=True)
    changes: Dict[str, Any] = {_UPDATE_FIELDS[k]: v for k, v in sent.items()}
    for key in _REQUIRED:
        if key in changes and changes[key] is None:
            return api_bad_request(f"{key} cannot be null")
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            return api_bad_request("Question type name cannot be empty")

    try:
        if changes.get("prompt_template_id") and not crud.get_prompt_template(
            db, changes["prompt_template_id"]
        ):
            return api_not_found("Prompt")
        qt = crud.update_question_type(db, question_type_id, changes)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to update question type")
    if not qt:
        return api_not_found("Question type")
    return api_success(QuestionTypeOut.model_validate(qt))


@router.delete("/{question_type_id}")
def delete_question_type(question_type_id: str, db: Session = Depends(get_db)):
    try:
        crud.delete_row(db, QuestionType, question_type_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete question type")
    return api_success({"success": True})
