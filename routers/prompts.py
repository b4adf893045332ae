from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_bad_request, api_error, api_not_found, api_success
from deps.auth import require_client
from deps.db import get_db
from prompt_utils import has_placeholder, render_template
from schemas.prompts import (
    PromptTemplateCreate,
    PromptTemplateOut,
    PromptTemplateUpdate,
    RenderRequest,
    RenderResponse,
)

router = APIRouter(prefix="/api/prompts", tags=["prompts"], dependencies=[Depends(require_client)])

# request field -> column
_UPDATE_FIELDS = {
    "label": "label",
    "prompt": "prompt",
    "category": "category",
    "status": "status",
    "preferredModel": "preferred_model",
}


@router.get("")
def list_prompts(
    category: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    try:
        rows = crud.list_prompt_templates(db, category=category, status=status)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch prompts")
    return api_success([PromptTemplateOut.model_validate(r) for r in rows])


@router.post("")
def create_prompt(payload: PromptTemplateCreate, db: Session = Depends(get_db)):
    label = (payload.label or "").strip()
    if not label:
        return api_bad_request("Prompt label is required")

    try:
        tpl = crud.create_prompt_template(
            db,
            label=label,
            prompt=payload.prompt,
            category=payload.category,
            status=payload.status,
            preferred_model=payload.preferredModel,
        )
    except SQLAlchemyError as e:
        return api_error(e, "Failed to create prompt")
    return api_success(PromptTemplateOut.model_validate(tpl), status=201)


@router.get("/{template_id}")
def get_prompt(template_id: str, db: Session = Depends(get_db)):
    try:
        tpl = crud.get_prompt_template(db, template_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch prompt")
    if not tpl:
        return api_not_found("Prompt")
    return api_success(PromptTemplateOut.model_validate(tpl))


@router.put("/{template_id}")
def update_prompt(template_id: str, payload: PromptTemplateUpdate, db: Session = Depends(get_db)):
    sent = payload.model_dump(exclude_unset=True)
    changes: Dict[str, Any] = {_UPDATE_FIELDS[k]: v for k, v in sent.items() if v is not None}
    if "label" in changes and not changes["label"].strip():
        return api_bad_request("Prompt label cannot be empty")

    try:
        tpl = crud.update_prompt_template(db, template_id, changes)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to update prompt")
    if not tpl:
        return api_not_found("Prompt")
    return api_success(PromptTemplateOut.model_validate(tpl))


@router.delete("/{template_id}")
def delete_prompt(template_id: str, db: Session = Depends(get_db)):
    try:
        crud.delete_prompt_template(db, template_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete prompt")
    return api_success({"success": True})


@router.post("/{template_id}/render")
def render_prompt(template_id: str, payload: RenderRequest, db: Session = Depends(get_db)):
    """Build the final prompt text from a stored template."""
    try:
        tpl = crud.get_prompt_template(db, template_id)
        passage = crud.get_passage(db, payload.passageId) if payload.passageId else None
    except SQLAlchemyError as e:
        return api_error(e, "Failed to render prompt")

    if not tpl:
        return api_not_found("Prompt")
    if payload.passageId and passage is None:
        return api_not_found("Passage")

    values: Dict[str, Any] = dict(payload.values)
    if passage is not None:
        values.setdefault("passage", passage.content or "")
        if passage.korean_translation:
            values.setdefault("korean", passage.korean_translation)

    res = render_template(tpl.prompt, values)
    return api_success(RenderResponse(prompt=res.text, used=res.used, missing=res.missing))


@router.get("/{template_id}/lint")
def lint_prompt(template_id: str, placeholder: str = "passage", db: Session = Depends(get_db)):
    try:
        tpl = crud.get_prompt_template(db, template_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch prompt")
    if not tpl:
        return api_not_found("Prompt")
    return api_success(
        {
            "id": tpl.id,
            "placeholder": placeholder,
            "present": has_placeholder(tpl.prompt, placeholder),
        }
    )
