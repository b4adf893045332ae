from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class PromptTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    label: str
    prompt: str
    variables: List[str]
    category: str
    status: str
    preferred_model: str
    created_at: datetime | None
    updated_at: datetime | None


class PromptTemplateCreate(BaseModel):
    label: Optional[str] = None
    prompt: str = ""
    category: Optional[str] = None
    status: Optional[str] = None
    preferredModel: Optional[str] = None


class PromptTemplateUpdate(BaseModel):
    label: Optional[str] = None
    prompt: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    preferredModel: Optional[str] = None


class RenderRequest(BaseModel):
    values: Dict[str, Any] = {}
    passageId: Optional[str] = None


class RenderResponse(BaseModel):
    prompt: str
    used: List[str]
    missing: List[str]


class QuestionTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    prompt_template_id: Optional[str] = None
    question_group: str
    display_order: int
    created_at: datetime | None


class QuestionTypeCreate(BaseModel):
    name: Optional[str] = None
    promptTemplateId: Optional[str] = None
    questionGroup: Optional[str] = None
    displayOrder: Optional[int] = None


class QuestionTypeUpdate(BaseModel):
    # same keys as QuestionTypeCreate; only the fields sent are applied
    name: Optional[str] = None
    promptTemplateId: Optional[str] = None
    questionGroup: Optional[str] = None
    displayOrder: Optional[int] = None
