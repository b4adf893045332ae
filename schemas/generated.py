# schemas/generated.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------- Rows ----------


class GeneratedQuestionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    passage_id: str
    question_type_id: str
    created_at: datetime | None


class PassageRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    content: Optional[str] = None
    korean_translation: Optional[str] = None


class QuestionTypeRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    question_group: str


class GeneratedQuestionOut(GeneratedQuestionSummary):
    instruction: Optional[str] = None
    body: Optional[str] = None
    choices: list[Any] | None = None
    answer: Optional[str] = None
    explanation: Optional[str] = None
    status: str
    error_message: Optional[str] = None
    passage: Optional[PassageRef] = None
    question_type: Optional[QuestionTypeRef] = None


# ---------- Requests ----------


class DeleteByPassageRequest(BaseModel):
    # presence is checked by the handler so a missing field is a 400, not a 422
    passageId: Optional[str] = None
    questionTypeId: Optional[str] = None


class CheckExistingRequest(BaseModel):
    passageIds: Optional[List[str]] = None
    questionTypeId: Optional[str] = None


class MaintenanceRequest(BaseModel):
    dryRun: bool = True
    patterns: Optional[List[str]] = Field(default=None)


class GeneratedQuestionImport(BaseModel):
    passageId: Optional[str] = None
    questionTypeId: Optional[str] = None
    # raw model output made of [[tag]]...[[/tag]] blocks
    output: Optional[str] = None


class BatchDeleteRequest(BaseModel):
    passageIds: Optional[List[str]] = None
    deleteType: Optional[str] = None
    questionTypeId: Optional[str] = None
