from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PassageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    unit_id: str
    name: str
    content: Optional[str] = None
    korean_translation: Optional[str] = None
    order_index: int
    created_at: datetime | None


class UnitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    textbook_id: str
    name: str
    order_index: int
    created_at: datetime | None


class UnitTree(UnitOut):
    passages: List[PassageOut] = Field(default_factory=list)


class TextbookTree(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    group_id: str
    name: str
    google_sheet_url: Optional[str] = None
    order_index: int
    created_at: datetime | None
    units: List[UnitTree] = Field(default_factory=list)


class GroupTree(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    order_index: int
    created_at: datetime | None
    textbooks: List[TextbookTree] = Field(default_factory=list)


# ---------- Requests ----------


class OrderItem(BaseModel):
    id: str
    order_index: int


class UnitsReorderRequest(BaseModel):
    # validated by hand so a missing list is a 400 with a readable message
    units: Optional[Any] = None


class TextbooksReorderRequest(BaseModel):
    textbooks: Optional[Any] = None


class GroupsReorderRequest(BaseModel):
    groups: Optional[Any] = None


class RenameRequest(BaseModel):
    name: Optional[str] = None


class PassageIn(BaseModel):
    name: str
    content: Optional[str] = None
    koreanTranslation: Optional[str] = None


class UnitIn(BaseModel):
    name: str
    passages: List[PassageIn] = Field(default_factory=list)


class TextbookCreate(BaseModel):
    name: Optional[str] = None
    group_id: Optional[str] = None
    google_sheet_url: Optional[str] = None
    units: List[UnitIn] = Field(default_factory=list)


class TextbookUpdate(BaseModel):
    name: Optional[str] = None
    group_id: Optional[str] = None
    google_sheet_url: Optional[str] = None
