from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Group(Base):
    __tablename__ = "groups"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255))
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    textbooks: Mapped[List["Textbook"]] = relationship(
        back_populates="group", cascade="all, delete-orphan", passive_deletes=True
    )


class Textbook(Base):
    __tablename__ = "textbooks"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    group_id: Mapped[str] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    google_sheet_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    group: Mapped[Group] = relationship(back_populates="textbooks")
    units: Mapped[List["Unit"]] = relationship(
        back_populates="textbook", cascade="all, delete-orphan", passive_deletes=True
    )


class Unit(Base):
    __tablename__ = "units"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    textbook_id: Mapped[str] = mapped_column(
        ForeignKey("textbooks.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    # sibling ordering for tree display; not validated beyond the bulk update
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    textbook: Mapped[Textbook] = relationship(back_populates="units")
    passages: Mapped[List["Passage"]] = relationship(
        back_populates="unit", cascade="all, delete-orphan", passive_deletes=True
    )


class Passage(Base):
    __tablename__ = "passages"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    korean_translation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    unit: Mapped[Unit] = relationship(back_populates="passages")


class PromptTemplate(Base):
    __tablename__ = "prompt_templates"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    label: Mapped[str] = mapped_column(String(255))
    prompt: Mapped[str] = mapped_column(Text, default="")
    variables: Mapped[list] = mapped_column(JSON, default=list)  # cached extract_variables(prompt)
    category: Mapped[str] = mapped_column(String(64), default="general")
    status: Mapped[str] = mapped_column(String(32), default="draft")
    preferred_model: Mapped[str] = mapped_column(String(128), default="gpt-4o-mini")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now
    )


class QuestionType(Base):
    __tablename__ = "question_types"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255))
    prompt_template_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("prompt_templates.id", ondelete="SET NULL"), nullable=True, index=True
    )
    question_group: Mapped[str] = mapped_column(String(64), default="practical")
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    prompt_template: Mapped[Optional[PromptTemplate]] = relationship()


class GeneratedQuestion(Base):
    __tablename__ = "generated_questions"
    __table_args__ = (
        sa.Index("ix_generated_questions_passage_type", "passage_id", "question_type_id"),
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    passage_id: Mapped[str] = mapped_column(ForeignKey("passages.id", ondelete="CASCADE"))
    question_type_id: Mapped[str] = mapped_column(
        ForeignKey("question_types.id", ondelete="CASCADE")
    )
    instruction: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    choices: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    answer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="completed")
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, index=True
    )

    passage: Mapped[Passage] = relationship()
    question_type: Mapped[QuestionType] = relationship()
