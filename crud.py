# Data access shared by the HTTP routers and the maintenance commands.
# Write helpers commit their own work; nothing here retries.

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, joinedload, selectinload

from db import Database
from models import (
    GeneratedQuestion,
    Group,
    Passage,
    PromptTemplate,
    QuestionType,
    Textbook,
    Unit,
)
from prompt_utils import extract_variables, has_placeholder
from schemas.content import (
    GroupTree,
    OrderItem,
    PassageOut,
    TextbookCreate,
    TextbookTree,
    UnitOut,
    UnitTree,
)

logger = logging.getLogger(__name__)

# Bodies left behind by early prompt runs that ignored the passage
DUMMY_BODY_PATTERNS = (
    "The rise of social media",
    "social media has profoundly impacted",
)

# ---------- Generated questions ----------


def list_generated_questions(db: Session) -> List[GeneratedQuestion]:
    stmt = select(GeneratedQuestion).order_by(
        GeneratedQuestion.created_at.desc(), GeneratedQuestion.id
    )
    return list(db.scalars(stmt))


def get_generated_question(db: Session, question_id: str) -> Optional[GeneratedQuestion]:
    stmt = (
        select(GeneratedQuestion)
        .options(joinedload(GeneratedQuestion.passage), joinedload(GeneratedQuestion.question_type))
        .where(GeneratedQuestion.id == question_id)
    )
    return db.scalars(stmt).first()


def delete_generated_by_passage(db: Session, passage_id: str, question_type_id: str) -> int:
    res = db.execute(
        delete(GeneratedQuestion).where(
            GeneratedQuestion.passage_id == passage_id,
            GeneratedQuestion.question_type_id == question_type_id,
        )
    )
    db.commit()
    return res.rowcount or 0


def delete_generated_question(db: Session, question_id: str) -> bool:
    res = db.execute(delete(GeneratedQuestion).where(GeneratedQuestion.id == question_id))
    db.commit()
    return bool(res.rowcount)


def delete_generated_ids(db: Session, ids: Sequence[str]) -> int:
    if not ids:
        return 0
    res = db.execute(delete(GeneratedQuestion).where(GeneratedQuestion.id.in_(list(ids))))
    db.commit()
    return res.rowcount or 0


def delete_generated_for_passages(
    db: Session, passage_ids: Sequence[str], question_type_id: Optional[str] = None
) -> int:
    stmt = delete(GeneratedQuestion).where(GeneratedQuestion.passage_id.in_(list(passage_ids)))
    if question_type_id:
        stmt = stmt.where(GeneratedQuestion.question_type_id == question_type_id)
    res = db.execute(stmt)
    db.commit()
    return res.rowcount or 0


def list_generated_for_passage(db: Session, passage_id: str) -> List[GeneratedQuestion]:
    stmt = (
        select(GeneratedQuestion)
        .options(joinedload(GeneratedQuestion.question_type))
        .where(GeneratedQuestion.passage_id == passage_id)
        .order_by(GeneratedQuestion.created_at.desc(), GeneratedQuestion.id)
    )
    return list(db.scalars(stmt))


def create_generated_question(
    db: Session, passage_id: str, question_type_id: str, fields: Dict[str, Any]
) -> GeneratedQuestion:
    q = GeneratedQuestion(passage_id=passage_id, question_type_id=question_type_id, **fields)
    db.add(q)
    db.commit()
    return get_generated_question(db, q.id)


def existing_passage_ids(db: Session, passage_ids: Iterable[str], question_type_id: str) -> List[str]:
    stmt = select(GeneratedQuestion.passage_id).where(
        GeneratedQuestion.passage_id.in_(list(passage_ids)),
        GeneratedQuestion.question_type_id == question_type_id,
    )
    return list(dict.fromkeys(db.scalars(stmt)))


def find_duplicate_generated(db: Session) -> List[GeneratedQuestion]:
    """Rows that are not the newest for their (passage, question type) pair."""
    seen: set[Tuple[str, str]] = set()
    dupes: List[GeneratedQuestion] = []
    for q in list_generated_questions(db):
        key = (q.passage_id, q.question_type_id)
        if key in seen:
            dupes.append(q)
        else:
            seen.add(key)
    return dupes


def find_dummy_generated(
    db: Session, patterns: Sequence[str] = DUMMY_BODY_PATTERNS
) -> List[GeneratedQuestion]:
    return [
        q
        for q in list_generated_questions(db)
        if q.body and any(p in q.body for p in patterns)
    ]


def generation_report(
    db: Session, question_type_name: Optional[str] = None, limit: int = 10
) -> Dict[str, Any]:
    stmt = select(GeneratedQuestion).options(joinedload(GeneratedQuestion.passage))
    if question_type_name:
        stmt = stmt.join(QuestionType).where(QuestionType.name == question_type_name)
    rows = list(db.scalars(stmt.order_by(GeneratedQuestion.created_at.desc())))
    stats = Counter(q.status or "null" for q in rows)
    return {"total": len(rows), "by_status": dict(stats), "recent": rows[: max(limit, 0)]}


# ---------- Ordering ----------


def reorder_rows(
    database: Database,
    model: Type[Any],
    items: Sequence[OrderItem],
    max_workers: int = 8,
) -> None:
    """
    Apply each order_index in its own session and commit, all at once.

    There is no enclosing transaction: when one update fails the others stay
    applied, and the first error is raised after every update has finished.
    """
    if not items:
        return

    def _apply(item: OrderItem) -> None:
        with database.session() as s:
            s.execute(
                update(model).where(model.id == item.id).values(order_index=item.order_index)
            )
            s.commit()

    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
        futures = [pool.submit(_apply, item) for item in items]

    errors = [f.exception() for f in futures if f.exception() is not None]
    for err in errors[1:]:
        logger.error("additional reorder failure on %s: %s", model.__tablename__, err)
    if errors:
        raise errors[0]


def reorder_rows_sequential(db: Session, model: Type[Any], items: Sequence[OrderItem]) -> None:
    # stops at the first failure; earlier rows stay committed
    for item in items:
        db.execute(update(model).where(model.id == item.id).values(order_index=item.order_index))
        db.commit()


# ---------- Units / passages ----------


def update_row(db: Session, model: Type[Any], row_id: str, changes: Dict[str, Any]) -> Optional[Any]:
    row = db.get(model, row_id)
    if not row:
        return None
    for key, value in changes.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def rename_unit(db: Session, unit_id: str, name: str) -> Optional[Unit]:
    return update_row(db, Unit, unit_id, {"name": name})


def delete_row(db: Session, model: Type[Any], row_id: str) -> bool:
    res = db.execute(delete(model).where(model.id == row_id))
    db.commit()
    return bool(res.rowcount)


def get_passage(db: Session, passage_id: str) -> Optional[Passage]:
    return db.get(Passage, passage_id)


# ---------- Content tree ----------


def _sorted(rows: Iterable[Any]) -> List[Any]:
    # stable: ties keep query order
    return sorted(rows, key=lambda r: r.order_index or 0)


def _textbook_tree(tb: Textbook) -> TextbookTree:
    units = [
        UnitTree(
            **UnitOut.model_validate(u).model_dump(),
            passages=[PassageOut.model_validate(p) for p in _sorted(u.passages)],
        )
        for u in _sorted(tb.units)
    ]
    return TextbookTree(
        id=tb.id,
        group_id=tb.group_id,
        name=tb.name,
        google_sheet_url=tb.google_sheet_url,
        order_index=tb.order_index,
        created_at=tb.created_at,
        units=units,
    )


def list_textbooks_tree(db: Session, group_id: Optional[str] = None) -> List[TextbookTree]:
    stmt = (
        select(Textbook)
        .options(selectinload(Textbook.units).selectinload(Unit.passages))
        .order_by(Textbook.created_at)
    )
    if group_id:
        stmt = stmt.where(Textbook.group_id == group_id)
    return [_textbook_tree(tb) for tb in _sorted(db.scalars(stmt))]


def get_textbook_tree(db: Session, textbook_id: str) -> Optional[TextbookTree]:
    stmt = (
        select(Textbook)
        .options(selectinload(Textbook.units).selectinload(Unit.passages))
        .where(Textbook.id == textbook_id)
    )
    tb = db.scalars(stmt).first()
    return _textbook_tree(tb) if tb else None


def _group_tree(g: Group) -> GroupTree:
    return GroupTree(
        id=g.id,
        name=g.name,
        order_index=g.order_index,
        created_at=g.created_at,
        textbooks=[_textbook_tree(tb) for tb in _sorted(g.textbooks)],
    )


def _groups_stmt():
    return select(Group).options(
        selectinload(Group.textbooks).selectinload(Textbook.units).selectinload(Unit.passages)
    )


def list_groups_tree(db: Session) -> List[GroupTree]:
    stmt = _groups_stmt().order_by(Group.created_at)
    return [_group_tree(g) for g in _sorted(db.scalars(stmt))]


def get_group_tree(db: Session, group_id: str) -> Optional[GroupTree]:
    g = db.scalars(_groups_stmt().where(Group.id == group_id)).first()
    return _group_tree(g) if g else None


def create_group(db: Session, name: str) -> Group:
    group = Group(name=name)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def create_textbook(db: Session, payload: TextbookCreate) -> Tuple[Textbook, Dict[str, int]]:
    """Create a textbook with its units and passages in one transaction."""
    tb = Textbook(
        name=(payload.name or "").strip(),
        group_id=payload.group_id,
        google_sheet_url=payload.google_sheet_url or None,
    )
    db.add(tb)
    db.flush()

    n_passages = 0
    for i, unit_in in enumerate(payload.units):
        unit = Unit(textbook_id=tb.id, name=unit_in.name, order_index=i)
        db.add(unit)
        db.flush()
        for j, p in enumerate(unit_in.passages):
            db.add(
                Passage(
                    unit_id=unit.id,
                    name=p.name,
                    content=p.content or None,
                    korean_translation=p.koreanTranslation or None,
                    order_index=j,
                )
            )
            n_passages += 1
    db.commit()
    return tb, {"units": len(payload.units), "passages": n_passages}


# ---------- Prompt templates ----------


def list_prompt_templates(
    db: Session, category: Optional[str] = None, status: Optional[str] = None
) -> List[PromptTemplate]:
    stmt = select(PromptTemplate).order_by(PromptTemplate.created_at.desc())
    if category:
        stmt = stmt.where(PromptTemplate.category == category)
    if status:
        stmt = stmt.where(PromptTemplate.status == status)
    return list(db.scalars(stmt))


def get_prompt_template(db: Session, template_id: str) -> Optional[PromptTemplate]:
    return db.get(PromptTemplate, template_id)


def create_prompt_template(
    db: Session,
    label: str,
    prompt: str,
    category: Optional[str] = None,
    status: Optional[str] = None,
    preferred_model: Optional[str] = None,
) -> PromptTemplate:
    tpl = PromptTemplate(
        label=label,
        prompt=prompt,
        variables=extract_variables(prompt),
        category=category or "general",
        status=status or "draft",
        preferred_model=preferred_model or "gpt-4o-mini",
    )
    db.add(tpl)
    db.commit()
    db.refresh(tpl)
    return tpl


def update_prompt_template(
    db: Session, template_id: str, changes: Dict[str, Any]
) -> Optional[PromptTemplate]:
    tpl = db.get(PromptTemplate, template_id)
    if not tpl:
        return None
    for key, value in changes.items():
        setattr(tpl, key, value)
    if "prompt" in changes:
        tpl.variables = extract_variables(tpl.prompt)
    db.commit()
    db.refresh(tpl)
    return tpl


def delete_prompt_template(db: Session, template_id: str) -> bool:
    # question types built on this template go with it
    db.execute(delete(QuestionType).where(QuestionType.prompt_template_id == template_id))
    res = db.execute(delete(PromptTemplate).where(PromptTemplate.id == template_id))
    db.commit()
    return bool(res.rowcount)


def templates_missing_placeholder(db: Session, placeholder: str) -> List[PromptTemplate]:
    return [t for t in list_prompt_templates(db) if not has_placeholder(t.prompt, placeholder)]


# ---------- Question types ----------


def list_question_types(db: Session) -> List[QuestionType]:
    stmt = select(QuestionType).order_by(QuestionType.display_order, QuestionType.name)
    return list(db.scalars(stmt))


def create_question_type(
    db: Session,
    name: str,
    prompt_template_id: Optional[str] = None,
    question_group: Optional[str] = None,
    display_order: Optional[int] = None,
) -> QuestionType:
    qt = QuestionType(
        name=name,
        prompt_template_id=prompt_template_id,
        question_group=question_group or "practical",
        display_order=display_order or 0,
    )
    db.add(qt)
    db.commit()
    db.refresh(qt)
    return qt


def update_question_type(
    db: Session, question_type_id: str, changes: Dict[str, Any]
) -> Optional[QuestionType]:
    return update_row(db, QuestionType, question_type_id, changes)


def delete_all_question_types(db: Session) -> int:
    res = db.execute(delete(QuestionType))
    db.commit()
    return res.rowcount or 0


def unlinked_question_type_matches(db: Session) -> List[Tuple[QuestionType, PromptTemplate]]:
    """Question types with no template, paired with the template of the same label."""
    by_label = {t.label: t for t in list_prompt_templates(db)}
    pairs = []
    for qt in list_question_types(db):
        if qt.prompt_template_id:
            continue
        tpl = by_label.get(qt.name)
        if tpl is not None:
            pairs.append((qt, tpl))
    return pairs


def link_question_types(db: Session, pairs: Sequence[Tuple[QuestionType, PromptTemplate]]) -> int:
    for qt, tpl in pairs:
        qt.prompt_template_id = tpl.id
    db.commit()
    return len(pairs)
