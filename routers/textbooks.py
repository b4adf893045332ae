# Groups and textbooks: the content tree shown in the admin sidebar.
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_bad_request, api_error, api_not_found, api_success
from deps.auth import require_client
from deps.db import get_db
from models import Group, Textbook
from schemas.content import (
    GroupsReorderRequest,
    OrderItem,
    RenameRequest,
    TextbookCreate,
    TextbooksReorderRequest,
    TextbookUpdate,
)

router = APIRouter(prefix="/api", tags=["content"], dependencies=[Depends(require_client)])


def _order_items(raw, what: str):
    if not isinstance(raw, list):
        return None, api_bad_request(f"{what} array is required")
    try:
        return [OrderItem.model_validate(r) for r in raw], None
    except ValidationError:
        return None, api_bad_request(f"Each entry in {what.lower()} needs an id and an order_index")


# ---------- Groups ----------


@router.get("/groups")
def list_groups(db: Session = Depends(get_db)):
    try:
        return api_success(crud.list_groups_tree(db))
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch groups")


@router.post("/groups")
def create_group(payload: RenameRequest, db: Session = Depends(get_db)):
    name = (payload.name or "").strip()
    if not name:
        return api_bad_request("Group name is required")
    try:
        g = crud.create_group(db, name)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to create group")
    return api_success({"id": g.id, "name": g.name, "order_index": g.order_index}, status=201)


@router.put("/groups/reorder")
def reorder_groups(payload: GroupsReorderRequest, db: Session = Depends(get_db)):
    items, err = _order_items(payload.groups, "Groups")
    if err is not None:
        return err
    try:
        crud.reorder_rows_sequential(db, Group, items)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to reorder groups")
    return api_success({"success": True})


@router.get("/groups/{group_id}")
def get_group(group_id: str, db: Session = Depends(get_db)):
    try:
        tree = crud.get_group_tree(db, group_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch group")
    if tree is None:
        return api_not_found("Group")
    return api_success(tree)


@router.patch("/groups/{group_id}")
def update_group(group_id: str, payload: RenameRequest, db: Session = Depends(get_db)):
    name = (payload.name or "").strip()
    if not name:
        return api_bad_request("Group name is required")
    try:
        g = crud.update_row(db, Group, group_id, {"name": name})
    except SQLAlchemyError as e:
        return api_error(e, "Failed to update group")
    if not g:
        return api_not_found("Group")
    return api_success({"id": g.id, "name": g.name, "order_index": g.order_index})


@router.delete("/groups/{group_id}")
def delete_group(group_id: str, db: Session = Depends(get_db)):
    # textbooks, units, passages and their questions go with it
    try:
        deleted = crud.delete_row(db, Group, group_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete group")
    if not deleted:
        return api_not_found("Group")
    return api_success({"success": True})


# ---------- Textbooks ----------


@router.get("/textbooks")
def list_textbooks(groupId: Optional[str] = None, db: Session = Depends(get_db)):
    try:
        return api_success(crud.list_textbooks_tree(db, group_id=groupId))
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch textbooks")


@router.post("/textbooks")
def create_textbook(payload: TextbookCreate, db: Session = Depends(get_db)):
    if not (payload.name or "").strip() or not payload.group_id:
        return api_bad_request("Textbook name and group_id are required")

    try:
        tb, stats = crud.create_textbook(db, payload)
        tree = crud.get_textbook_tree(db, tb.id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to create textbook")

    return api_success({**tree.model_dump(), "stats": stats}, status=201)


@router.put("/textbooks/reorder")
def reorder_textbooks(payload: TextbooksReorderRequest, db: Session = Depends(get_db)):
    items, err = _order_items(payload.textbooks, "Textbooks")
    if err is not None:
        return err
    try:
        crud.reorder_rows_sequential(db, Textbook, items)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to reorder textbooks")
    return api_success({"success": True})


@router.get("/textbooks/{textbook_id}")
def get_textbook(textbook_id: str, db: Session = Depends(get_db)):
    try:
        tree = crud.get_textbook_tree(db, textbook_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to fetch textbook")
    if tree is None:
        return api_not_found("Textbook")
    return api_success(tree)


@router.patch("/textbooks/{textbook_id}")
def update_textbook(textbook_id: str, payload: TextbookUpdate, db: Session = Depends(get_db)):
    """Rename, move to another group, or change the sheet link."""
    sent = payload.model_dump(exclude_unset=True)
    changes = {}
    if "name" in sent:
        name = (sent["name"] or "").strip()
        if not name:
            return api_bad_request("Textbook name cannot be empty")
        changes["name"] = name
    if "group_id" in sent:
        if not sent["group_id"]:
            return api_bad_request("group_id cannot be empty")
        changes["group_id"] = sent["group_id"]
    if "google_sheet_url" in sent:
        changes["google_sheet_url"] = sent["google_sheet_url"] or None

    try:
        if "group_id" in changes and db.get(Group, changes["group_id"]) is None:
            return api_not_found("Group")
        tb = crud.update_row(db, Textbook, textbook_id, changes)
        tree = crud.get_textbook_tree(db, textbook_id) if tb else None
    except SQLAlchemyError as e:
        return api_error(e, "Failed to update textbook")
    if tree is None:
        return api_not_found("Textbook")
    return api_success(tree)


@router.delete("/textbooks/{textbook_id}")
def delete_textbook(textbook_id: str, db: Session = Depends(get_db)):
    try:
        deleted = crud.delete_row(db, Textbook, textbook_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete textbook")
    if not deleted:
        return api_not_found("Textbook")
    return api_success({"success": True})
