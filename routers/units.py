from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
from api_utils import api_bad_request, api_error, api_not_found, api_success
from db import Database
from deps.auth import require_client
from deps.db import get_database, get_db
from models import Unit
from schemas.content import OrderItem, RenameRequest, UnitOut, UnitsReorderRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/units", tags=["units"], dependencies=[Depends(require_client)])


@router.put("/reorder")
def reorder_units(
    payload: UnitsReorderRequest,
    request: Request,
    database: Database = Depends(get_database),
):
    if not isinstance(payload.units, list):
        return api_bad_request("Units array is required")
    try:
        items = [OrderItem.model_validate(u) for u in payload.units]
    except ValidationError:
        return api_bad_request("Each unit needs an id and an order_index")

    # independent per-row updates; a failure leaves the other rows updated
    workers = request.app.state.settings.reorder_max_workers
    try:
        crud.reorder_rows(database, Unit, items, max_workers=workers)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to reorder units")

    logger.info("reordered %d units", len(items))
    return api_success({"success": True})


@router.patch("/{unit_id}")
def rename_unit(unit_id: str, payload: RenameRequest, db: Session = Depends(get_db)):
    name = (payload.name or "").strip()
    if not name:
        return api_bad_request("Unit name is required")

    try:
        unit = crud.rename_unit(db, unit_id, name)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to update unit")
    if not unit:
        return api_not_found("Unit")
    return api_success(UnitOut.model_validate(unit))


@router.delete("/{unit_id}")
def delete_unit(unit_id: str, db: Session = Depends(get_db)):
    try:
        crud.delete_row(db, Unit, unit_id)
    except SQLAlchemyError as e:
        return api_error(e, "Failed to delete unit")
    return api_success({"success": True})
