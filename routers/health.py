# Liveness of the database and whether its schema matches the migrations on disk.
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from alembic.config import Config
from alembic.script import ScriptDirectory
from db import Database
from deps.db import get_database

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

PROJECT_DIR = Path(__file__).resolve().parent.parent


@router.get("/db")
def health_db(database: Database = Depends(get_database)):
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}: {e}")
    return {"ok": True, "dialect": database.engine.dialect.name}


def alembic_heads(project_dir: Path = PROJECT_DIR) -> List[str]:
    cfg = Config(str(project_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(project_dir / "migrations"))
    return list(ScriptDirectory.from_config(cfg).get_heads())


def _db_revision(database: Database) -> Optional[str]:
    with database.engine.connect() as conn:
        try:
            return conn.execute(text("SELECT version_num FROM alembic_version")).scalar_one_or_none()
        except SQLAlchemyError:
            # never stamped
            return None


@router.get("/migrations")
def health_migrations(database: Database = Depends(get_database)):
    try:
        heads = alembic_heads()
    except Exception as e:
        logger.warning("could not read alembic heads: %s", e)
        heads = []

    try:
        db_ver = _db_revision(database)
    except SQLAlchemyError as e:
        return {"ok": False, "error": f"db_connect_failed: {e}", "code_heads": heads, "db_version": None}

    synced = db_ver in heads if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
