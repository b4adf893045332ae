from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from db import Database


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_db(request: Request) -> Iterator[Session]:
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
