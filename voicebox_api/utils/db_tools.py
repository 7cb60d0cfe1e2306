from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from ..db import get_db


@contextmanager
def with_db() -> Iterator[Session]:
    """
    Safely open and close a DB session.
    Use this in startup hooks and scripts, anywhere outside FastAPI's Depends().

        with with_db() as db:
            ...
    """
    db_gen = get_db()
    db = next(db_gen)
    try:
        yield db
    finally:
        db_gen.close()
