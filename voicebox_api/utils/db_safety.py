"""
Degraded-mode wrapper around persistence calls.

Every read and write issued by the moderation and auth helpers goes through
``safe_db_query`` so that a storage outage turns into a structurally valid
fallback value plus a ``degraded`` flag instead of an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")

DB_CONNECTION = "DB_CONNECTION"
DB_LOCKED = "DB_LOCKED"
DB_QUERY_FAILED = "DB_QUERY_FAILED"


@dataclass
class QueryResult(Generic[T]):
    ok: bool
    data: T
    degraded: bool = False
    error_code: Optional[str] = None
    error_message: Optional[str] = None


def classify_db_error(exc: Exception) -> str:
    if isinstance(exc, OperationalError):
        if "locked" in str(exc).lower():
            return DB_LOCKED
        return DB_CONNECTION
    return DB_QUERY_FAILED


def safe_db_query(db: Session, query_fn: Callable[[], T], fallback: T) -> QueryResult[T]:
    """
    Run ``query_fn``; on a storage error roll the session back and
    return ``fallback`` with ``degraded=True``.
    """
    try:
        return QueryResult(ok=True, data=query_fn())
    except SQLAlchemyError as e:
        code = classify_db_error(e)
        logger.warning(f"[db] query failed ({code}): {e.__class__.__name__}: {e}")
        try:
            db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.warning(f"[db] rollback failed: {rollback_error}")
        return QueryResult(
            ok=False,
            data=fallback,
            degraded=True,
            error_code=code,
            error_message="Database unavailable. Please try again later.",
        )
