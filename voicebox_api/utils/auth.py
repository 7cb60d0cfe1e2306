import hmac
import logging
from enum import Enum
from typing import Optional
from urllib.parse import unquote

from fastapi import HTTPException, Request, Response
from sqlalchemy.orm import Session

from .admin_config import ensure_admin_config, hash_password, set_admin_password_hash, verify_password_hash
from .config import MIN_PASSWORD_LENGTH, get_recovery_password, is_production
from .db_safety import safe_db_query
from .response import UNAUTHORIZED, error_detail
from .session_token import SESSION_MAX_AGE_SECONDS, verify_session_token

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "admin_session"


class PasswordCheck(str, Enum):
    OK = "OK"
    INVALID = "INVALID"
    UNAVAILABLE = "UNAVAILABLE"


class PasswordChangeError(str, Enum):
    INCORRECT_CURRENT = "INCORRECT_CURRENT"
    TOO_SHORT = "TOO_SHORT"
    RESERVED_VALUE = "RESERVED_VALUE"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


def _matches_recovery(candidate: str) -> bool:
    recovery = get_recovery_password()
    if not recovery:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), recovery.encode("utf-8"))


def authenticate_password(db: Session, candidate: Optional[str]) -> PasswordCheck:
    """
    Check a submitted admin password.

    - Trims the candidate; empty input is always INVALID.
    - Accepts the emergency-recovery credential when one is configured.
    - Otherwise ensures the credential record exists and compares against
      its bcrypt hash. UNAVAILABLE when the store cannot be reached.
    """
    password = (candidate or "").strip()
    if not password:
        return PasswordCheck.INVALID

    if _matches_recovery(password):
        logger.warning("[auth] emergency recovery credential used")
        return PasswordCheck.OK

    result = safe_db_query(db, lambda: ensure_admin_config(db), None)
    if not result.ok or result.data is None:
        return PasswordCheck.UNAVAILABLE

    if verify_password_hash(password, result.data.password_hash):
        return PasswordCheck.OK
    return PasswordCheck.INVALID


def check_password(db: Session, candidate: Optional[str]) -> bool:
    return authenticate_password(db, candidate) is PasswordCheck.OK


def change_admin_password(db: Session, current: str, new: str) -> Optional[PasswordChangeError]:
    """
    Replace the stored admin password. Returns None on success.
    """
    check = authenticate_password(db, current)
    if check is PasswordCheck.UNAVAILABLE:
        return PasswordChangeError.STORAGE_UNAVAILABLE
    if check is PasswordCheck.INVALID:
        return PasswordChangeError.INCORRECT_CURRENT

    new_password = (new or "").strip()
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return PasswordChangeError.TOO_SHORT
    if _matches_recovery(new_password):
        return PasswordChangeError.RESERVED_VALUE

    new_hash = hash_password(new_password)
    result = safe_db_query(db, lambda: set_admin_password_hash(db, new_hash), None)
    if not result.ok:
        return PasswordChangeError.STORAGE_UNAVAILABLE

    logger.info("[auth] admin password changed")
    return None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=is_production(),
    )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=is_production(),
    )


def verify_session(request: Request) -> bool:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return False
    return verify_session_token(unquote(token))


def get_current_admin(request: Request) -> bool:
    if not verify_session(request):
        raise HTTPException(status_code=401, detail=error_detail(UNAUTHORIZED, "Unauthorized"))
    return True


def get_current_admin_optional(request: Request) -> bool:
    """
    Never raises; lets a route report session state without requiring it.
    """
    return verify_session(request)
