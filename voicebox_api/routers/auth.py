import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.admin import LoginRequest, PasswordChangeRequest, PasswordStatus
from ..utils.admin_config import get_admin_config
from ..utils.auth import (
    PasswordChangeError,
    PasswordCheck,
    authenticate_password,
    change_admin_password,
    clear_session_cookie,
    get_current_admin,
    get_current_admin_optional,
    set_session_cookie,
)
from ..utils.config import MIN_PASSWORD_LENGTH, get_recovery_password
from ..utils.db_safety import DB_CONNECTION, DB_QUERY_FAILED, safe_db_query
from ..utils.rate_limit import check_rate_limit, client_ip, note_fail, note_success
from ..utils.response import UNAUTHORIZED, VALIDATION_ERROR, error_detail, error_response, success_response
from ..utils.session_token import issue_session_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Authentication"])

_PASSWORD_CHANGE_ERRORS = {
    PasswordChangeError.INCORRECT_CURRENT: (401, UNAUTHORIZED, "Current password is incorrect"),
    PasswordChangeError.TOO_SHORT: (
        400, VALIDATION_ERROR, f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
    ),
    PasswordChangeError.RESERVED_VALUE: (400, VALIDATION_ERROR, "New password cannot be a reserved value"),
    PasswordChangeError.STORAGE_UNAVAILABLE: (503, DB_QUERY_FAILED, "Temporarily unavailable. Please try again later."),
}


@router.post("/login")
def login(request: Request, creds: LoginRequest, db: Session = Depends(get_db)):
    ip = client_ip(request)
    check_rate_limit(ip)

    if not creds.password.strip():
        raise HTTPException(status_code=400, detail=error_detail(VALIDATION_ERROR, "Password is required"))

    check = authenticate_password(db, creds.password)
    if check is PasswordCheck.UNAVAILABLE:
        return error_response(DB_CONNECTION, "Authentication is temporarily unavailable.", 503, degraded=True)
    if check is PasswordCheck.INVALID:
        note_fail(ip)
        logger.info(f"[auth] failed admin login from {ip}")
        raise HTTPException(status_code=401, detail=error_detail(UNAUTHORIZED, "Invalid password"))

    note_success(ip)
    response = JSONResponse(content=success_response({"message": "Login successful"}))
    set_session_cookie(response, issue_session_token())
    logger.info(f"[auth] admin login from {ip}")
    return response


@router.post("/logout")
def logout(admin=Depends(get_current_admin)):
    response = JSONResponse(content=success_response({"message": "Logged out successfully"}))
    clear_session_cookie(response)
    return response


@router.get("/session")
def session_status(authenticated: bool = Depends(get_current_admin_optional)):
    return success_response({"authenticated": authenticated})


@router.get("/password")
def password_status(db: Session = Depends(get_db), admin=Depends(get_current_admin)):
    result = safe_db_query(db, lambda: get_admin_config(db), None)
    entry = result.data
    status = PasswordStatus(
        configured=entry is not None,
        updated_at=entry.updated_at.isoformat() if entry is not None and entry.updated_at else None,
        recovery_enabled=get_recovery_password() is not None,
        min_length=MIN_PASSWORD_LENGTH,
    )
    return success_response(
        status.model_dump(by_alias=True),
        degraded=result.degraded,
        error_code=result.error_code,
        error_message=result.error_message,
    )


@router.post("/password")
def change_password(
        data: PasswordChangeRequest,
        db: Session = Depends(get_db),
        admin=Depends(get_current_admin),
):
    """
    Change the admin password.
    - Verifies the current password (stored hash or recovery credential).
    - Enforces a minimum length of 8 characters for the new password.
    - Refuses the recovery credential as a new password.
    """
    error = change_admin_password(db, data.current_password, data.new_password)
    if error is None:
        return success_response({"message": "Password changed successfully."})

    status_code, code, message = _PASSWORD_CHANGE_ERRORS[error]
    return error_response(
        code,
        message,
        status_code,
        degraded=error is PasswordChangeError.STORAGE_UNAVAILABLE,
        data={"reason": error.value},
    )
