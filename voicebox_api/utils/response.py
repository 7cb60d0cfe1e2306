from typing import Any, Optional

from fastapi.responses import JSONResponse

VALIDATION_ERROR = "VALIDATION_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"
NOT_FOUND = "NOT_FOUND"
RATE_LIMITED = "RATE_LIMITED"
INTERNAL_ERROR = "INTERNAL_ERROR"


def success_response(
        data: Any = None,
        degraded: bool = False,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
) -> dict:
    response: dict[str, Any] = {"ok": True, "data": data}
    if degraded:
        response["degraded"] = True
        if error_code:
            response["error"] = {"code": error_code, "message": error_message or ""}
    return response


def error_body(code: str, message: str, degraded: bool = False, data: Any = None) -> dict:
    body: dict[str, Any] = {"ok": False, "data": data, "error": {"code": code, "message": message}}
    if degraded:
        body["degraded"] = True
    return body


def error_response(
        code: str,
        message: str,
        status_code: int = 400,
        degraded: bool = False,
        data: Any = None,
        headers: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(code, message, degraded=degraded, data=data),
        headers=headers,
    )


def error_detail(code: str, message: str) -> dict:
    """
    ``detail`` payload for HTTPException; rendered into the envelope by the app handler.
    """
    return {"code": code, "message": message}
