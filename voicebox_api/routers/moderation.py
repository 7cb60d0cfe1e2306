from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.comment import Comment as CommentModel
from ..models.moderation import ModerationStatus
from ..models.voice import AnonymousVoice
from ..schemas.admin import StatusUpdateRequest
from ..schemas.comment import AdminComment
from ..schemas.pagination import page_payload
from ..schemas.voice import AdminVoice
from ..utils.auth import get_current_admin
from ..utils.moderation import list_content, parse_status_filter, set_content_status
from ..utils.pagination import ADMIN_PAGE_SIZE, parse_page_params, parse_sort
from ..utils.response import NOT_FOUND, VALIDATION_ERROR, error_detail, error_response, success_response

router = APIRouter(prefix="/api/admin", tags=["Moderation"], dependencies=[Depends(get_current_admin)])


def _admin_queue(db: Session, model, schema, page, size, search, sort, status) -> dict:
    p, s = parse_page_params(page, size, ADMIN_PAGE_SIZE)
    result = list_content(
        db,
        model,
        p,
        s,
        sort=parse_sort(sort),
        status=parse_status_filter(status),
        search=search,
    )
    return success_response(
        page_payload(result, lambda item: schema.model_validate(item).model_dump(by_alias=True)),
        degraded=result.degraded,
        error_code=result.error_code,
        error_message=result.error_message,
    )


def _update_status(db: Session, model, schema, item_id: int, data: StatusUpdateRequest):
    try:
        status = ModerationStatus.parse(data.status)
    except ValueError:
        raise HTTPException(status_code=400, detail=error_detail(VALIDATION_ERROR, f"Unknown status '{data.status}'"))

    result = set_content_status(db, model, item_id, status)
    if result.degraded:
        return error_response(result.error_code, result.error_message, 503, degraded=True)
    if not result.found:
        raise HTTPException(status_code=404, detail=error_detail(NOT_FOUND, f"{model.__name__} not found"))
    return success_response(schema.model_validate(result.item).model_dump(by_alias=True))


@router.get("/voices")
def admin_voices(
        page: Optional[str] = None,
        size: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        status: Optional[str] = None,
        db: Session = Depends(get_db),
):
    """
    Moderation queue for voices. ``status`` is ``all`` (default) or one of
    PENDING / APPROVED / REJECTED; ``search`` is a substring match on the message.
    """
    return _admin_queue(db, AnonymousVoice, AdminVoice, page, size, search, sort, status)


@router.patch("/voices/{voice_id}")
def moderate_voice(voice_id: int, data: StatusUpdateRequest, db: Session = Depends(get_db)):
    return _update_status(db, AnonymousVoice, AdminVoice, voice_id, data)


@router.get("/comments")
def admin_comments(
        page: Optional[str] = None,
        size: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        status: Optional[str] = None,
        db: Session = Depends(get_db),
):
    return _admin_queue(db, CommentModel, AdminComment, page, size, search, sort, status)


@router.patch("/comments/{comment_id}")
def moderate_comment(comment_id: int, data: StatusUpdateRequest, db: Session = Depends(get_db)):
    return _update_status(db, CommentModel, AdminComment, comment_id, data)
