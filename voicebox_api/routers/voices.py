from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.voice import AnonymousVoice
from ..schemas.pagination import page_payload
from ..schemas.voice import Voice, VoiceCreate
from ..utils.moderation import list_approved, submit_voice
from ..utils.pagination import VOICES_PAGE_SIZE, parse_page_params, parse_sort
from ..utils.response import success_response

router = APIRouter(prefix="/api/voices", tags=["Voices"])

PENDING_MESSAGE = "Thanks. Your message was received and will appear after review."
DEGRADED_MESSAGE = "Temporarily unavailable. Please try again later."


@router.get("")
def read_voices(
        page: Optional[str] = None,
        size: Optional[str] = None,
        sort: Optional[str] = None,
        db: Session = Depends(get_db),
):
    """
    Approved voices, newest first by default. Always 200; a storage
    failure yields an empty page with ``degraded: true``.
    """
    p, s = parse_page_params(page, size, VOICES_PAGE_SIZE)
    result = list_approved(db, AnonymousVoice, p, s, parse_sort(sort))
    return success_response(
        page_payload(result, lambda v: Voice.model_validate(v).model_dump(by_alias=True)),
        degraded=result.degraded,
        error_code=result.error_code,
        error_message=result.error_message,
    )


@router.post("")
def create_voice(payload: VoiceCreate, db: Session = Depends(get_db)):
    result = submit_voice(db, payload.message, payload.topic_tags)
    if result.degraded:
        return success_response(
            {"pending": False, "message": DEGRADED_MESSAGE},
            degraded=True,
            error_code=result.error_code,
            error_message=result.error_message,
        )
    return success_response({"id": result.id, "pending": True, "message": PENDING_MESSAGE})
