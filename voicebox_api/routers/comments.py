from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.comment import Comment as CommentModel
from ..schemas.comment import Comment, CommentCreate
from ..schemas.pagination import page_payload
from ..utils.moderation import list_approved, submit_comment
from ..utils.pagination import COMMENTS_PAGE_SIZE, parse_page_params, parse_sort
from ..utils.response import success_response

router = APIRouter(prefix="/api/comments", tags=["Comments"])

PENDING_MESSAGE = "Your comment has been submitted and is pending approval."
DEGRADED_MESSAGE = "Temporarily unavailable. Please try again later."


@router.get("")
def read_comments(
        page: Optional[str] = None,
        size: Optional[str] = None,
        sort: Optional[str] = None,
        db: Session = Depends(get_db),
):
    p, s = parse_page_params(page, size, COMMENTS_PAGE_SIZE)
    result = list_approved(db, CommentModel, p, s, parse_sort(sort))
    data = page_payload(result, lambda c: Comment.model_validate(c).to_public())
    return success_response(
        data,
        degraded=result.degraded,
        error_code=result.error_code,
        error_message=result.error_message,
    )


@router.post("")
def create_comment(payload: CommentCreate, db: Session = Depends(get_db)):
    result = submit_comment(db, payload.text)
    if result.degraded:
        return success_response(
            {"pending": False, "message": DEGRADED_MESSAGE},
            degraded=True,
            error_code=result.error_code,
            error_message=result.error_message,
        )
    return success_response({"id": result.id, "pending": True, "message": PENDING_MESSAGE})
