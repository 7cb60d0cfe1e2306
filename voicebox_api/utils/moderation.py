import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.comment import Comment
from ..models.moderation import ModerationStatus
from ..models.voice import AnonymousVoice
from .db_safety import safe_db_query
from .pagination import SORT_NEWEST, has_more, total_pages
from .response import VALIDATION_ERROR, error_detail
from .sanitize import sanitize_tags, sanitize_text

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 20
MAX_TEXT_LENGTH = 2000

STATUS_ALL = "all"

# ids are stored as signed 64-bit integers
MAX_ROW_ID = 2 ** 63 - 1

ContentModel = Union[type[AnonymousVoice], type[Comment]]


@dataclass
class SubmissionResult:
    pending: bool
    id: Optional[int] = None
    degraded: bool = False
    error_code: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class ContentPage:
    items: list = field(default_factory=list)
    page: int = 1
    size: int = 20
    total: int = 0
    total_pages: int = 0
    has_more: bool = False
    degraded: bool = False
    error_code: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class StatusChangeResult:
    found: bool
    item: Any = None
    degraded: bool = False
    error_code: Optional[str] = None
    error_message: Optional[str] = None


def _validation_error(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail=error_detail(VALIDATION_ERROR, message))


def validate_submission_text(text: Any, label: str = "Message") -> str:
    """
    Return the trimmed text or raise a 400 VALIDATION_ERROR.
    """
    if not text or not isinstance(text, str):
        raise _validation_error(f"{label} is required")
    trimmed = text.strip()
    if len(trimmed) < MIN_TEXT_LENGTH:
        raise _validation_error(f"{label} must be at least {MIN_TEXT_LENGTH} characters")
    if len(trimmed) > MAX_TEXT_LENGTH:
        raise _validation_error(f"{label} must be at most {MAX_TEXT_LENGTH} characters")
    return trimmed


def _clean_submission(text: Any, label: str) -> str:
    sanitized = sanitize_text(validate_submission_text(text, label))
    if not sanitized:
        raise _validation_error(f"{label} has no content left after removing markup")
    return sanitized


def _persist(db: Session, item) -> SubmissionResult:
    def create():
        db.add(item)
        db.commit()
        db.refresh(item)
        return item.id

    result = safe_db_query(db, create, None)
    if result.ok:
        return SubmissionResult(pending=True, id=result.data)
    return SubmissionResult(
        pending=False,
        degraded=True,
        error_code=result.error_code,
        error_message=result.error_message,
    )


def submit_voice(db: Session, message: Any, topic_tags: Optional[str] = None) -> SubmissionResult:
    voice = AnonymousVoice(
        message=_clean_submission(message, "Message"),
        topic_tags=sanitize_tags(topic_tags),
        status=ModerationStatus.PENDING.value,
    )
    return _persist(db, voice)


def submit_comment(db: Session, content: Any) -> SubmissionResult:
    comment = Comment(
        content=_clean_submission(content, "Content"),
        status=ModerationStatus.PENDING.value,
    )
    return _persist(db, comment)


def parse_status_filter(value: Optional[str]) -> Optional[ModerationStatus]:
    """
    'all' (or empty) -> None, otherwise a ModerationStatus. Raises 400 for unknown values.
    """
    if not value or value.strip().lower() == STATUS_ALL:
        return None
    try:
        return ModerationStatus.parse(value)
    except ValueError:
        raise _validation_error(f"Unknown status '{value}'")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_content(
        db: Session,
        model: ContentModel,
        page: int,
        size: int,
        sort: str = SORT_NEWEST,
        status: Optional[ModerationStatus] = None,
        search: Optional[str] = None,
) -> ContentPage:
    """
    One page of content items. Storage failures yield an empty page
    flagged as degraded instead of raising.
    """
    filters = []
    if status is not None:
        filters.append(model.status == status.value)
    term = (search or "").strip()
    if term:
        column = getattr(model, model.text_column)
        filters.append(column.ilike(f"%{_escape_like(term)}%", escape="\\"))

    order = model.created_at.desc() if sort == SORT_NEWEST else model.created_at.asc()
    tiebreak = model.id.desc() if sort == SORT_NEWEST else model.id.asc()
    offset = (page - 1) * size

    items_result = safe_db_query(
        db,
        lambda: db.query(model).filter(*filters).order_by(order, tiebreak).offset(offset).limit(size).all(),
        [],
    )
    total_result = safe_db_query(
        db,
        lambda: db.query(func.count(model.id)).filter(*filters).scalar() or 0,
        0,
    )

    degraded = items_result.degraded or total_result.degraded
    failed = items_result if items_result.degraded else total_result
    total = int(total_result.data or 0)
    items = items_result.data or []
    if degraded:
        # never report a half-populated page
        items, total = [], 0

    return ContentPage(
        items=items,
        page=page,
        size=size,
        total=total,
        total_pages=total_pages(total, size),
        has_more=has_more(page, size, total),
        degraded=degraded,
        error_code=failed.error_code if degraded else None,
        error_message=failed.error_message if degraded else None,
    )


def list_approved(db: Session, model: ContentModel, page: int, size: int, sort: str = SORT_NEWEST) -> ContentPage:
    return list_content(db, model, page, size, sort=sort, status=ModerationStatus.APPROVED)


def set_content_status(db: Session, model: ContentModel, item_id: int, status: ModerationStatus) -> StatusChangeResult:
    if not 1 <= item_id <= MAX_ROW_ID:
        return StatusChangeResult(found=False)

    def update():
        item = db.get(model, item_id)
        if item is None:
            return None
        item.status = status.value
        db.commit()
        db.refresh(item)
        return item

    result = safe_db_query(db, update, None)
    if not result.ok:
        return StatusChangeResult(
            found=False,
            degraded=True,
            error_code=result.error_code,
            error_message=result.error_message,
        )
    if result.data is None:
        return StatusChangeResult(found=False)

    logger.info(f"[moderation] {model.__name__} {item_id} -> {status.value}")
    return StatusChangeResult(found=True, item=result.data)
