import re
from typing import Optional

MAX_TAGS = 5

_TAG_RE = re.compile(r"<[^>]*>")
_SCHEME_RE = re.compile(r"(?:javascript|vbscript|data)\s*:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"\bon\w+\s*=", re.IGNORECASE)


def sanitize_text(text: str) -> str:
    """
    Strip HTML tags, script-capable URI schemes and inline event-handler
    attributes from user supplied text.
    """
    cleaned = _TAG_RE.sub("", text)
    cleaned = _SCHEME_RE.sub("", cleaned)
    cleaned = _EVENT_HANDLER_RE.sub("", cleaned)
    return cleaned.strip()


def sanitize_tags(raw: Optional[str]) -> Optional[str]:
    """
    Comma separated topic tags -> at most five cleaned tags, comma joined.
    Returns None when nothing usable is left.
    """
    if not raw:
        return None
    tags = []
    for part in raw.split(","):
        tag = part.strip().replace("<", "").replace(">", "").strip()
        if tag:
            tags.append(tag)
    tags = tags[:MAX_TAGS]
    return ",".join(tags) if tags else None
