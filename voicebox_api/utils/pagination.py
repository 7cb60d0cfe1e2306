import math
from typing import Any, Optional

MAX_PAGE_SIZE = 50
VOICES_PAGE_SIZE = 12
COMMENTS_PAGE_SIZE = 20
ADMIN_PAGE_SIZE = 20

# keeps (page - 1) * MAX_PAGE_SIZE inside a signed 64-bit OFFSET
MAX_PAGE = (2 ** 63 - 1) // MAX_PAGE_SIZE

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"


def _parse_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    # 0 falls back to the default, matching the public query contract
    return parsed or default


def parse_page_params(page: Any, size: Any, default_size: int) -> tuple[int, int]:
    """
    Lenient page/size parsing: garbage falls back to defaults,
    page is clamped to [1, MAX_PAGE] and size to [1, MAX_PAGE_SIZE].
    """
    p = min(MAX_PAGE, max(1, _parse_int(page, 1)))
    s = min(MAX_PAGE_SIZE, max(1, _parse_int(size, default_size)))
    return p, s


def parse_sort(value: Optional[str]) -> str:
    return SORT_OLDEST if (value or "").strip().lower() == SORT_OLDEST else SORT_NEWEST


def total_pages(total: int, size: int) -> int:
    return math.ceil(total / size) if size > 0 else 0


def has_more(page: int, size: int, total: int) -> bool:
    return page * size < total
