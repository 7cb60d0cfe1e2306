from pydantic import BaseModel, Field


class PageMeta(BaseModel):
    page: int
    size: int
    total: int
    total_pages: int = Field(..., serialization_alias="totalPages")
    has_more: bool = Field(..., serialization_alias="hasMore")


def page_payload(result, serialize) -> dict:
    """
    Flatten a ContentPage into ``{items, page, size, total, totalPages, hasMore}``.
    """
    meta = PageMeta(
        page=result.page,
        size=result.size,
        total=result.total,
        total_pages=result.total_pages,
        has_more=result.has_more,
    )
    return {"items": [serialize(item) for item in result.items], **meta.model_dump(by_alias=True)}
