"""Pagination metadata returned by paged listings."""

from pydantic import BaseModel

from important_info.utils import Page


class PaginationRead(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int

    @classmethod
    def from_page(cls, page: Page) -> "PaginationRead":
        return cls(
            current_page=page.request.page,
            total_pages=page.total_pages,
            total_items=page.total,
            items_per_page=page.request.page_size,
        )


class UnreadCountRead(BaseModel):
    count: int


class MessageResponse(BaseModel):
    message: str


__all__ = ["PaginationRead", "UnreadCountRead", "MessageResponse"]
