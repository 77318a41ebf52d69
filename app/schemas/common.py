# app/schemas/common.py
import math
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    """
    Paging block returned by list endpoints.

    Serialized in camelCase to match the storefront client:
      {currentPage, totalPages, totalItems, itemsPerPage}
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


def page_to_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
        total_items=total,
        items_per_page=limit,
    )


class BulkDeleteResult(BaseModel):
    success: bool = True
    deleted_count: int
    requested_count: int
    deleted_ids: list[uuid.UUID]


class Message(BaseModel):
    success: bool = True
    message: str
