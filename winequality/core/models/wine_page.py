"""
WinePage model: one page of stored wines plus pagination metadata.
"""

import math

from pydantic import BaseModel, Field

from .wine_record import StoredWine

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100


class Pagination(BaseModel):
    """
    Pagination metadata for a list of wines.

    Attributes:
        current_page: 1-based page number that was requested
        total_pages: ceil(total_items / limit)
        total_items: Number of wines in the table
        limit: Page size
    """

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_items: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)

    @classmethod
    def compute(cls, page: int, limit: int, total_items: int) -> "Pagination":
        """Derive page count from the total number of items."""
        return cls(
            current_page=page,
            total_pages=math.ceil(total_items / limit),
            total_items=total_items,
            limit=limit,
        )

    @staticmethod
    def offset(page: int, limit: int) -> int:
        """Row offset of the first item on a page."""
        return (page - 1) * limit


class WinePage(BaseModel):
    """A page of wines ordered by id."""

    data: list[StoredWine] = Field(default_factory=list)
    pagination: Pagination
