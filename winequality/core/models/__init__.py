"""
Core data models for the wine quality loader.

All models use Pydantic for runtime validation and type safety.
"""

from .load_result import LoadResult
from .validation_result import ValidationResult
from .wine_page import DEFAULT_LIMIT, DEFAULT_PAGE, Pagination, WinePage
from .wine_patch import WinePatch
from .wine_record import (
    EXPECTED_FIELDS,
    MEASUREMENT_FIELDS,
    QUALITY_MAX,
    QUALITY_MIN,
    WINE_COLUMNS,
    StoredWine,
    WineRecord,
    WineType,
)

__all__ = [
    "WineType",
    "WineRecord",
    "StoredWine",
    "WinePatch",
    "WinePage",
    "Pagination",
    "LoadResult",
    "ValidationResult",
    "MEASUREMENT_FIELDS",
    "EXPECTED_FIELDS",
    "WINE_COLUMNS",
    "QUALITY_MIN",
    "QUALITY_MAX",
    "DEFAULT_PAGE",
    "DEFAULT_LIMIT",
]
