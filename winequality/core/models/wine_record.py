"""
WineRecord model representing one physicochemical observation of a wine.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class WineType(str, Enum):
    """Provenance tag assigned from the source file, not from its contents."""

    RED = "red"
    WHITE = "white"


# Measurement columns in table order
MEASUREMENT_FIELDS: tuple[str, ...] = (
    "fixed_acidity",
    "volatile_acidity",
    "citric_acid",
    "residual_sugar",
    "chlorides",
    "free_sulfur_dioxide",
    "total_sulfur_dioxide",
    "density",
    "ph",
    "sulphates",
    "alcohol",
)

# Every accepted record carries all of these keys (nulls where the source had no column)
EXPECTED_FIELDS: tuple[str, ...] = MEASUREMENT_FIELDS + ("quality",)

# Insert column order for the wines table
WINE_COLUMNS: tuple[str, ...] = ("wine_type",) + EXPECTED_FIELDS

QUALITY_MIN = 0
QUALITY_MAX = 10


class WineRecord(BaseModel):
    """
    A validated wine observation ready for insertion.

    Identity and timestamps are assigned by the store on insert.

    Attributes:
        wine_type: "red" or "white"
        fixed_acidity .. alcohol: Measurements (None when missing or unparseable)
        quality: Sensory quality score, 0-10
    """

    wine_type: WineType
    fixed_acidity: float | None = None
    volatile_acidity: float | None = None
    citric_acid: float | None = None
    residual_sugar: float | None = None
    chlorides: float | None = None
    free_sulfur_dioxide: float | None = None
    total_sulfur_dioxide: float | None = None
    density: float | None = None
    ph: float | None = None
    sulphates: float | None = None
    alcohol: float | None = None
    quality: int = Field(..., ge=QUALITY_MIN, le=QUALITY_MAX)

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "wine_type": "red",
                "fixed_acidity": 7.4,
                "volatile_acidity": 0.7,
                "citric_acid": 0.0,
                "residual_sugar": 1.9,
                "chlorides": 0.076,
                "free_sulfur_dioxide": 11.0,
                "total_sulfur_dioxide": 34.0,
                "density": 0.9978,
                "ph": 3.51,
                "sulphates": 0.56,
                "alcohol": 9.4,
                "quality": 5
            }
        }

    def as_params(self) -> tuple:
        """Values in WINE_COLUMNS order, for parameterized statements."""
        return tuple(getattr(self, column) for column in WINE_COLUMNS)


class StoredWine(WineRecord):
    """
    A wine row as read back from the store.

    Attributes:
        id: Store-assigned identity
        created_at: Insert timestamp
        updated_at: Last update timestamp
    """

    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
