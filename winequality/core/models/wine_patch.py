"""
WinePatch model describing a partial update of a stored wine.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from .wine_record import QUALITY_MAX, QUALITY_MIN, WineType


class WinePatch(BaseModel):
    """
    Partial update: only fields explicitly set are written.

    Measurements may be set to None to clear them. wine_type and quality are
    NOT NULL in the store, so they can be changed but not cleared.
    """

    wine_type: WineType | None = None
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
    quality: int | None = Field(None, ge=QUALITY_MIN, le=QUALITY_MAX)

    class Config:
        use_enum_values = True
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "quality": 7,
                "alcohol": 10.5
            }
        }

    @model_validator(mode="after")
    def check_required_columns(self) -> "WinePatch":
        """Reject explicit nulls for NOT NULL columns."""
        for name in ("wine_type", "quality"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be set to null")
        return self

    def changes(self) -> dict[str, Any]:
        """
        Fields explicitly provided, in declaration order.

        Returns:
            Mapping of column name to new value
        """
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
        }

    def is_empty(self) -> bool:
        """True when no field was provided."""
        return not self.model_fields_set
