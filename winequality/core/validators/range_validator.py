"""
RangeValidator - the value must lie within inclusive bounds.
"""

from typing import Any

from .base_validator import BaseValidator


class RangeValidator(BaseValidator):
    """
    Parameters ``min`` and ``max`` are both inclusive; either may be left out,
    but not both. Null values are left to RequiredFieldValidator.
    """

    rule_type = "range"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")

        if self.min_value is None and self.max_value is None:
            raise ValueError("RangeValidator requires at least one of: min, max")
        if None not in (self.min_value, self.max_value) and self.min_value > self.max_value:
            raise ValueError(f"RangeValidator min ({self.min_value}) exceeds max ({self.max_value})")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        number = self.numeric(value)
        if self.min_value is not None and number < self.min_value:
            self.fail(f"Value {number} is less than minimum {self.min_value}")
        if self.max_value is not None and number > self.max_value:
            self.fail(f"Value {number} exceeds maximum {self.max_value}")
