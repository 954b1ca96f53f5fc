"""
IntegralValidator - the value must be a whole number.
"""

import math
from typing import Any

from .base_validator import BaseValidator


class IntegralValidator(BaseValidator):
    """
    Accepts 5 and 5.0, fails 5.5 and infinities.

    Quality is stored as INTEGER, where a fraction would be rejected or
    rounded by the store. Null values are left to RequiredFieldValidator.
    """

    rule_type = "integral"

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, int | float):
            self.fail(f"Value must be numeric, got {type(value).__name__}")
        if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
            self.fail(f"Value {value} is not a whole number")
