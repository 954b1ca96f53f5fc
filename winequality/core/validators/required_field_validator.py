"""
RequiredFieldValidator - the column must be present and hold a value.
"""

from typing import Any

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Fails when the column is absent from the row or its value is null.

    Normalization turns empty and unparseable cells into None, so those
    fail here too.
    """

    rule_type = "required_field"

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record:
            self.fail("Field is missing from record")
        if value is None:
            self.fail("Field value is null")
