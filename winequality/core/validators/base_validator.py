"""
Validator base class and the error every failed rule raises.
"""

import math
from abc import ABC, abstractmethod
from typing import Any


class ValidationError(Exception):
    """A row value broke a rule."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    One rule applied to one column of a normalized wine row.

    Subclasses set rule_type and implement validate(), raising
    ValidationError through fail() when the value is not acceptable.
    """

    rule_type: str = ""

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Check value, the row's entry for field_name. record is the whole row.
        """

    def fail(self, message: str) -> None:
        raise ValidationError(rule_name=self.rule_type, field_name=self.field_name, message=message)

    def numeric(self, value: Any) -> float:
        """The value as a number; bools, strings and NaN fail the rule."""
        if isinstance(value, bool) or not isinstance(value, int | float):
            self.fail(f"Value must be numeric, got {type(value).__name__}")
        if isinstance(value, float) and math.isnan(value):
            self.fail("Value is NaN")
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field_name!r}, {self.parameters!r})"
