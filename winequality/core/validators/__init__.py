"""
Validation rule implementations.

Provides validators for required fields, numeric ranges and whole numbers.
"""

from .base_validator import BaseValidator, ValidationError
from .integral_validator import IntegralValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "RangeValidator",
    "IntegralValidator",
]
