"""
Rule engine deciding whether a normalized wine row is kept.

Rules with severity "error" reject the row; rules with severity "warning" are
reported and the row is kept.
"""

from collections import Counter
from typing import Any, NamedTuple

from winequality.core.models.validation_result import ValidationResult
from winequality.core.validators import (
    BaseValidator,
    IntegralValidator,
    RangeValidator,
    RequiredFieldValidator,
    ValidationError,
)


class BoundRule(NamedTuple):
    name: str
    severity: str
    validator: BaseValidator


class RuleEngine:
    """
    Applies every enabled rule to a row and collects all outcomes, so a
    rejected row reports each reason it was rejected.

    Each rule dictionary has rule_name, rule_type (required_field, range or
    integral) and field_name, plus optional parameters, severity (default
    "error") and enabled (default True).
    """

    VALIDATOR_REGISTRY: dict[str, type[BaseValidator]] = {
        "required_field": RequiredFieldValidator,
        "range": RangeValidator,
        "integral": IntegralValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        self.rules = rules
        self.bound_rules = [self._bind(rule) for rule in rules if rule.get("enabled", True)]
        self.rule_fields = {r.name: r.validator.field_name for r in self.bound_rules}

    def _bind(self, rule: dict[str, Any]) -> BoundRule:
        validator_class = self.VALIDATOR_REGISTRY.get(rule["rule_type"])
        if validator_class is None:
            raise ValueError(f"Unknown rule type: {rule['rule_type']}")

        try:
            validator = validator_class(rule["field_name"], rule.get("parameters") or {})
        except ValueError as e:
            raise ValueError(f"Failed to create validator for rule '{rule['rule_name']}': {e}") from e

        return BoundRule(rule["rule_name"], rule.get("severity", "error"), validator)

    def validate_row(self, row: dict[str, Any], record_id: str) -> ValidationResult:
        """
        Validate one normalized row.

        Args:
            row: snake_case keys mapped to floats or None
            record_id: "<wine_type>:<line>" used in results and log messages
        """
        result = ValidationResult(record_id=record_id, passed=True)

        for rule in self.bound_rules:
            try:
                rule.validator.validate(row.get(rule.validator.field_name), row)
            except ValidationError as e:
                result.messages.append(str(e))
                if rule.severity == "error":
                    result.failed_rules.append(rule.name)
                    result.passed = False
                else:
                    result.warnings.append(rule.name)
            else:
                result.passed_rules.append(rule.name)

        return result

    def get_rule_summary(self) -> dict[str, Any]:
        """Counts of the active rules by type and by severity."""
        return {
            "total_rules": len(self.bound_rules),
            "rules_by_type": dict(Counter(r.validator.rule_type for r in self.bound_rules)),
            "rules_by_severity": dict(Counter(r.severity for r in self.bound_rules)),
        }
