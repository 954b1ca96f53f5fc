"""
Rule configuration management.

Row rules come either from a YAML file (config/validation_rules.yaml) or from
the built-in quality rules. Both produce the same list of rule dictionaries
consumed by RuleEngine.
"""

from pathlib import Path
from typing import Any

import yaml

from winequality.core.models import QUALITY_MAX, QUALITY_MIN

from .rule_engine import RuleEngine

SEVERITIES = ("error", "warning")


def make_rule(
    rule_name: str,
    rule_type: str,
    field_name: str,
    parameters: dict[str, Any] | None = None,
    severity: str = "error",
    enabled: bool = True,
) -> dict[str, Any]:
    """One rule dictionary in the shape RuleEngine expects."""
    if severity not in SEVERITIES:
        raise ValueError(
            f"Invalid severity '{severity}' for rule '{rule_name}'. Must be one of {SEVERITIES}"
        )
    return {
        "rule_name": rule_name,
        "rule_type": rule_type,
        "field_name": field_name,
        "parameters": parameters or {},
        "severity": severity,
        "enabled": enabled,
    }


class RuleConfigLoader:
    """
    Reads row rules from YAML, grouped by column:

    ```yaml
    rules:
      quality:
        - type: required_field
          name: quality_required
        - type: range
          params: {min: 0, max: 10}
      alcohol:
        - type: range
          severity: warning
          params: {min: 0, max: 25}
    ```

    Rules without a name are called "<column>_<type>_<position>".
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        if not self.config_path.is_file():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self) -> list[dict[str, Any]]:
        """
        Parse the file into rule dictionaries.

        Raises:
            ValueError: If the document has no "rules" mapping or a rule is malformed
        """
        with open(self.config_path, encoding="utf-8") as f:
            document = yaml.safe_load(f)

        if not isinstance(document, dict) or not isinstance(document.get("rules"), dict):
            raise ValueError(f"{self.config_path}: expected a top-level 'rules' mapping")

        rules = []
        for field_name, definitions in document["rules"].items():
            if not isinstance(definitions, list):
                raise ValueError(f"{self.config_path}: rules for '{field_name}' must be a list")
            rules.extend(
                self._to_rule(field_name, definition, position)
                for position, definition in enumerate(definitions)
            )
        return rules

    def _to_rule(self, field_name: str, definition: Any, position: int) -> dict[str, Any]:
        if not isinstance(definition, dict) or "type" not in definition:
            raise ValueError(f"{self.config_path}: a rule for '{field_name}' is missing 'type'")

        rule_type = definition["type"]
        if rule_type not in RuleEngine.VALIDATOR_REGISTRY:
            raise ValueError(f"{self.config_path}: unknown rule type '{rule_type}' for '{field_name}'")

        return make_rule(
            rule_name=definition.get("name", f"{field_name}_{rule_type}_{position}"),
            rule_type=rule_type,
            field_name=field_name,
            parameters=definition.get("params", definition.get("parameters")),
            severity=definition.get("severity", "error"),
            enabled=definition.get("enabled", True),
        )


class RuleConfigBuilder:
    """
    Fluent builder for rule lists (built-in defaults and tests).
    """

    def __init__(self):
        self.rules: list[dict[str, Any]] = []

    def add_required_field(self, field_name: str) -> "RuleConfigBuilder":
        self.rules.append(make_rule(f"{field_name}_required", "required_field", field_name))
        return self

    def add_integral(self, field_name: str) -> "RuleConfigBuilder":
        self.rules.append(make_rule(f"{field_name}_integral", "integral", field_name))
        return self

    def add_range(
        self,
        field_name: str,
        min_value: float | None = None,
        max_value: float | None = None,
        severity: str = "error",
    ) -> "RuleConfigBuilder":
        bounds = {
            key: value
            for key, value in (("min", min_value), ("max", max_value))
            if value is not None
        }
        self.rules.append(make_rule(f"{field_name}_range", "range", field_name, bounds, severity))
        return self

    def build(self) -> list[dict[str, Any]]:
        return list(self.rules)


def default_wine_rules() -> list[dict[str, Any]]:
    """
    Rules every wine row must pass: quality present, whole, and within 0-10.
    """
    return (
        RuleConfigBuilder()
        .add_required_field("quality")
        .add_integral("quality")
        .add_range("quality", min_value=QUALITY_MIN, max_value=QUALITY_MAX)
        .build()
    )


def load_rule_engine(config_path: str | Path | None = None) -> RuleEngine:
    """
    RuleEngine for the given YAML file, or for the built-in rules when no path is given.
    """
    if config_path is None:
        return RuleEngine(default_wine_rules())
    return RuleEngine(RuleConfigLoader(config_path).load_rules())
