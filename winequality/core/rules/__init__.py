"""
Validation rule engine and configuration management.
"""

from .rule_config import (
    RuleConfigBuilder,
    RuleConfigLoader,
    default_wine_rules,
    load_rule_engine,
    make_rule,
)
from .rule_engine import RuleEngine

__all__ = [
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "default_wine_rules",
    "load_rule_engine",
    "make_rule",
]
