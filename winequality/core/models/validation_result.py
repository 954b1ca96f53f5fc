"""
ValidationResult model representing the outcome of validating a row (ephemeral).
"""

from pydantic import BaseModel, Field, field_validator


class ValidationResult(BaseModel):
    """
    Outcome of validating one normalized row (not persisted).

    Attributes:
        record_id: Row identifier, e.g. "red:17" (wine type and line number)
        passed: Overall validation status
        passed_rules: Rules that succeeded
        failed_rules: Rules that failed with severity "error"
        warnings: Rules that failed with severity "warning" (row still accepted)
        messages: Human-readable failure messages, one per failed or warning rule
    """

    record_id: str
    passed: bool
    passed_rules: list[str] = Field(default_factory=list)
    failed_rules: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)

    @field_validator("failed_rules")
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failed_rules is empty."""
        if info.data.get("passed") and len(v) > 0:
            raise ValueError("passed=True but failed_rules is not empty")
        return v
