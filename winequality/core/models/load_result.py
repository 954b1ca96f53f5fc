"""
LoadResult model summarizing one run of the ingestion pipeline (ephemeral).
"""

from typing import Literal

from pydantic import BaseModel, Field


class LoadResult(BaseModel):
    """
    Outcome of a full reload.

    Failed runs raise instead of returning, so only two statuses exist.

    Attributes:
        status: "committed" (all records stored) or "empty" (nothing to insert)
        accepted_by_type: Accepted record count per wine type
        inserted: Records committed to the store
        duration_seconds: Wall-clock duration of the run
    """

    status: Literal["committed", "empty"]
    accepted_by_type: dict[str, int] = Field(default_factory=dict)
    inserted: int = Field(0, ge=0)
    duration_seconds: float = Field(0.0, ge=0.0)

    @property
    def accepted(self) -> int:
        """Total accepted records across both files."""
        return sum(self.accepted_by_type.values())
