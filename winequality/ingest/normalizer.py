"""
Row normalization for wine quality CSV files.

Turns one raw delimited record into a canonical record: snake_case keys,
numeric values, None for empty or unparseable cells, plus the wine type tag.
"""

import math
from collections.abc import Mapping
from typing import Any

from winequality.core.models import WineType
from winequality.observability import metrics
from winequality.observability.logger import get_logger

logger = get_logger(__name__)


def normalize_key(header: str) -> str:
    """
    Canonical column name: "Fixed Acidity" -> "fixed_acidity", "pH" -> "ph".
    """
    return header.strip().lower().replace(" ", "_")


def parse_number(raw: str | None) -> float | None:
    """
    Parse a numeric cell.

    Args:
        raw: Cell text (None when the row was short)

    Returns:
        The number, or None for an empty cell

    Raises:
        ValueError: If the cell is non-empty but not a finite number
    """
    if raw is None:
        return None

    text = raw.strip()
    if text == "":
        return None

    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value {text!r}")
    return value


def normalize_row(raw: Mapping[str | None, Any], wine_type: WineType | str) -> dict[str, Any]:
    """
    Normalize one raw CSV record.

    Unparseable values are set to None with a warning; the row itself is
    kept (validation decides whether it is usable).

    Args:
        raw: Column header -> cell text
        wine_type: Tag for the file the row came from

    Returns:
        Normalized record including "wine_type"
    """
    wine_type = WineType(wine_type).value
    normalized: dict[str, Any] = {"wine_type": wine_type}

    for header, cell in raw.items():
        # Overflow cells of a long row have no header
        if header is None:
            continue

        key = normalize_key(header)
        if key == "wine_type":
            # The tag comes from the file being read, never from its contents
            logger.warning(
                f"Ignoring column \"{header}\" in {wine_type} file; wine type is set by the file.",
                extra={"wine_type": wine_type, "field_name": key, "raw_value": cell},
            )
            continue

        try:
            normalized[key] = parse_number(cell)
        except ValueError:
            logger.warning(
                f"Could not parse numeric value for key \"{header}\", value \"{cell}\". Setting to null.",
                extra={"wine_type": wine_type, "field_name": key, "raw_value": cell},
            )
            metrics.increment_counter(
                metrics.field_parse_failures_total, wine_type=wine_type, field_name=key
            )
            normalized[key] = None

    return normalized
