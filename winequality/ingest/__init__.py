"""
Ingestion of the red and white wine quality CSV files.
"""

from .file_reader import WineFileReader
from .normalizer import normalize_key, normalize_row, parse_number
from .pipeline import LoadState, WineLoadPipeline

__all__ = [
    "WineFileReader",
    "normalize_key",
    "normalize_row",
    "parse_number",
    "LoadState",
    "WineLoadPipeline",
]
