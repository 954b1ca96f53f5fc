"""
Wine quality loader: CSV ingestion and data access for the wines table.
"""

__version__ = "1.0.0"
