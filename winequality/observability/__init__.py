"""
Logging and metrics for the wine quality loader.
"""
