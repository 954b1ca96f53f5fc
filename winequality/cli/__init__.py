"""
Command-line entry points: wine-load and wine-admin.
"""
