"""
Core models, validators and validation rules.
"""
