"""
Shared helpers for spreadsheet values.
"""
