"""
Test suite for the catalog reconciliation backend.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_catalog_diff_service.py -v
"""
