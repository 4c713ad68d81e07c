"""Integration tests for shoppinglist.

These tests require external dependencies:
- PostgreSQL connection for the export/import round trip

Run with: pytest tests/integration/ -v
Skip with: pytest -m "not integration"
"""
