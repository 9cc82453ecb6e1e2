"""
Test suite for LLM Leaderboard.

Tests are organized by component:
- test_db/: store connection, models and repositories
- test_providers/: LLM client implementations and connection checks
- test_services/: scoring, execution, lifecycle, import/export
- test_api/: HTTP routes
"""
