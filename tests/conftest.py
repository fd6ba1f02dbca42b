"""
Pytest configuration and shared fixtures

Add global fixtures here that are used across multiple test modules.
"""

# Register plugins for fixtures from separate files
pytest_plugins = ["tests.fixtures.record_fixtures"]
