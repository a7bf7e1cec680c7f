"""
Pytest configuration.

Database fixtures live in tests/__init__.py (make_test_session and seed
helpers) so unittest-style classes can use them from setUp.
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring a database session (deselect with '-m \"not db\"')"
    )
