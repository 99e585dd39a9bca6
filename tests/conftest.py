# tests/conftest.py

"""Shared pytest fixtures for the catalog_sync test suite."""

from collections.abc import Generator
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so store retry loops run instantly."""
    with patch("time.sleep"):
        yield
