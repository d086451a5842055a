# === MODULE PURPOSE ===
# Pytest configuration and shared fixtures for tests.

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def invoker():
    """HttpInvoker stand-in; set invoker.send.side_effect / return_value per test."""
    mock = MagicMock()
    mock.send = AsyncMock()
    return mock