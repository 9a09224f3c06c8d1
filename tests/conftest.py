from __future__ import annotations

from unittest.mock import Mock

import pytest

from netkit.dispatch import Dispatcher
from netkit.token.storage import MemoryStorage
from tests.helpers import ManualQueue


@pytest.fixture
def inline_dispatcher() -> Dispatcher:
    """Create a dispatcher running everything synchronously."""
    return Dispatcher.inline()


@pytest.fixture
def manual_dispatcher() -> Dispatcher:
    """Create a dispatcher whose queues only run when the test asks."""
    return Dispatcher(main=ManualQueue(), worker=ManualQueue())


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing callbacks.

    Returns:
        A Mock object that can be used as a callback function.

    Example:
        >>> def test_callback(mock_callback):
        ...     client.get("users", on_success=mock_callback)
        ...     mock_callback.assert_called_once()
    """
    return Mock()
