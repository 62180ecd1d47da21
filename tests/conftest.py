"""
Shared pytest fixtures and configuration for unitflow tests.
"""

import pytest

from unitflow import Configuration, MemoryStorage
from unitflow.persistence import default_storage


@pytest.fixture(autouse=True)
def reset_configuration():
    """Reset global configuration and the default storage before each test to prevent state leakage."""
    Configuration.reset()
    Configuration.enable_dev_mode()
    default_storage().clear()
    yield
    Configuration.reset()
    Configuration.enable_dev_mode()


@pytest.fixture
def storage():
    """Provide a fresh MemoryStorage for tests that need an isolated storage."""
    return MemoryStorage()


@pytest.fixture
def strict_environment():
    """Enable every environment check for the duration of a test."""
    Configuration.set(
        environment={
            "check_immutability": True,
            "check_serializability": True,
            "check_unique_id": True,
        }
    )


@pytest.fixture
def recorder():
    """Provide a factory of lists paired with an appending callback."""

    def make():
        received = []
        return received, received.append

    return make
