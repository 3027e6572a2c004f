"""Pytest configuration and shared fixtures."""
import os

import pytest

from servicebox import Container, ContainerConfig, reset_container


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless SERVICEBOX_SLOW=1."""
    if os.environ.get("SERVICEBOX_SLOW") in ("1", "true", "True"):
        return
    skip = pytest.mark.skip(reason="Set SERVICEBOX_SLOW=1 to run slow tests")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def container():
    """A fresh container per test."""
    return Container()


@pytest.fixture
def unsafe_container():
    """A container without resolve-once locking."""
    return Container(ContainerConfig(thread_safe=False))


@pytest.fixture(autouse=True)
def _reset_global_container():
    yield
    reset_container()
