"""Conftest for all pytest configuration - fixtures, hooks, and doctest setup."""

import doctest

import pytest

from serialite.plugins.manager import _initialize_plugin_system
from serialite.settings import set_global_settings

# Doctest Configuration


def pytest_configure(config):
    """Configure pytest with custom doctest options."""
    doctest.ELLIPSIS_MARKER = "..."


def pytest_collection_modifyitems(items):
    """Automatically mark doctest items with the 'doctest' marker."""
    for item in items:
        if isinstance(item, pytest.DoctestItem):
            item.add_marker(pytest.mark.doctest)


# Global state


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore default settings and a fresh plugin manager around every test."""
    set_global_settings(None)
    _initialize_plugin_system()
    yield
    set_global_settings(None)
    _initialize_plugin_system()
