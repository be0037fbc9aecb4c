"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest


@pytest.fixture(scope="session", autouse=True)
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication so Qt timers can run."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
