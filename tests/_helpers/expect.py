"""Expectation helpers used instead of bare assert statements."""

from __future__ import annotations

from collections.abc import Sized

import pytest


def _label(label: str | None) -> str:
    return f"{label}: " if label else ""


def expect_true(condition: object, *, message: str) -> None:
    """Fail the test with ``message`` when ``condition`` is falsy."""
    if not condition:
        pytest.fail(message)


def expect_equal(actual: object, expected: object, *, label: str | None = None) -> None:
    """Fail the test when ``actual`` differs from ``expected``."""
    if actual != expected:
        pytest.fail(f"{_label(label)}expected {expected!r}, got {actual!r}")


def expect_length(items: Sized, expected: int, *, label: str | None = None) -> None:
    """Fail the test when ``items`` does not hold exactly ``expected`` entries."""
    if len(items) != expected:
        pytest.fail(f"{_label(label)}expected {expected} items, got {len(items)}")


def expect_logged(caplog: pytest.LogCaptureFixture, fragment: str, *, level: str) -> None:
    """Fail the test unless a record at ``level`` contains ``fragment``."""
    for record in caplog.records:
        if record.levelname == level and fragment in record.getMessage():
            return
    messages = [record.getMessage() for record in caplog.records]
    pytest.fail(f"no {level} record containing {fragment!r}; captured {messages!r}")
