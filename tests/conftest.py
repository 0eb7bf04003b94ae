"""Pytest configuration for the paymaster_data test suite."""

from __future__ import annotations

import pytest

from tests._helpers.fakes import RecordingObservability, RecordingTransport


@pytest.fixture
def transport() -> RecordingTransport:
    """Provide a transport double with no canned responses.

    Returns
    -------
    RecordingTransport
        Transport returning an empty envelope until responses are queued.
    """
    return RecordingTransport()


@pytest.fixture
def observability() -> RecordingObservability:
    """Provide an observability sink that keeps every metrics record.

    Returns
    -------
    RecordingObservability
        Sink whose ``records`` list grows with each executed query.
    """
    return RecordingObservability()
