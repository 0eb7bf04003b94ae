"""Typed fakes for builder and client tests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from paymaster_data.query.observability import QueryCallMetrics, QueryObservability


@dataclass
class RecordingTransport:
    """
    Transport double returning canned envelopes and recording every call.

    Each call pops the next item of ``responses``; exceptions are raised instead of
    returned. When ``responses`` runs out the ``default`` envelope is returned.
    """

    responses: list[Mapping[str, object] | Exception] = field(default_factory=list)
    default: Mapping[str, object] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    closed: bool = False
    name: str = "fake"

    async def __call__(self, query: str, variables: dict[str, object]) -> Mapping[str, object]:
        """Record the call and return (or raise) the next canned response."""
        self.calls.append((query, dict(variables)))
        if not self.responses:
            return self.default
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        """Mark the transport as closed."""
        self.closed = True

    @property
    def last_query(self) -> str:
        """Query document of the most recent call."""
        return self.calls[-1][0]

    @property
    def last_variables(self) -> dict[str, object]:
        """Variables of the most recent call."""
        return self.calls[-1][1]


def envelope(collection: str, *rows: Mapping[str, object]) -> dict[str, object]:
    """Build a data envelope holding ``rows`` under ``collection``."""
    return {collection: [dict(row) for row in rows]}


class RecordingObservability(QueryObservability):
    """Observability sink that keeps metrics for assertions."""

    def __init__(self) -> None:
        logger = logging.getLogger("test_query_observability")
        logger.setLevel(logging.INFO)
        super().__init__(enabled=True, logger=logger)
        self.records: list[QueryCallMetrics] = []

    def record(self, metrics: QueryCallMetrics) -> None:
        """Capture a metrics payload."""
        self.records.append(metrics)
