"""Structured logging of query executions."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

LOG = logging.getLogger("paymaster_data.query")


@dataclass
class QueryCallMetrics:
    """Structured metrics describing one query execution."""

    entity: str
    transport: str
    duration_ms: float
    rows: int | None = None
    first: int | None = None
    skip: int | None = None
    error: str | None = None


@dataclass
class QueryObservability:
    """Configuration for query-level observability."""

    enabled: bool = False
    logger: logging.Logger = field(default_factory=lambda: LOG)

    def record(self, metrics: QueryCallMetrics) -> None:
        """
        Emit a structured log line for a query execution.

        Parameters
        ----------
        metrics:
            Call metrics describing the invocation outcome.
        """
        if not self.enabled or not self.logger.isEnabledFor(logging.INFO):
            return
        payload: dict[str, object] = {
            "entity": metrics.entity,
            "transport": metrics.transport,
            "duration_ms": round(metrics.duration_ms, 2),
        }
        if metrics.rows is not None:
            payload["rows"] = metrics.rows
        if metrics.first is not None:
            payload["first"] = metrics.first
        if metrics.skip is not None:
            payload["skip"] = metrics.skip
        if metrics.error is not None:
            payload["error"] = metrics.error
        self.logger.info("query_call %s", payload)


async def observe_call[T](  # noqa: PLR0913
    observability: QueryObservability | None,
    *,
    entity: str,
    transport: str,
    first: int,
    skip: int,
    func: Callable[[], Awaitable[T]],
) -> T:
    """
    Await a callable while capturing observability signals.

    Returns
    -------
    T
        Result returned by the wrapped callable.
    """
    start = time.perf_counter()
    try:
        result = await func()
    except Exception as exc:
        if observability is not None:
            observability.record(
                QueryCallMetrics(
                    entity=entity,
                    transport=transport,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    first=first,
                    skip=skip,
                    error=exc.__class__.__name__,
                )
            )
        raise
    if observability is not None:
        rows = len(result) if isinstance(result, list) else None
        observability.record(
            QueryCallMetrics(
                entity=entity,
                transport=transport,
                duration_ms=(time.perf_counter() - start) * 1000,
                rows=rows,
                first=first,
                skip=skip,
            )
        )
    return result
