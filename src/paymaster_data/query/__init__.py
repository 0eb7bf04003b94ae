"""Query configuration, predicate rendering and the generic query builder."""

from __future__ import annotations

from paymaster_data.query.builder import BaseQueryBuilder, RenderedQuery
from paymaster_data.query.config import (
    DEFAULT_LIMIT,
    MAX_SAFE_LIMIT,
    OrderDirection,
    QueryConfig,
    QueryLimits,
)
from paymaster_data.query.observability import QueryCallMetrics, QueryObservability

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_SAFE_LIMIT",
    "BaseQueryBuilder",
    "OrderDirection",
    "QueryCallMetrics",
    "QueryConfig",
    "QueryLimits",
    "QueryObservability",
    "RenderedQuery",
]
