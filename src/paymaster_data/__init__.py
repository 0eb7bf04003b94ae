"""Typed query client for the prepaid gas paymaster subgraph."""

from __future__ import annotations

from paymaster_data.client import SubgraphClient
from paymaster_data.config import ClientConfig
from paymaster_data.errors import (
    ProblemError,
    QueryValidationError,
    TransportError,
    UnsupportedNetworkError,
)
from paymaster_data.transport import HttpTransport, QueryTransport

__all__ = [
    "ClientConfig",
    "HttpTransport",
    "ProblemError",
    "QueryTransport",
    "QueryValidationError",
    "SubgraphClient",
    "TransportError",
    "UnsupportedNetworkError",
]
