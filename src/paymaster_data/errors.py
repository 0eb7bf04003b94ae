"""Shared error taxonomy and Problem Details helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

PROBLEM_NAMESPACE = "https://problems.paymaster-data.dev"


def generate_correlation_id() -> str:
    """
    Return a new correlation identifier for tracing errors.

    Returns
    -------
    str
        UUID4 correlation identifier.
    """
    return str(uuid4())


@dataclass(frozen=True)
class ProblemDetail:
    """
    RFC 9457 Problem Details payload.

    Fields mirror the standard shape with optional extras for diagnostics.
    """

    type: str
    title: str
    detail: str
    status: int | None = None
    instance: str = field(default_factory=generate_correlation_id)
    code: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to a JSON-friendly dict.

        Returns
        -------
        dict[str, Any]
            Problem detail payload as a plain dictionary.
        """
        payload: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            "instance": self.instance,
        }
        if self.status is not None:
            payload["status"] = self.status
        if self.code is not None:
            payload["code"] = self.code
        if self.extras:
            payload["extras"] = self.extras
        return payload


def problem(  # noqa: PLR0913
    code: str,
    title: str,
    detail: str,
    *,
    status: int | None = None,
    instance: str | None = None,
    type_uri: str | None = None,
    extras: dict[str, Any] | None = None,
) -> ProblemDetail:
    """
    Create a ProblemDetail with defaults for type/instance.

    Parameters
    ----------
    code
        Stable problem code (e.g., 'query.invalid_argument').
    title
        Human-readable error summary.
    detail
        Detailed description of the error.
    status
        Optional HTTP-style status code.
    instance
        Correlation/trace identifier; defaults to a UUID4.
    type_uri
        URI identifying the problem type; defaults to the project namespace.
    extras
        Optional structured context for diagnostics.

    Returns
    -------
    ProblemDetail
        Structured problem payload.
    """
    return ProblemDetail(
        type=type_uri or f"{PROBLEM_NAMESPACE}/{code}",
        title=title,
        detail=detail,
        status=status,
        instance=instance or generate_correlation_id(),
        code=code,
        extras=extras or {},
    )


def log_problem(logger: logging.Logger | logging.LoggerAdapter, detail: ProblemDetail) -> None:
    """Emit a Problem Detail as a structured error log."""
    logger.error(json.dumps(detail.to_dict(), default=str))


class ProblemError(Exception):
    """Base exception carrying a ProblemDetail payload."""

    def __init__(self, detail: ProblemDetail) -> None:
        super().__init__(detail.detail)
        self.problem_detail = detail


class QueryValidationError(ProblemError):
    """Invalid builder input such as a negative page size or unsafe identifier."""


class TransportError(ProblemError):
    """The transport failed to deliver a usable data envelope."""


class UnsupportedNetworkError(ProblemError):
    """No preset is registered for the requested chain id."""


def invalid_argument(message: str, **context: object) -> QueryValidationError:
    """Construct an invalid-argument error for builder input."""
    return QueryValidationError(
        problem(
            "query.invalid_argument",
            "Invalid argument",
            message,
            status=400,
            extras=dict(context),
        )
    )


def transport_failure(message: str, **context: object) -> TransportError:
    """Construct a transport failure carrying request context."""
    return TransportError(
        problem(
            "transport.failure",
            "Transport failure",
            message,
            status=502,
            extras=dict(context),
        )
    )


def unsupported_network(chain_id: int, supported: list[int]) -> UnsupportedNetworkError:
    """Construct an unsupported-network error listing the known chain ids."""
    listing = ", ".join(str(item) for item in supported)
    return UnsupportedNetworkError(
        problem(
            "network.unsupported",
            "Unsupported network",
            f"Unsupported network with chainId: {chain_id}. Supported networks: {listing}",
            status=404,
            extras={"chain_id": chain_id, "supported": supported},
        )
    )
