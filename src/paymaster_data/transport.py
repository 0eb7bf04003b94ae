"""Transport boundary: execute a GraphQL document and return its data envelope."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar, Protocol

import anyio
import httpx

from paymaster_data import errors

LOG = logging.getLogger("paymaster_data.transport")

HTTP_ERROR_STATUS = 400
DEFAULT_TIMEOUT_SECONDS = 30.0

DataEnvelope = Mapping[str, object]


class QueryTransport(Protocol):
    """Callable executing a query document with variables."""

    async def __call__(self, query: str, variables: dict[str, object]) -> DataEnvelope:
        """Return the ``data`` object of a successful response."""
        ...


async def _aclose_client(client: httpx.AsyncClient) -> None:
    await client.aclose()


def _failure(message: str, **context: object) -> errors.TransportError:
    failure = errors.transport_failure(message, **context)
    errors.log_problem(LOG, failure.problem_detail)
    return failure


def _error_messages(payload: object) -> list[str]:
    if not isinstance(payload, list):
        return [str(payload)]
    messages: list[str] = []
    for item in payload:
        if isinstance(item, Mapping) and "message" in item:
            messages.append(str(item["message"]))
        else:
            messages.append(str(item))
    return messages


@dataclass
class HttpTransport:
    """
    GraphQL-over-HTTP transport backed by ``httpx.AsyncClient``.

    Failures are logged as Problem Details and raised as
    :class:`~paymaster_data.errors.TransportError`; they are never retried here.
    """

    name: ClassVar[str] = "http"

    url: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    client: httpx.AsyncClient | None = None
    headers: dict[str, str] = field(default_factory=dict)
    _owns_client: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        """Create the HTTP client when one was not injected."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout, headers=self.headers)
            self._owns_client = True

    async def __call__(self, query: str, variables: dict[str, object]) -> DataEnvelope:
        """
        POST the query and unwrap the ``data`` envelope.

        Parameters
        ----------
        query:
            GraphQL document.
        variables:
            JSON-serializable variables.

        Returns
        -------
        DataEnvelope
            Mapping from root field name to its payload.

        Raises
        ------
        errors.TransportError
            On network failure, HTTP error status, undecodable body or GraphQL errors.
        """
        client = self.client
        if client is None:
            message = "HTTP client is not initialized"
            raise _failure(message, url=self.url)
        try:
            response = await client.post(
                self.url, json={"query": query, "variables": variables}
            )
        except httpx.HTTPError as exc:
            message = f"Request to subgraph failed: {exc}"
            raise _failure(message, url=self.url) from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            message = f"Subgraph responded with HTTP {response.status_code}"
            raise _failure(
                message, url=self.url, status_code=response.status_code
            )
        try:
            body = response.json()
        except ValueError as exc:
            message = "Subgraph response is not valid JSON"
            raise _failure(message, url=self.url) from exc
        if not isinstance(body, Mapping):
            message = "Subgraph response is not a JSON object"
            raise _failure(message, url=self.url)
        if body.get("errors"):
            messages = _error_messages(body["errors"])
            message = f"GraphQL errors: {'; '.join(messages)}"
            raise _failure(message, url=self.url, graphql_errors=messages)
        data = body.get("data")
        if not isinstance(data, Mapping):
            message = "Subgraph response is missing a data object"
            raise _failure(message, url=self.url)
        LOG.debug("subgraph response received for %s", self.url)
        return data

    async def aclose(self) -> None:
        """Close the underlying HTTP client when owned by this transport."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    def close(self) -> None:
        """Close the owned HTTP client from synchronous code."""
        if self._owns_client and self.client is not None:
            anyio.run(_aclose_client, self.client)
