"""Tests for the GraphQL-over-HTTP transport."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

import anyio
import httpx
import pytest

from paymaster_data import errors
from paymaster_data.transport import DataEnvelope, HttpTransport
from tests._helpers.expect import expect_equal, expect_true

URL = "https://subgraph.example.test/query"
QUERY = "query GetPools($first: Int!) { pools(first: $first) { id } }"


def _transport(handler: Callable[[httpx.Request], httpx.Response]) -> HttpTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpTransport(url=URL, client=client)


def _execute(
    handler: Callable[[httpx.Request], httpx.Response], variables: dict[str, object] | None = None
) -> DataEnvelope:
    transport = _transport(handler)

    async def _run() -> DataEnvelope:
        return await transport(QUERY, variables or {})

    return anyio.run(_run)


def test_posts_query_and_unwraps_data() -> None:
    """The document and variables are posted as JSON and ``data`` is returned."""
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"data": {"pools": [{"id": "1"}]}})

    data = _execute(handler, {"first": 5})

    expect_equal(data, {"pools": [{"id": "1"}]}, label="data")
    expect_equal(seen, [{"query": QUERY, "variables": {"first": 5}}], label="request body")


def test_graphql_errors_raise_transport_error() -> None:
    """A non-empty ``errors`` array fails with the joined messages."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"errors": [{"message": "bad field"}, {"message": "bad type"}]}
        )

    with pytest.raises(errors.TransportError, match="GraphQL errors: bad field; bad type") as exc:
        _execute(handler)
    expect_equal(
        exc.value.problem_detail.extras["graphql_errors"], ["bad field", "bad type"], label="extras"
    )


def test_http_error_status_raises_transport_error() -> None:
    """Error status codes are reported with the status in the problem extras."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(errors.TransportError, match="HTTP 503") as exc:
        _execute(handler)
    expect_equal(exc.value.problem_detail.extras["status_code"], 503, label="status")


def test_failures_are_logged_as_problem_details(caplog: pytest.LogCaptureFixture) -> None:
    """Each transport failure leaves one JSON problem line on the transport logger."""
    caplog.set_level(logging.ERROR, logger="paymaster_data.transport")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(errors.TransportError) as exc:
        _execute(handler)

    lines = [record for record in caplog.records if record.name == "paymaster_data.transport"]
    expect_equal(len(lines), 1, label="problem lines")
    payload = json.loads(lines[0].getMessage())
    expect_equal(payload["code"], "transport.failure", label="code")
    expect_equal(payload["instance"], exc.value.problem_detail.instance, label="instance")
    expect_equal(payload["extras"]["status_code"], 500, label="status")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"data": None}),
    ],
)
def test_unusable_bodies_raise_transport_error(response: httpx.Response) -> None:
    """Bodies without a data object are transport failures."""

    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(errors.TransportError):
        _execute(handler)


def test_network_failure_is_wrapped() -> None:
    """Connection errors are raised as transport errors chained to the cause."""

    def handler(request: httpx.Request) -> httpx.Response:
        message = "connection refused"
        raise httpx.ConnectError(message, request=request)

    with pytest.raises(errors.TransportError, match="Request to subgraph failed") as exc:
        _execute(handler)
    expect_true(isinstance(exc.value.__cause__, httpx.ConnectError), message="cause lost")


def test_injected_client_is_not_closed() -> None:
    """Callers keep ownership of a client they injected."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda _: httpx.Response(200)))
    transport = HttpTransport(url=URL, client=client)
    anyio.run(transport.aclose)
    expect_true(not client.is_closed, message="injected client was closed")
    anyio.run(client.aclose)


def test_owned_client_is_closed_from_sync_code() -> None:
    """A transport-created client is closed by ``close()``."""
    transport = HttpTransport(url=URL, timeout=2.0)
    transport.close()
    expect_true(
        transport.client is not None and transport.client.is_closed,
        message="owned client still open",
    )
