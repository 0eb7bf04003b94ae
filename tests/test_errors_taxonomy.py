"""Tests for the error taxonomy and Problem Details helpers."""

from __future__ import annotations

import json
import logging

import pytest

from paymaster_data import errors
from tests._helpers.expect import expect_equal, expect_true


def test_problem_fills_type_and_instance() -> None:
    """Problems get a namespaced type URI and a correlation id."""
    detail = errors.problem("query.invalid_argument", "Invalid argument", "limit must be >= 0")
    expect_equal(
        detail.type, f"{errors.PROBLEM_NAMESPACE}/query.invalid_argument", label="type uri"
    )
    expect_true(bool(detail.instance), message="instance should be generated")
    payload = detail.to_dict()
    expect_true("status" not in payload, message="unset status serialized")
    expect_true("extras" not in payload, message="empty extras serialized")


def test_factories_build_typed_errors() -> None:
    """Each factory returns its subclass carrying the problem detail."""
    invalid = errors.invalid_argument("bad limit", requested=-1)
    failure = errors.transport_failure("down", url="https://x")
    unsupported = errors.unsupported_network(10, [84532])

    expect_true(isinstance(invalid, errors.QueryValidationError), message="validation")
    expect_true(isinstance(failure, errors.TransportError), message="transport")
    expect_true(isinstance(unsupported, errors.UnsupportedNetworkError), message="network")
    for err in (invalid, failure, unsupported):
        expect_true(isinstance(err, errors.ProblemError), message=f"{err!r} not a ProblemError")
    expect_equal(invalid.problem_detail.status, 400, label="validation status")
    expect_equal(failure.problem_detail.extras, {"url": "https://x"}, label="extras")
    expect_equal(str(invalid), "bad limit", label="message")


def test_log_problem_emits_json(caplog: pytest.LogCaptureFixture) -> None:
    """Problems are logged as one JSON error line."""
    logger = logging.getLogger("test_errors_taxonomy")
    caplog.set_level(logging.ERROR, logger=logger.name)
    detail = errors.problem("transport.failure", "Transport failure", "boom", status=502)

    errors.log_problem(logger, detail)

    payload = json.loads(caplog.records[-1].getMessage())
    expect_equal(payload["code"], "transport.failure", label="code")
    expect_equal(payload["status"], 502, label="status")
