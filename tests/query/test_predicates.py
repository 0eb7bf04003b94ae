"""Tests for predicate tables and where-clause rendering."""

from __future__ import annotations

from paymaster_data.query.predicates import (
    address,
    big_int,
    boolean,
    identifier,
    integer,
    merge_tables,
    range_predicates,
    render_predicates,
    string,
)
from tests._helpers.expect import expect_equal

TABLE = merge_tables(
    {
        "id": identifier(),
        "network": string(),
        "address_in": address(many=True),
        "isUsed": boolean(),
        "paymasterAddress": address("address", relation="paymaster_"),
        "paymasterType": string("contractType", relation="paymaster_"),
    },
    range_predicates("rootIndex", integer),
    range_predicates("revenue", big_int),
)


def test_range_predicates_cover_equality_and_comparisons() -> None:
    """One numeric field expands to five keys with matching conditions."""
    table = range_predicates("gasUsed", big_int)
    expect_equal(
        sorted(table),
        ["gasUsed", "gasUsed_gt", "gasUsed_gte", "gasUsed_lt", "gasUsed_lte"],
    )
    expect_equal(table["gasUsed_gte"].condition, "gasUsed_gte", label="condition")


def test_render_emits_declarations_conditions_and_variables_in_lock_step() -> None:
    """Every active key produces exactly one declaration, condition and variable."""
    rendered = render_predicates(
        TABLE, {"network": "base-sepolia", "revenue_gte": 10**21, "rootIndex_lte": "7"}
    )
    expect_equal(
        rendered.declarations,
        ["$network: String", "$revenue_gte: BigInt", "$rootIndex_lte: Int"],
        label="declarations",
    )
    expect_equal(
        rendered.conditions,
        ["network: $network", "revenue_gte: $revenue_gte", "rootIndex_lte: $rootIndex_lte"],
        label="conditions",
    )
    expect_equal(
        rendered.variables,
        {"network": "base-sepolia", "revenue_gte": "1000000000000000000000", "rootIndex_lte": 7},
        label="variables",
    )


def test_relation_predicates_are_grouped_into_one_nested_object() -> None:
    """Conditions sharing a relation render inside a single nested filter."""
    rendered = render_predicates(
        TABLE, {"paymasterAddress": "0xABCDEF", "paymasterType": "GasLimited"}
    )
    expect_equal(
        rendered.conditions,
        ["paymaster_: {address: $paymasterAddress, contractType: $paymasterType}"],
        label="conditions",
    )
    expect_equal(rendered.variables["paymasterAddress"], "0xabcdef", label="lowercased")


def test_list_and_boolean_values_are_normalized() -> None:
    """Address lists are lowercased element-wise and flags stay booleans."""
    rendered = render_predicates(TABLE, {"address_in": ["0xAA", "0xBb"], "isUsed": False})
    expect_equal(rendered.declarations, ["$address_in: [Bytes!]", "$isUsed: Boolean"])
    expect_equal(rendered.variables, {"address_in": ["0xaa", "0xbb"], "isUsed": False})


def test_unknown_keys_are_reported_and_not_rendered() -> None:
    """Keys missing from the table contribute nothing to the document."""
    rendered = render_predicates(TABLE, {"bogus_key": 1, "id": "base-sepolia-1"})
    expect_equal(rendered.ignored, ["bogus_key"], label="ignored")
    expect_equal(rendered.declarations, ["$id: ID"], label="declarations")
    expect_equal(rendered.variables, {"id": "base-sepolia-1"}, label="variables")
