"""Declarative predicate tables and the shared ``where`` renderer.

Each entity builder declares one table mapping predicate keys to a
:class:`PredicateSpec`. The variable declaration, the condition clause and the
variable value are all derived from that single entry, so the three cannot
drift apart.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from paymaster_data import errors
from paymaster_data.numeric.codec import encode

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ValueTransform = Callable[[object], object]


def _identity(value: object) -> object:
    return value


def _as_int(value: object) -> object:
    try:
        if isinstance(value, str):
            return int(value.strip())
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        message = f"Expected an integer, got {value!r}"
        raise errors.invalid_argument(message, value=repr(value)) from exc


def _as_text(value: object) -> object:
    return value if isinstance(value, str) else str(value)


def _as_lower_text(value: object) -> object:
    return _as_text(value).lower()  # type: ignore[union-attr]


def _each(transform: ValueTransform) -> ValueTransform:
    def _apply(value: object) -> object:
        if isinstance(value, (list, tuple, set, frozenset)):
            return [transform(item) for item in value]
        return [transform(value)]

    return _apply


@dataclass(frozen=True)
class PredicateSpec:
    """
    Wire description of one predicate key.

    Attributes
    ----------
    wire_type:
        GraphQL type used in the variable declaration (``BigInt``, ``[Bytes!]``...).
    condition:
        Filter field inside the ``where`` object (``revenue_gte``). Defaults to the key.
    relation:
        Optional nested relationship filter (``paymaster_``); conditions sharing a
        relation are grouped into one nested object.
    transform:
        Converts the caller's value into the variable value.
    """

    wire_type: str
    condition: str | None = None
    relation: str | None = None
    transform: ValueTransform = _identity


def big_int(
    condition: str | None = None, *, relation: str | None = None, many: bool = False
) -> PredicateSpec:
    """Predicate over an arbitrary-precision integer field, sent as a decimal string."""
    if many:
        return PredicateSpec("[BigInt!]", condition, relation, _each(encode))
    return PredicateSpec("BigInt", condition, relation, encode)


def integer(condition: str | None = None, *, relation: str | None = None) -> PredicateSpec:
    """Predicate over a 32-bit ``Int`` field."""
    return PredicateSpec("Int", condition, relation, _as_int)


def string(
    condition: str | None = None, *, relation: str | None = None, many: bool = False
) -> PredicateSpec:
    """Predicate over a ``String`` field."""
    if many:
        return PredicateSpec("[String!]", condition, relation, _each(_as_text))
    return PredicateSpec("String", condition, relation, _as_text)


def address(
    condition: str | None = None, *, relation: str | None = None, many: bool = False
) -> PredicateSpec:
    """Predicate over a ``Bytes`` address; values are lowercased as the indexer stores them."""
    if many:
        return PredicateSpec("[Bytes!]", condition, relation, _each(_as_lower_text))
    return PredicateSpec("Bytes", condition, relation, _as_lower_text)


def identifier(condition: str | None = None) -> PredicateSpec:
    """Predicate over an entity ``ID``."""
    return PredicateSpec("ID", condition, None, _as_text)


def boolean(condition: str | None = None) -> PredicateSpec:
    """Predicate over a ``Boolean`` field."""
    return PredicateSpec("Boolean", condition, None, bool)


PredicateTable = Mapping[str, PredicateSpec]


@dataclass(frozen=True)
class RenderedPredicates:
    """Variable declarations, where-clause body and variable values for active keys."""

    declarations: list[str]
    conditions: list[str]
    variables: dict[str, object]
    ignored: list[str]


def render_predicates(table: PredicateTable, where: Mapping[str, object]) -> RenderedPredicates:
    """
    Render the active predicate keys of ``where`` using ``table``.

    Keys absent from ``table`` are reported in ``ignored`` and contribute nothing,
    so a declaration is only ever emitted for a variable that is also used.

    Returns
    -------
    RenderedPredicates
        One declaration, one condition and one variable per known active key.
    """
    declarations: list[str] = []
    flat: list[str] = []
    nested: dict[str, list[str]] = {}
    variables: dict[str, object] = {}
    ignored: list[str] = []
    for key, value in where.items():
        spec = table.get(key)
        if spec is None:
            ignored.append(key)
            continue
        declarations.append(f"${key}: {spec.wire_type}")
        clause = f"{spec.condition or key}: ${key}"
        if spec.relation is None:
            flat.append(clause)
        else:
            nested.setdefault(spec.relation, []).append(clause)
        variables[key] = spec.transform(value)
    conditions = flat + [
        f"{relation}: {{{', '.join(clauses)}}}" for relation, clauses in nested.items()
    ]
    return RenderedPredicates(
        declarations=declarations,
        conditions=conditions,
        variables=variables,
        ignored=ignored,
    )


def merge_tables(*tables: PredicateTable) -> dict[str, PredicateSpec]:
    """Combine predicate tables; later tables override earlier keys."""
    merged: dict[str, PredicateSpec] = {}
    for table in tables:
        merged.update(table)
    return merged


def range_predicates(
    field: str, factory: Callable[[str], PredicateSpec]
) -> dict[str, PredicateSpec]:
    """
    Return equality and comparison predicates for one numeric field.

    Returns
    -------
    dict[str, PredicateSpec]
        Entries for ``field``, ``field_gt``, ``field_gte``, ``field_lt`` and ``field_lte``.
    """
    return {
        f"{field}{suffix}": factory(f"{field}{suffix}")
        for suffix in ("", "_gt", "_gte", "_lt", "_lte")
    }
