"""Lossless conversion between Python ints and the decimal-string wire form.

The subgraph transports every on-chain integer (amounts, counts, block numbers,
timestamps, field elements) as a JSON string. Two traversals are provided and
must stay distinct:

- :func:`encode_structural` is type driven: every ``int`` leaf becomes a string.
- :func:`decode_by_field_list` is name driven: only string leaves stored under an
  allow-listed key become ``int``. Wire JSON cannot tell us which strings were
  integers, so decoding always needs the entity's field list.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence

LOG = logging.getLogger("paymaster_data.numeric")

_PREFIXED_BASES = ("0x", "0o", "0b")


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def encode(value: object) -> object:
    """
    Convert an integer (or integral float magnitude) to its base-10 string.

    Parameters
    ----------
    value:
        Value to encode. ``int`` is rendered exactly; a finite ``float`` is floored
        first. Any other value, including strings, passes through unchanged.

    Returns
    -------
    object
        Decimal string for numeric input, otherwise ``value`` itself.
    """
    if _is_integer(value):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(math.floor(value))
    return value


def _parse_literal(text: str) -> int:
    literal = text.strip()
    if not literal:
        return 0
    if "_" in literal:
        message = f"digit separators are not allowed: {text!r}"
        raise ValueError(message)
    if literal.lower().startswith(_PREFIXED_BASES):
        return int(literal, 0)
    return int(literal, 10)


def decode(value: object) -> int:
    """
    Parse a wire value into an ``int`` without ever raising.

    Parameters
    ----------
    value:
        Decimal string (``0x``/``0o``/``0b`` prefixes are accepted), ``int`` or ``float``.

    Returns
    -------
    int
        Parsed integer, or ``0`` when the value cannot be interpreted. The failure is
        reported as a warning on the ``paymaster_data.numeric`` logger.
    """
    if _is_integer(value):
        return int(value)  # type: ignore[arg-type]
    if isinstance(value, float) and math.isfinite(value):
        return math.floor(value)
    if isinstance(value, str):
        try:
            return _parse_literal(value)
        except ValueError:
            pass
    LOG.warning("Failed to parse integer value %r; using 0", value)
    return 0


def encode_structural(value: object) -> object:
    """
    Recursively encode every integer leaf of a record.

    Mappings become plain dicts and sequences become lists. Booleans, strings and
    ``None`` are left untouched, and absent keys stay absent.

    Returns
    -------
    object
        Structure of the same shape with integer leaves rendered as strings.
    """
    if _is_integer(value):
        return str(value)
    if isinstance(value, Mapping):
        return {key: encode_structural(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_structural(item) for item in value]
    return value


def decode_by_field_list(value: object, fields: Iterable[str]) -> object:
    """
    Recursively decode string leaves stored under the allow-listed keys.

    Parameters
    ----------
    value:
        Wire record, list of records, or scalar.
    fields:
        Key names whose string values hold integers. The same list applies at every
        nesting depth, so a nested ``pool { poolId }`` is decoded when ``poolId`` is
        listed.

    Returns
    -------
    object
        Structure of the same shape with matching leaves converted to ``int``.
    """
    allowed = fields if isinstance(fields, (set, frozenset)) else frozenset(fields)
    return _decode_node(value, allowed, convert=False)


def _decode_node(value: object, fields: frozenset[str] | set[str], *, convert: bool) -> object:
    if isinstance(value, Mapping):
        return {
            key: _decode_node(item, fields, convert=key in fields) for key, item in value.items()
        }
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [_decode_node(item, fields, convert=convert) for item in value]
    if convert and isinstance(value, str):
        return decode(value)
    return value
