"""Arbitrary-precision integer codec for subgraph wire values."""

from __future__ import annotations

from paymaster_data.numeric.codec import decode, decode_by_field_list, encode, encode_structural

__all__ = ["decode", "decode_by_field_list", "encode", "encode_structural"]
