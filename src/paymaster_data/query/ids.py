"""Composite entity identifiers rebuilt from their natural keys."""

from __future__ import annotations


def paymaster_id(network: str, address: str) -> str:
    """Identifier of a paymaster contract: ``network-address`` with a lowercased address."""
    return f"{network}-{address.lower()}"


def pool_id(network: str, pool: object) -> str:
    """Identifier of a pool: ``network-poolId``."""
    return f"{network}-{pool}"


def transaction_id(network: str, transaction_hash: str) -> str:
    """Identifier of a sponsored operation: ``network-hash``."""
    return f"{network}-{transaction_hash.lower()}"


def merkle_root_id(network: str, pool: object, root_index: int) -> str:
    """Identifier of a root history entry: ``network-poolId-rootIndex``."""
    return f"{network}-{pool}-{root_index}"
