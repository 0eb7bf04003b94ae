"""Network presets and client configuration."""

from __future__ import annotations

from paymaster_data.config.models import ClientConfig
from paymaster_data.config.networks import (
    BASE_SEPOLIA_NETWORK,
    BASE_SEPOLIA_PRESET,
    NETWORK_PRESETS,
    NETWORK_PRESETS_BY_NAME,
    NetworkConfig,
    NetworkPreset,
    PaymasterContractConfig,
    default_paymaster,
    get_network_preset,
    get_network_preset_by_name,
    get_supported_chain_ids,
    get_supported_network_names,
    is_supported_chain_id,
    paymaster_by_address,
    paymaster_by_type,
    require_network_preset,
    supports_paymaster_type,
    unsupported_network_message,
    validate_network_config,
    validate_network_preset,
)

__all__ = [
    "BASE_SEPOLIA_NETWORK",
    "BASE_SEPOLIA_PRESET",
    "NETWORK_PRESETS",
    "NETWORK_PRESETS_BY_NAME",
    "ClientConfig",
    "NetworkConfig",
    "NetworkPreset",
    "PaymasterContractConfig",
    "default_paymaster",
    "get_network_preset",
    "get_network_preset_by_name",
    "get_supported_chain_ids",
    "get_supported_network_names",
    "is_supported_chain_id",
    "paymaster_by_address",
    "paymaster_by_type",
    "require_network_preset",
    "supports_paymaster_type",
    "unsupported_network_message",
    "validate_network_config",
    "validate_network_preset",
]
