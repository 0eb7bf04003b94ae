"""Static network presets: subgraph endpoints and deployed paymaster contracts."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from paymaster_data import errors
from paymaster_data.query.records import PaymasterType

PAYMASTER_TYPES: tuple[PaymasterType, ...] = ("GasLimited", "OneTimeUse")


@dataclass(frozen=True)
class PaymasterContractConfig:
    """One deployed paymaster contract."""

    address: str
    start_block: int
    type: PaymasterType


@dataclass(frozen=True)
class NetworkConfig:
    """Chain identity and the paymaster contracts deployed on it."""

    name: str
    chain_id: int
    chain_name: str
    network_name: str
    paymasters: tuple[PaymasterContractConfig, ...] = ()
    verifier: str | None = None


@dataclass(frozen=True)
class NetworkPreset:
    """A network plus the default endpoints used to reach it."""

    network: NetworkConfig
    default_subgraph_url: str
    description: str
    default_rpc_url: str | None = None
    supported_paymaster_types: tuple[PaymasterType, ...] = field(default=PAYMASTER_TYPES)


BASE_SEPOLIA_NETWORK = NetworkConfig(
    name="Base Sepolia",
    chain_id=84532,
    chain_name="base-sepolia",
    network_name="base-sepolia",
    paymasters=(
        PaymasterContractConfig(
            address="0x3BEeC075aC5A77fFE0F9ee4bbb3DCBd07fA93fbf",
            start_block=27904637,
            type="GasLimited",
        ),
        PaymasterContractConfig(
            address="0x243A735115F34BD5c0F23a33a444a8d26e31E2E7",
            start_block=27904638,
            type="OneTimeUse",
        ),
    ),
)

BASE_SEPOLIA_PRESET = NetworkPreset(
    network=BASE_SEPOLIA_NETWORK,
    default_subgraph_url=(
        "https://api.studio.thegraph.com/query/113435/prepaid-gas-paymaster-v2/version/latest"
    ),
    default_rpc_url="https://sepolia.base.org",
    description="Base Sepolia testnet with GasLimited and OneTimeUse paymasters",
)

NETWORK_PRESETS: dict[int, NetworkPreset] = {
    BASE_SEPOLIA_NETWORK.chain_id: BASE_SEPOLIA_PRESET,
}

NETWORK_PRESETS_BY_NAME: dict[str, NetworkPreset] = {
    "BASE_SEPOLIA": BASE_SEPOLIA_PRESET,
}


def get_network_preset(chain_id: int) -> NetworkPreset | None:
    """Preset for ``chain_id``, or ``None`` when the chain is not supported."""
    return NETWORK_PRESETS.get(chain_id)


def get_network_preset_by_name(name: str) -> NetworkPreset | None:
    """Preset registered under ``name`` (``"BASE_SEPOLIA"``), or ``None``."""
    return NETWORK_PRESETS_BY_NAME.get(name)


def get_supported_chain_ids() -> list[int]:
    """Chain ids with a preset, in registration order."""
    return list(NETWORK_PRESETS)


def get_supported_network_names() -> list[str]:
    """Names accepted by :func:`get_network_preset_by_name`."""
    return list(NETWORK_PRESETS_BY_NAME)


def is_supported_chain_id(chain_id: int) -> bool:
    """Return whether ``chain_id`` has a preset."""
    return chain_id in NETWORK_PRESETS


def unsupported_network_message(chain_id: int) -> str:
    """Human-readable explanation listing the supported chain ids."""
    return str(errors.unsupported_network(chain_id, get_supported_chain_ids()))


def _is_http_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.scheme in {"http", "https"} and bool(url.host)


def validate_network_config(network: NetworkConfig) -> list[str]:
    """
    Check a network definition for missing or inconsistent values.

    Returns
    -------
    list[str]
        Problems found; empty when the network is valid.
    """
    problems: list[str] = []
    if not network.name.strip():
        problems.append("Network name is required")
    if network.chain_id <= 0:
        problems.append("Valid chain ID is required")
    if not network.chain_name.strip():
        problems.append("Chain name is required")
    if not network.network_name.strip():
        problems.append("Network name is required")
    if not network.paymasters:
        problems.append("At least one paymaster contract is required")
    for position, contract in enumerate(network.paymasters, start=1):
        if not contract.address.startswith("0x"):
            problems.append(f"Paymaster {position}: Invalid contract address")
        if contract.start_block < 0:
            problems.append(f"Paymaster {position}: Invalid start block")
        if contract.type not in PAYMASTER_TYPES:
            problems.append(f"Paymaster {position}: Invalid contract type")
    addresses = [contract.address.lower() for contract in network.paymasters]
    if len(addresses) != len(set(addresses)):
        problems.append("Duplicate paymaster contract addresses found")
    return problems


def validate_network_preset(preset: NetworkPreset) -> list[str]:
    """
    Check a preset, including its network, endpoints and advertised paymaster types.

    Returns
    -------
    list[str]
        Problems found; empty when the preset is valid.
    """
    problems = validate_network_config(preset.network)
    if not preset.default_subgraph_url:
        problems.append("Default subgraph URL is required")
    elif not _is_http_url(preset.default_subgraph_url):
        problems.append("Default subgraph URL must be a valid URL")
    if preset.default_rpc_url and not _is_http_url(preset.default_rpc_url):
        problems.append("Default RPC URL must be a valid URL")
    if not preset.description.strip():
        problems.append("Description is required")
    if not preset.supported_paymaster_types:
        problems.append("At least one supported paymaster type is required")
    deployed = {contract.type for contract in preset.network.paymasters}
    problems.extend(
        f"{kind} paymaster type is listed as supported but no contract address provided"
        for kind in preset.supported_paymaster_types
        if kind not in deployed
    )
    return problems


def require_network_preset(chain_id: int) -> NetworkPreset:
    """
    Resolve and validate the preset for ``chain_id``.

    Returns
    -------
    NetworkPreset
        The validated preset.

    Raises
    ------
    errors.UnsupportedNetworkError
        When no preset exists for ``chain_id``.
    ValueError
        When the registered preset fails validation.
    """
    preset = get_network_preset(chain_id)
    if preset is None:
        raise errors.unsupported_network(chain_id, get_supported_chain_ids())
    problems = validate_network_preset(preset)
    if problems:
        message = f"Invalid network preset for chainId {chain_id}: {', '.join(problems)}"
        raise ValueError(message)
    return preset


def paymaster_by_type(
    network: NetworkConfig, contract_type: PaymasterType
) -> PaymasterContractConfig | None:
    """The network's paymaster of ``contract_type``, if deployed."""
    return next((item for item in network.paymasters if item.type == contract_type), None)


def paymaster_by_address(network: NetworkConfig, address: str) -> PaymasterContractConfig | None:
    """The network's paymaster at ``address``, compared case-insensitively."""
    wanted = address.lower()
    return next((item for item in network.paymasters if item.address.lower() == wanted), None)


def default_paymaster(network: NetworkConfig) -> PaymasterContractConfig | None:
    """GasLimited paymaster when deployed, otherwise OneTimeUse."""
    return paymaster_by_type(network, "GasLimited") or paymaster_by_type(network, "OneTimeUse")


def supports_paymaster_type(chain_id: int, contract_type: PaymasterType) -> bool:
    """Return whether the preset for ``chain_id`` advertises ``contract_type``."""
    preset = get_network_preset(chain_id)
    return preset is not None and contract_type in preset.supported_paymaster_types
