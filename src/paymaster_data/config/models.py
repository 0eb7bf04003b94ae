"""Client configuration loaded from keyword arguments or the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, model_validator

from paymaster_data.config.networks import (
    BASE_SEPOLIA_NETWORK,
    get_network_preset,
    unsupported_network_message,
)
from paymaster_data.query.config import DEFAULT_LIMIT, MAX_SAFE_LIMIT
from paymaster_data.transport import DEFAULT_TIMEOUT_SECONDS


def _parse_env_flag(value: str | None, *, default: bool) -> bool:
    """
    Interpret a string environment value as a boolean.

    Parameters
    ----------
    value:
        Raw environment variable value or None.
    default:
        Value to return when the environment variable is unset.

    Returns
    -------
    bool
        Parsed boolean flag.
    """
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


class ClientConfig(BaseModel):
    """
    Settings for building a :class:`~paymaster_data.client.SubgraphClient`.

    The subgraph URL defaults to the network preset of ``chain_id``; an explicit URL
    allows chains without a preset.
    """

    chain_id: int = Field(
        default=BASE_SEPOLIA_NETWORK.chain_id,
        description="EVM chain id used to pick the network preset.",
    )
    subgraph_url: str | None = Field(
        default=None,
        description="GraphQL endpoint; defaults to the preset's subgraph URL.",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        description="Timeout in seconds for each HTTP request.",
    )
    default_limit: int = Field(
        default=DEFAULT_LIMIT,
        description="Page size used when a builder does not call limit().",
    )
    max_limit: int = Field(
        default=MAX_SAFE_LIMIT,
        description="Page size above which limit() logs a warning.",
    )
    log_queries: bool = Field(
        default=False,
        description="Emit one structured log line per executed query.",
    )

    @classmethod
    def from_env(cls) -> ClientConfig:
        """
        Construct a ClientConfig from ``PAYMASTER_DATA_*`` environment variables.

        Returns
        -------
        ClientConfig
            Validated configuration populated from environment values.
        """
        default_chain = str(BASE_SEPOLIA_NETWORK.chain_id)
        chain_id = int(os.environ.get("PAYMASTER_DATA_CHAIN_ID", default_chain))
        subgraph_url = os.environ.get("PAYMASTER_DATA_SUBGRAPH_URL") or None
        timeout_seconds = float(
            os.environ.get("PAYMASTER_DATA_TIMEOUT_SEC", str(DEFAULT_TIMEOUT_SECONDS))
        )
        default_limit = int(os.environ.get("PAYMASTER_DATA_DEFAULT_LIMIT", str(DEFAULT_LIMIT)))
        max_limit = int(os.environ.get("PAYMASTER_DATA_MAX_LIMIT", str(MAX_SAFE_LIMIT)))
        log_queries = _parse_env_flag(os.environ.get("PAYMASTER_DATA_LOG_QUERIES"), default=False)

        return cls(
            chain_id=chain_id,
            subgraph_url=subgraph_url,
            timeout_seconds=timeout_seconds,
            default_limit=default_limit,
            max_limit=max_limit,
            log_queries=log_queries,
        )

    @model_validator(mode="after")
    def _validate_endpoint(self) -> ClientConfig:
        """
        Fill the subgraph URL from the preset and check limits.

        Returns
        -------
        ClientConfig
            Normalized configuration with ``subgraph_url`` set.

        Raises
        ------
        ValueError
            When no URL can be resolved or a limit or timeout is out of range.
        """
        if not self.subgraph_url:
            preset = get_network_preset(self.chain_id)
            if preset is None:
                raise ValueError(unsupported_network_message(self.chain_id))
            self.subgraph_url = preset.default_subgraph_url

        if self.timeout_seconds <= 0:
            message = "timeout_seconds must be positive"
            raise ValueError(message)
        if self.default_limit <= 0:
            message = "default_limit must be positive"
            raise ValueError(message)
        if self.max_limit <= 0:
            message = "max_limit must be positive"
            raise ValueError(message)
        if self.default_limit > self.max_limit:
            message = "default_limit must not exceed max_limit"
            raise ValueError(message)

        return self


__all__ = ["ClientConfig"]
