"""Runtime settings for dymension-bridge.

Static registry data (domains, token ids, escrow addresses) lives in
``chains`` and ``tokens``; this module only covers what an operator may want
to override from the environment.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .chains import DEFAULT_RPC_URLS, HUB_REST_ENDPOINTS, Network
from .logging_config import setup_logging


class BridgeSettings(BaseSettings):
    """Main bridge configuration."""

    network: Literal["mainnet", "testnet"] = "mainnet"

    # Hub REST API used by the fee provider; empty means network default
    hub_rest_url: str = ""
    request_timeout_seconds: float = 10.0
    fee_cache_ttl_seconds: float = 60.0

    # Transfer defaults
    default_gas_limit: int = 200_000
    ibc_timeout_hours: int = 1

    # Per-chain RPC overrides, merged over the built-in defaults
    rpc_urls: Dict[str, str] = Field(default_factory=dict)

    # IGP hook id per token symbol, used for outbound gas quotes
    igp_hooks: Dict[str, str] = Field(default_factory=dict)

    # Sealevel warp program per token symbol, for Solana deposits
    solana_warp_programs: Dict[str, str] = Field(default_factory=dict)

    # Logging
    # Install root log handlers from these settings when a client starts
    configure_logging: bool = False
    log_level: str = "INFO"
    json_logs: bool = True
    log_file: Optional[str] = None

    class Config:
        env_prefix = "DYM_BRIDGE_"
        env_nested_delimiter = "__"
        env_file = ".env"
        extra = "ignore"

    @field_validator("hub_rest_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("default_gas_limit", "ibc_timeout_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("fee_cache_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError("cache TTL cannot be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {v}")
        return level

    @property
    def network_enum(self) -> Network:
        return Network(self.network)

    def resolved_hub_rest_url(self) -> str:
        """Hub REST endpoint, falling back to the network's public node."""
        return self.hub_rest_url or HUB_REST_ENDPOINTS[self.network_enum]

    def rpc_url(self, chain: str) -> Optional[str]:
        """JSON-RPC endpoint for a chain, used for source-chain gas quotes."""
        if chain in self.rpc_urls:
            return self.rpc_urls[chain]
        if self.network_enum == Network.MAINNET:
            return DEFAULT_RPC_URLS.get(chain)
        return None

    def apply_logging(self) -> None:
        setup_logging(level=self.log_level, json_format=self.json_logs, log_file=self.log_file)


@lru_cache
def load_settings(env_file: Optional[str] = None) -> BridgeSettings:
    """Load settings once per process."""
    if env_file:
        return BridgeSettings(_env_file=env_file)
    return BridgeSettings()


__all__ = ["BridgeSettings", "load_settings"]
