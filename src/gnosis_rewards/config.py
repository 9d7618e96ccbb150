"""Configuration containers for the Gnosis validator rewards client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from web3 import Web3

from .constants import (
    GNO_TOKEN_ADDRESS,
    GNOSIS_CHAIN_ID,
    GNOSIS_CHAIN_NAME,
    GNOSIS_EXPLORER_URL,
    GNOSIS_INDEXER_URL,
    GNOSIS_RPC_URL,
    INDEXER_MAX_PAGES,
    INDEXER_PAGE_SIZE,
    NATIVE_CURRENCY,
    VALIDATOR_CONTRACT_ADDRESS,
)
from .exceptions import ValidationError

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SAFE_SDK_TIMEOUT = 5.0
DEFAULT_SAFE_SDK_POLL_INTERVAL = 0.1
DEFAULT_MESSAGE_TTL = 5.0
DEFAULT_CLAIM_REFRESH_DELAY = 3.0

ENV_PREFIX = "GNOSIS_"


@dataclass(frozen=True)
class ChainConfig:
    """Chain metadata used for switching and adding the chain in a wallet."""

    chain_id: int = GNOSIS_CHAIN_ID
    chain_name: str = GNOSIS_CHAIN_NAME
    native_currency: Mapping[str, Any] = field(default_factory=lambda: dict(NATIVE_CURRENCY))
    rpc_urls: tuple[str, ...] = (GNOSIS_RPC_URL,)
    block_explorer_urls: tuple[str, ...] = (GNOSIS_EXPLORER_URL,)

    @property
    def hex_chain_id(self) -> str:
        return hex(self.chain_id)

    def as_add_chain_params(self) -> dict[str, Any]:
        """Return the ``wallet_addEthereumChain`` parameter object."""

        return {
            "chainId": self.hex_chain_id,
            "chainName": self.chain_name,
            "nativeCurrency": dict(self.native_currency),
            "rpcUrls": list(self.rpc_urls),
            "blockExplorerUrls": list(self.block_explorer_urls),
        }


@dataclass(frozen=True)
class ClientConfig:
    """Aggregated configuration for one dashboard deployment."""

    validator_contract_address: str = VALIDATOR_CONTRACT_ADDRESS
    token_contract_address: str = GNO_TOKEN_ADDRESS
    chain: ChainConfig = field(default_factory=ChainConfig)
    rpc_url: str = GNOSIS_RPC_URL
    indexer_url: str = GNOSIS_INDEXER_URL
    indexer_page_size: int = INDEXER_PAGE_SIZE
    indexer_max_pages: int = INDEXER_MAX_PAGES
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    safe_sdk_timeout: float = DEFAULT_SAFE_SDK_TIMEOUT
    safe_sdk_poll_interval: float = DEFAULT_SAFE_SDK_POLL_INTERVAL
    message_ttl: float = DEFAULT_MESSAGE_TTL
    claim_refresh_delay: float = DEFAULT_CLAIM_REFRESH_DELAY
    demo_mode: bool = False
    parameterless_claim: bool = True

    def __post_init__(self) -> None:
        for name in ("validator_contract_address", "token_contract_address"):
            value = getattr(self, name)
            if not Web3.is_address(value):
                raise ValidationError(f"Invalid contract address for {name}", field=name, value=value)
            object.__setattr__(self, name, Web3.to_checksum_address(value))

        for name in ("indexer_page_size", "indexer_max_pages"):
            value = getattr(self, name)
            if value <= 0:
                raise ValidationError(f"{name} must be positive", field=name, value=value)

        object.__setattr__(self, "indexer_url", self.indexer_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from ``GNOSIS_*`` environment variables.

        Unset variables keep their defaults. Recognised names are the upper-cased
        field names, e.g. ``GNOSIS_RPC_URL`` or ``GNOSIS_DEMO_MODE``.
        """

        env = os.environ if environ is None else environ
        config = cls()
        overrides: dict[str, Any] = {}

        for name in (
            "validator_contract_address",
            "token_contract_address",
            "rpc_url",
            "indexer_url",
        ):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                overrides[name] = raw

        for name in (
            "request_timeout",
            "safe_sdk_timeout",
            "safe_sdk_poll_interval",
            "message_ttl",
            "claim_refresh_delay",
        ):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                overrides[name] = _parse_float(name, raw)

        for name in ("indexer_page_size", "indexer_max_pages"):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                try:
                    overrides[name] = int(raw)
                except ValueError as exc:
                    raise ValidationError(
                        f"{name} must be an integer", field=name, value=raw
                    ) from exc

        for name in ("demo_mode", "parameterless_claim"):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                overrides[name] = raw.strip().lower() in {"1", "true", "yes", "on"}

        raw_chain_id = env.get(ENV_PREFIX + "CHAIN_ID")
        if raw_chain_id:
            try:
                chain_id = int(raw_chain_id, 0)
            except ValueError as exc:
                raise ValidationError(
                    "Chain id must be an integer", field="chain_id", value=raw_chain_id
                ) from exc
            overrides["chain"] = replace(config.chain, chain_id=chain_id)

        return replace(config, **overrides) if overrides else config


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number", field=name, value=raw) from exc
