"""Injected wallet provider access."""

from __future__ import annotations

import logging
from typing import Any

from ..base import ConnectorBase
from ..config import ChainConfig
from ..exceptions import (
    UNRECOGNIZED_CHAIN_CODE,
    NoAccountsError,
    WalletUnavailableError,
)
from ..types import (
    AccountsListener,
    ChainListener,
    ConnectionContext,
    EIP1193Provider,
    Unsubscribe,
)

logger = logging.getLogger(__name__)

ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"


class WalletConnector(ConnectorBase):
    """Talk to an EIP-1193 provider such as MetaMask or :class:`Web3Provider`."""

    context = ConnectionContext.WALLET

    def __init__(self, provider: EIP1193Provider | None, chain: ChainConfig) -> None:
        self._provider = provider
        self._chain = chain

    @property
    def provider(self) -> EIP1193Provider | None:
        return self._provider

    def is_available(self) -> bool:
        return self._provider is not None

    def _require_provider(self, message: str) -> EIP1193Provider:
        if self._provider is None:
            raise WalletUnavailableError(message)
        return self._provider

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    async def request_accounts(self) -> list[str]:
        provider = self._require_provider("Please install MetaMask or another Ethereum wallet")

        accounts = await provider.request("eth_requestAccounts")
        accounts = list(accounts or [])
        if not accounts:
            raise NoAccountsError("No accounts found")
        return accounts

    async def get_accounts(self) -> list[str]:
        if self._provider is None:
            return []

        try:
            accounts = await self._provider.request("eth_accounts")
        except Exception as exc:
            logger.error("Failed to get accounts: %s", exc)
            return []
        return list(accounts or [])

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------
    async def switch_chain(self) -> None:
        provider = self._require_provider("Wallet not available")

        try:
            await provider.request(
                "wallet_switchEthereumChain",
                [{"chainId": self._chain.hex_chain_id}],
            )
        except Exception as exc:
            if getattr(exc, "code", None) != UNRECOGNIZED_CHAIN_CODE:
                raise
            logger.info("Chain %s unknown to wallet, adding it", self._chain.hex_chain_id)
            await provider.request("wallet_addEthereumChain", [self._chain.as_add_chain_params()])

    async def ensure_chain(self) -> None:
        await self.switch_chain()

    def subscribe(self, on_accounts: AccountsListener, on_chain: ChainListener) -> Unsubscribe:
        provider = self._provider
        if provider is None:
            return lambda: None

        def handle_accounts(accounts: Any) -> None:
            on_accounts(list(accounts or []))

        def handle_chain(chain_id: Any) -> None:
            on_chain(str(chain_id))

        provider.on(ACCOUNTS_CHANGED, handle_accounts)
        provider.on(CHAIN_CHANGED, handle_chain)

        def unsubscribe() -> None:
            provider.remove_listener(ACCOUNTS_CHANGED, handle_accounts)
            provider.remove_listener(CHAIN_CHANGED, handle_chain)

        return unsubscribe

    # ------------------------------------------------------------------
    # Calls and transactions
    # ------------------------------------------------------------------
    async def call(self, to: str, data: str) -> str | None:
        provider = self._require_provider("Wallet not available")
        result = await provider.request("eth_call", [{"to": to, "data": data}, "latest"])
        return None if result is None else str(result)

    async def send_transaction(self, to: str, data: str, from_address: str) -> str:
        provider = self._require_provider("Wallet not available")

        try:
            tx_hash = await provider.request(
                "eth_sendTransaction",
                [{"to": to, "from": from_address, "data": data}],
            )
        except Exception as exc:
            logger.error("Transaction error: %s", exc)
            raise
        logger.info("Wallet transaction submitted to=%s hash=%s", to, tx_hash)
        return str(tx_hash)
