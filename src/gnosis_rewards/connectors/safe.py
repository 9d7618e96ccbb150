"""Safe Apps SDK access for apps embedded in the Safe interface."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from ..base import ConnectorBase
from ..config import DEFAULT_SAFE_SDK_POLL_INTERVAL, DEFAULT_SAFE_SDK_TIMEOUT, ChainConfig
from ..exceptions import ChainMismatchError, GnosisRewardsError, SafeUnavailableError
from ..types import (
    AccountsListener,
    ChainListener,
    ConnectionContext,
    SafeAppsSDK,
    SafeInfo,
    SafeSDKLocator,
    SafeTransaction,
    Unsubscribe,
)

logger = logging.getLogger(__name__)


class SafeConnector(ConnectorBase):
    """Initialise the host Safe SDK and route transactions to the Safe queue.

    The SDK is obtained from ``locator``, which returns ``None`` while the SDK
    is not (yet) available. With a positive ``timeout`` the locator is polled
    every ``poll_interval`` seconds until it yields an SDK or time runs out.
    """

    context = ConnectionContext.SAFE

    def __init__(
        self,
        locator: SafeSDKLocator,
        chain: ChainConfig,
        *,
        timeout: float = DEFAULT_SAFE_SDK_TIMEOUT,
        poll_interval: float = DEFAULT_SAFE_SDK_POLL_INTERVAL,
    ) -> None:
        self._locator = locator
        self._chain = chain
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._sdk: SafeAppsSDK | None = None
        self._info: SafeInfo | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def init(self) -> SafeInfo:
        """Locate the SDK and cache the Safe identity for the session."""

        if self._sdk is not None and self._info is not None:
            return self._info

        try:
            sdk = await self._locate_sdk()
            payload = await sdk.safe.get_info()
            info = SafeInfo.from_dict(payload)
        except GnosisRewardsError:
            self.reset()
            raise
        except Exception as exc:
            self.reset()
            logger.error("Failed to initialize Safe App: %s", exc)
            raise SafeUnavailableError(
                "Failed to initialize Safe App", details={"error": str(exc)}
            ) from exc

        self._sdk = sdk
        self._info = info
        logger.info(
            "Safe App initialized safe=%s chain=%s network=%s",
            info.safe_address,
            info.chain_id,
            info.network,
        )
        return info

    def reset(self) -> None:
        self._sdk = None
        self._info = None

    def is_initialized(self) -> bool:
        return self._sdk is not None and self._info is not None

    async def _locate_sdk(self) -> SafeAppsSDK:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(self._timeout, 0.0)

        while True:
            sdk = self._locator()
            if sdk is not None:
                return sdk
            if loop.time() >= deadline:
                raise SafeUnavailableError(
                    "Safe Apps SDK not available. Make sure the app is opened inside a Safe.",
                    details={"timeout": self._timeout},
                )
            await asyncio.sleep(self._poll_interval)

    # ------------------------------------------------------------------
    # Safe identity
    # ------------------------------------------------------------------
    async def get_address(self) -> str:
        info = self._info if self._info is not None else await self.init()
        return info.safe_address

    async def get_chain_id(self) -> str:
        info = self._info if self._info is not None else await self.init()
        return str(info.chain_id)

    # ------------------------------------------------------------------
    # ConnectorBase
    # ------------------------------------------------------------------
    def is_available(self) -> bool:
        return self.is_initialized()

    async def request_accounts(self) -> list[str]:
        if not self.is_initialized():
            raise SafeUnavailableError("Safe App not properly initialized")
        return [await self.get_address()]

    async def get_accounts(self) -> list[str]:
        if not self.is_initialized():
            return []
        return [await self.get_address()]

    async def ensure_chain(self) -> None:
        chain_id = await self.get_chain_id()
        if chain_id != str(self._chain.chain_id):
            raise ChainMismatchError(
                f"Safe is on chain {chain_id}, but this app requires "
                f"{self._chain.chain_name} ({self._chain.chain_id})",
                expected=self._chain.chain_id,
                actual=chain_id,
            )

    def subscribe(self, on_accounts: AccountsListener, on_chain: ChainListener) -> Unsubscribe:
        # The Safe address and chain are fixed for the embedding session.
        return lambda: None

    async def call(self, to: str, data: str) -> str | None:
        # Reads go through regular JSON-RPC; the SDK only handles transactions.
        return None

    async def send_transaction(self, to: str, data: str, from_address: str) -> str:
        return await self.send_safe_transaction(SafeTransaction(to=to, data=data))

    async def send_safe_transaction(self, tx: SafeTransaction) -> str:
        """Queue ``tx`` in the Safe and return its ``safeTxHash``.

        The returned identifier is not an on-chain hash; the Safe owners may
        still need to confirm the transaction.
        """

        sdk = self._sdk
        if sdk is None:
            raise SafeUnavailableError("Safe App not initialized")

        try:
            result = await sdk.txs.send(txs=[tx.as_dict()])
        except Exception as exc:
            logger.error("Failed to send Safe transaction: %s", exc)
            raise

        if isinstance(result, Mapping):
            safe_tx_hash = result.get("safeTxHash") or result.get("safe_tx_hash")
        else:
            safe_tx_hash = getattr(result, "safe_tx_hash", None)
        if not safe_tx_hash:
            raise SafeUnavailableError(
                "Safe did not return a transaction hash", details={"result": repr(result)}
            )

        logger.info("Safe transaction queued to=%s safeTxHash=%s", tx.to, safe_tx_hash)
        return str(safe_tx_hash)
