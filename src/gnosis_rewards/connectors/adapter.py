"""Route account and transaction operations to the wallet or the Safe."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..base import ConnectorBase
from ..types import (
    AccountsListener,
    ChainListener,
    ConnectionContext,
    FrameContext,
    Unsubscribe,
)
from .safe import SafeConnector
from .wallet import WalletConnector

logger = logging.getLogger(__name__)

CONNECTION_STATUS = {
    ConnectionContext.SAFE: "Safe App",
    ConnectionContext.WALLET: "External Wallet",
}


def probe_frame(host: Any | None) -> FrameContext:
    """Classify ``host`` (a window-like object exposing ``self`` and ``top``).

    Reading ``top`` across origins raises in a browser, which is reported as
    :attr:`FrameContext.EMBEDDED_CROSS_ORIGIN`.
    """

    if host is None:
        return FrameContext.TOP_LEVEL

    try:
        top = host.top
    except Exception:
        return FrameContext.EMBEDDED_CROSS_ORIGIN

    current = getattr(host, "self", host)
    if top is None or top is current:
        return FrameContext.TOP_LEVEL
    return FrameContext.EMBEDDED


class ConnectionAdapter:
    """Resolve the connection context once and dispatch on it afterwards."""

    def __init__(
        self,
        wallet: WalletConnector,
        safe: SafeConnector,
        *,
        host: Any | None = None,
    ) -> None:
        self._wallet = wallet
        self._safe = safe
        self._host = host
        self._resolution: asyncio.Task[ConnectionContext] | None = None

    @property
    def wallet(self) -> WalletConnector:
        return self._wallet

    @property
    def safe(self) -> SafeConnector:
        return self._safe

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    async def resolve(self) -> ConnectionContext:
        """Return the session's connection context, resolving it on first use.

        Callers arriving while resolution is in flight await the same task, so
        the Safe SDK is initialised at most once per resolution.
        """

        if self._resolution is None:
            self._resolution = asyncio.ensure_future(self._resolve())
        return await asyncio.shield(self._resolution)

    async def _resolve(self) -> ConnectionContext:
        frame = probe_frame(self._host)
        logger.info("Connection type detection: frame=%s", frame.value)

        if not frame.is_embedded:
            logger.info("Not in iframe context - using wallet mode")
            return ConnectionContext.WALLET

        try:
            await self._safe.init()
        except Exception as exc:
            logger.warning("Safe App initialization failed, falling back to wallet mode: %s", exc)
            return ConnectionContext.WALLET

        logger.info("Safe App initialization successful - using Safe mode")
        return ConnectionContext.SAFE

    def reset(self) -> None:
        """Forget the resolved context so the next call resolves again."""

        if self._resolution is not None and not self._resolution.done():
            self._resolution.cancel()
        self._resolution = None
        self._safe.reset()

    async def connector(self) -> ConnectorBase:
        context = await self.resolve()
        return self._safe if context is ConnectionContext.SAFE else self._wallet

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    async def is_available(self) -> bool:
        return (await self.connector()).is_available()

    async def request_account_access(self) -> list[str]:
        return await (await self.connector()).request_accounts()

    async def get_connected_accounts(self) -> list[str]:
        return await (await self.connector()).get_accounts()

    async def ensure_chain(self) -> None:
        await (await self.connector()).ensure_chain()

    async def subscribe(self, on_accounts: AccountsListener, on_chain: ChainListener) -> Unsubscribe:
        return (await self.connector()).subscribe(on_accounts, on_chain)

    async def call(self, to: str, data: str) -> str | None:
        """Read through the active connection; ``None`` means not handled."""

        connector = await self.connector()
        if not connector.is_available():
            return None
        return await connector.call(to, data)

    async def send_transaction(self, to: str, data: str, from_address: str) -> str:
        return await (await self.connector()).send_transaction(to, data, from_address)

    async def connection_status(self) -> str:
        return CONNECTION_STATUS[await self.resolve()]
