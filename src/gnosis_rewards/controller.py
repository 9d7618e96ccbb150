"""Session controller driving the dashboard state."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import requests

from .chain.contracts import ContractService
from .chain.rpc import RpcClient
from .config import ClientConfig
from .connectors.adapter import ConnectionAdapter
from .connectors.safe import SafeConnector
from .connectors.wallet import WalletConnector
from .exceptions import GnosisRewardsError
from .indexer import ValidatorCountService
from .types import (
    EMPTY_MESSAGE,
    AppState,
    EIP1193Provider,
    Message,
    MessageKind,
    SafeSDKLocator,
    Unsubscribe,
)
from .utils import format_amount, is_valid_address

logger = logging.getLogger(__name__)

CLAIM_PENDING_TEXT = "Please wait for transaction confirmation. Data will refresh automatically."

RenderCallback = Callable[[AppState], Any]


class AppController:
    """Own one :class:`AppState` and drive it from user actions.

    Every action sets its busy flag, runs the service calls, writes either the
    results or an error message, clears the flag and re-renders. ``render`` is
    called with the state after every mutation; ``reload`` is called when the
    wallet switches chains.
    """

    def __init__(
        self,
        config: ClientConfig,
        adapter: ConnectionAdapter,
        contracts: ContractService,
        validators: ValidatorCountService,
        *,
        render: RenderCallback | None = None,
        reload: Callable[[], Any] | None = None,
    ) -> None:
        self._config = config
        self._adapter = adapter
        self._contracts = contracts
        self._validators = validators
        self._render = render
        self._reload = reload
        self._state = AppState()
        self._unsubscribe: Unsubscribe | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._timers: set[asyncio.TimerHandle] = set()

    @classmethod
    def create(
        cls,
        config: ClientConfig | None = None,
        *,
        provider: EIP1193Provider | None = None,
        safe_locator: SafeSDKLocator | None = None,
        host: Any | None = None,
        session: requests.Session | None = None,
        render: RenderCallback | None = None,
        reload: Callable[[], Any] | None = None,
    ) -> AppController:
        """Wire connectors, services and controller for one session."""

        config = config or ClientConfig()
        session = session or requests.Session()

        wallet = WalletConnector(provider, config.chain)
        safe = SafeConnector(
            safe_locator or (lambda: None),
            config.chain,
            timeout=config.safe_sdk_timeout,
            poll_interval=config.safe_sdk_poll_interval,
        )
        adapter = ConnectionAdapter(wallet, safe, host=host)
        rpc = RpcClient(config, adapter, session)
        contracts = ContractService(rpc, parameterless_claim=config.parameterless_claim)
        validators = ValidatorCountService(config, session)
        return cls(config, adapter, contracts, validators, render=render, reload=reload)

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def adapter(self) -> ConnectionAdapter:
        return self._adapter

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        """Resolve the connection, subscribe to changes and reconnect silently."""

        self._state.connection_status = await self._adapter.connection_status()
        if self._unsubscribe is None:
            self._unsubscribe = await self._adapter.subscribe(
                self._on_accounts_changed, self._on_chain_changed
            )

        try:
            accounts = await self._adapter.get_connected_accounts()
        except Exception as exc:
            logger.error("Failed to check connection: %s", exc)
            accounts = []

        if accounts:
            self._state.account = accounts[0]
            self.render()
            await self.fetch_data()
        else:
            self.render()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        self._state.is_connecting = True
        self._clear_message()
        self.render()

        try:
            accounts = await self._adapter.request_account_access()
            self._state.account = accounts[0]
            await self._adapter.ensure_chain()
        except Exception as exc:
            logger.error("Failed to connect wallet: %s", exc)
            self.set_message(MessageKind.ERROR, f"Failed to connect wallet: {_describe(exc)}")
            return
        finally:
            self._state.is_connecting = False
            self.render()

        await self.fetch_data()

    def disconnect(self) -> None:
        self._state.clear_account_data()
        self._clear_message()
        self.render()

    async def fetch_data(self) -> None:
        account = self._state.account
        if not account:
            return

        self._state.is_loading = True
        self._clear_message()
        self.render()

        try:
            amount, balance, count = await self._load_account_data(account)
        except Exception as exc:
            logger.error("Failed to fetch data for %s: %s", account, exc)
            self.set_message(MessageKind.ERROR, f"Failed to fetch data: {_describe(exc)}")
        else:
            self._state.withdrawable_amount = amount
            self._state.token_balance = balance
            self._state.validator_count = count
        finally:
            self._state.is_loading = False
            self.render()

    async def claim(self) -> str | None:
        """Submit the claim; returns the transaction id or ``None`` on failure."""

        account = self._state.account
        if not account:
            self.set_message(MessageKind.ERROR, "No account connected")
            return None

        self._state.is_claiming = True
        self._clear_message()
        self.render()

        try:
            tx_hash = await self._contracts.claim_withdrawal(
                self._config.validator_contract_address, account
            )
        except Exception as exc:
            logger.error("Failed to claim rewards for %s: %s", account, exc)
            self.set_message(MessageKind.ERROR, f"Failed to claim rewards: {_describe(exc)}")
            return None
        finally:
            self._state.is_claiming = False
            self.render()

        self._state.last_tx_hash = tx_hash
        self.set_message(MessageKind.SUCCESS, f"Transaction submitted! Hash: {tx_hash}")
        self._schedule(self._config.claim_refresh_delay, self._refresh_after_claim)
        return tx_hash

    async def lookup(self, address: str) -> None:
        """Fetch rewards, balance and validator count for any address."""

        address = (address or "").strip()
        lookup = self._state.lookup
        lookup.address = address

        if not is_valid_address(address):
            self.set_message(MessageKind.ERROR, "Please enter a valid address (0x followed by 40 hex characters)")
            return

        lookup.is_looking_up = True
        self._clear_message()
        self.render()

        try:
            amount, balance, count = await self._load_account_data(address)
        except Exception as exc:
            logger.error("Failed to look up %s: %s", address, exc)
            self.set_message(MessageKind.ERROR, f"Failed to look up address: {_describe(exc)}")
        else:
            lookup.withdrawable_amount = amount
            lookup.token_balance = balance
            lookup.validator_count = count
        finally:
            lookup.is_looking_up = False
            self.render()

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    def set_message(self, kind: MessageKind, text: str) -> Message:
        """Show ``text`` and schedule it to clear after ``message_ttl`` seconds."""

        message = Message(kind=kind, text=text)
        self._state.message = message
        self.render()
        if self._config.message_ttl > 0:
            self._schedule_callback(self._config.message_ttl, self._expire_message, message)
        return message

    def _expire_message(self, message: Message) -> None:
        # A newer message owns the slot; leave it alone.
        if self._state.message is message:
            self._state.message = EMPTY_MESSAGE
            self.render()

    def _clear_message(self) -> None:
        self._state.message = EMPTY_MESSAGE

    # ------------------------------------------------------------------
    # Provider events
    # ------------------------------------------------------------------
    def _on_accounts_changed(self, accounts: list[str]) -> None:
        if not accounts:
            logger.info("Wallet disconnected")
            self.disconnect()
            return

        if accounts[0] == self._state.account:
            return
        logger.info("Active account changed to %s", accounts[0])
        self._state.account = accounts[0]
        self.render()
        self._spawn(self.fetch_data())

    def _on_chain_changed(self, chain_id: str) -> None:
        logger.info("Wallet switched to chain %s", chain_id)
        if self._reload is not None:
            self._reload()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _load_account_data(self, account: str) -> tuple[str, str, int]:
        withdrawable, balance, count = await asyncio.gather(
            self._contracts.get_withdrawable_amount(
                self._config.validator_contract_address, account
            ),
            self._contracts.get_token_balance(self._config.token_contract_address, account),
            self._validators.get_validator_count(account),
        )
        return format_amount(withdrawable), format_amount(balance), count

    async def _refresh_after_claim(self) -> None:
        await self.fetch_data()
        if self._state.message.kind is not MessageKind.ERROR:
            self.set_message(MessageKind.SUCCESS, CLAIM_PENDING_TEXT)

    def render(self) -> None:
        if self._render is None:
            return
        try:
            self._render(self._state)
        except Exception:
            logger.exception("Render callback failed")

    def _schedule(self, delay: float, factory: Callable[[], Awaitable[Any]]) -> None:
        self._schedule_callback(delay, lambda: self._spawn(factory()))

    def _schedule_callback(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def fire() -> None:
            self._timers.discard(handle)
            callback(*args)

        handle = loop.call_later(delay, fire)
        self._timers.add(handle)

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task[Any]:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


def _describe(exc: Exception) -> str:
    if isinstance(exc, GnosisRewardsError):
        return exc.message
    return str(exc) or type(exc).__name__
