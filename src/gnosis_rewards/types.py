"""Type definitions and data models for the Gnosis validator rewards client."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .constants import ZERO_AMOUNT

Address = str  # 0x-prefixed, 40 hex characters
HexWei = str  # 0x-prefixed hex wei amount of arbitrary width
CallData = str  # selector followed by 32-byte words

AccountsListener = Callable[[list[str]], Any]
ChainListener = Callable[[str], Any]
Unsubscribe = Callable[[], None]


class ConnectionContext(str, Enum):
    """How account and transaction operations are routed for a session."""

    WALLET = "wallet"
    SAFE = "safe"


class FrameContext(Enum):
    """Where the host page lives relative to the top-level window."""

    TOP_LEVEL = "top_level"
    EMBEDDED = "embedded"
    EMBEDDED_CROSS_ORIGIN = "embedded_cross_origin"

    @property
    def is_embedded(self) -> bool:
        return self is not FrameContext.TOP_LEVEL


class MessageKind(str, Enum):
    """Severity of a transient user-facing message."""

    NONE = "none"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, eq=False)
class Message:
    """Transient message shown to the user.

    Instances compare by identity so an expiry timer only ever clears the
    message it was scheduled for, even if a newer one carries the same text.
    """

    kind: MessageKind = MessageKind.NONE
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return self.kind is MessageKind.NONE or not self.text


EMPTY_MESSAGE = Message()


@dataclass
class LookupState:
    """Results for an arbitrary address typed in by the user."""

    address: str = ""
    withdrawable_amount: str = ZERO_AMOUNT
    token_balance: str = ZERO_AMOUNT
    validator_count: int = 0
    is_looking_up: bool = False


@dataclass
class AppState:
    """Mutable per-session dashboard state owned by the controller."""

    account: Address | None = None
    is_connecting: bool = False
    is_loading: bool = False
    is_claiming: bool = False
    withdrawable_amount: str = ZERO_AMOUNT
    token_balance: str = ZERO_AMOUNT
    validator_count: int = 0
    message: Message = EMPTY_MESSAGE
    connection_status: str | None = None
    last_tx_hash: str | None = None
    lookup: LookupState = field(default_factory=LookupState)

    @property
    def is_connected(self) -> bool:
        return self.account is not None

    @property
    def has_rewards(self) -> bool:
        try:
            return Decimal(self.withdrawable_amount) > 0
        except InvalidOperation:
            return False

    def clear_account_data(self) -> None:
        self.account = None
        self.withdrawable_amount = ZERO_AMOUNT
        self.token_balance = ZERO_AMOUNT
        self.validator_count = 0


@dataclass(frozen=True)
class SafeInfo:
    """Identity of the Safe hosting the app."""

    safe_address: Address
    chain_id: int
    network: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SafeInfo:
        safe_address = data.get("safeAddress") or data.get("safe_address")
        chain_id = data.get("chainId") if "chainId" in data else data.get("chain_id")
        if not safe_address or chain_id is None:
            raise ValueError(f"Incomplete Safe info payload: {dict(data)!r}")
        return cls(
            safe_address=str(safe_address),
            chain_id=int(chain_id),
            network=data.get("network"),
        )


@dataclass(frozen=True)
class SafeTransaction:
    """Single call queued through the Safe transaction service."""

    to: Address
    data: CallData
    value: str = "0"

    def as_dict(self) -> dict[str, str]:
        return {"to": self.to, "value": self.value, "data": self.data}


@runtime_checkable
class EIP1193Provider(Protocol):
    """Injected wallet provider (``window.ethereum`` in a browser)."""

    async def request(self, method: str, params: Sequence[Any] | None = None) -> Any: ...

    def on(self, event: str, listener: Callable[..., Any]) -> None: ...

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None: ...


class SafeInfoAPI(Protocol):
    async def get_info(self) -> Mapping[str, Any]: ...


class SafeTxsAPI(Protocol):
    async def send(self, *, txs: Sequence[Mapping[str, Any]]) -> Mapping[str, Any]: ...


class SafeAppsSDK(Protocol):
    """Host-provided Safe Apps SDK instance."""

    safe: SafeInfoAPI
    txs: SafeTxsAPI


SafeSDKLocator = Callable[[], "SafeAppsSDK | None"]
