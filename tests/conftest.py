from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from gnosis_rewards.config import ClientConfig

ACCOUNT = "0x1111111111111111111111111111111111111111"
SAFE_ADDRESS = "0x2222222222222222222222222222222222222222"


class FakeProvider:
    """Scriptable EIP-1193 provider.

    ``responses`` maps a method name to a value, an exception instance, or a
    callable receiving the params.
    """

    def __init__(self, responses: Mapping[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, list[Any]]] = []
        self.listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    async def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        params = list(params or [])
        self.calls.append((method, params))
        if method not in self.responses:
            raise RuntimeError(f"unexpected method {method}")
        response = self.responses[method]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self.listeners[event].append(listener)

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None:
        self.listeners[event].remove(listener)

    def emit(self, event: str, payload: Any) -> None:
        for listener in list(self.listeners[event]):
            listener(payload)

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]


class FakeSafeInfoAPI:
    def __init__(self, info: Mapping[str, Any] | Exception) -> None:
        self._info = info
        self.calls = 0

    async def get_info(self) -> Mapping[str, Any]:
        self.calls += 1
        if isinstance(self._info, Exception):
            raise self._info
        return self._info


class FakeSafeTxsAPI:
    def __init__(self, result: Any) -> None:
        self._result = result
        self.sent: list[list[Mapping[str, Any]]] = []

    async def send(self, *, txs: Sequence[Mapping[str, Any]]) -> Any:
        self.sent.append(list(txs))
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeSafeSDK:
    def __init__(
        self,
        info: Mapping[str, Any] | Exception | None = None,
        send_result: Any = None,
    ) -> None:
        self.safe = FakeSafeInfoAPI(
            info if info is not None else {"safeAddress": SAFE_ADDRESS, "chainId": 100, "network": "GNO"}
        )
        self.txs = FakeSafeTxsAPI(send_result if send_result is not None else {"safeTxHash": "0xsafe"})


class FakeWindow:
    """Window-like host for frame probing."""

    def __init__(self, embedded: bool = False, cross_origin: bool = False) -> None:
        self.self = self
        self._embedded = embedded
        self._cross_origin = cross_origin
        self._parent = object()

    @property
    def top(self) -> Any:
        if self._cross_origin:
            raise PermissionError("Blocked a frame from accessing a cross-origin frame")
        return self._parent if self._embedded else self


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        rpc_url="https://rpc.test/",
        indexer_url="https://indexer.test/api/v1/",
        request_timeout=1.0,
        safe_sdk_timeout=0.0,
        safe_sdk_poll_interval=0.001,
        message_ttl=0.05,
        claim_refresh_delay=0.05,
    )
