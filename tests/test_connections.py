from __future__ import annotations

import asyncio

import pytest

from gnosis_rewards.config import ChainConfig
from gnosis_rewards.connectors import ConnectionAdapter, SafeConnector, WalletConnector, probe_frame
from gnosis_rewards.types import ConnectionContext, FrameContext

from .conftest import ACCOUNT, SAFE_ADDRESS, FakeProvider, FakeSafeSDK, FakeWindow

CONTRACT = "0x0B98057eA310F4d31F2a452B414647007d1645d9"


class CountingLocator:
    def __init__(self, sdk) -> None:
        self._sdk = sdk
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self._sdk


def _adapter(
    *,
    host=None,
    sdk=None,
    provider: FakeProvider | None = None,
) -> tuple[ConnectionAdapter, FakeProvider, CountingLocator]:
    provider = provider if provider is not None else FakeProvider()
    locator = CountingLocator(sdk)
    chain = ChainConfig()
    adapter = ConnectionAdapter(
        WalletConnector(provider, chain),
        SafeConnector(locator, chain, timeout=0.0, poll_interval=0.001),
        host=host,
    )
    return adapter, provider, locator


class TestProbeFrame:
    def test_no_host_is_top_level(self):
        assert probe_frame(None) is FrameContext.TOP_LEVEL

    def test_top_level_window(self):
        assert probe_frame(FakeWindow()) is FrameContext.TOP_LEVEL

    def test_same_origin_iframe(self):
        assert probe_frame(FakeWindow(embedded=True)) is FrameContext.EMBEDDED

    def test_cross_origin_iframe(self):
        context = probe_frame(FakeWindow(cross_origin=True))
        assert context is FrameContext.EMBEDDED_CROSS_ORIGIN
        assert context.is_embedded


class TestResolve:
    @pytest.mark.asyncio
    async def test_top_level_never_touches_safe(self):
        adapter, _, locator = _adapter(host=FakeWindow(), sdk=FakeSafeSDK())

        assert await adapter.resolve() is ConnectionContext.WALLET
        assert locator.calls == 0
        assert await adapter.connection_status() == "External Wallet"

    @pytest.mark.asyncio
    async def test_embedded_with_safe(self):
        adapter, _, _ = _adapter(host=FakeWindow(embedded=True), sdk=FakeSafeSDK())

        assert await adapter.resolve() is ConnectionContext.SAFE
        assert await adapter.connection_status() == "Safe App"
        assert await adapter.get_connected_accounts() == [SAFE_ADDRESS]

    @pytest.mark.asyncio
    async def test_embedded_without_safe_falls_back(self, caplog):
        adapter, provider, _ = _adapter(host=FakeWindow(cross_origin=True), sdk=None)
        provider.responses["eth_accounts"] = [ACCOUNT]

        with caplog.at_level("WARNING"):
            assert await adapter.resolve() is ConnectionContext.WALLET
        assert "falling back to wallet mode" in caplog.text
        assert await adapter.get_connected_accounts() == [ACCOUNT]

    @pytest.mark.asyncio
    async def test_concurrent_resolution_initialises_safe_once(self):
        sdk = FakeSafeSDK()
        adapter, _, _ = _adapter(host=FakeWindow(embedded=True), sdk=sdk)

        results = await asyncio.gather(*(adapter.resolve() for _ in range(5)))

        assert set(results) == {ConnectionContext.SAFE}
        assert sdk.safe.calls == 1

    @pytest.mark.asyncio
    async def test_resolution_is_memoized(self):
        sdk = FakeSafeSDK()
        adapter, _, locator = _adapter(host=FakeWindow(embedded=True), sdk=sdk)

        await adapter.resolve()
        await adapter.request_account_access()
        await adapter.ensure_chain()

        assert locator.calls == 1
        assert sdk.safe.calls == 1

    @pytest.mark.asyncio
    async def test_reset_resolves_again(self):
        sdk = FakeSafeSDK()
        adapter, _, _ = _adapter(host=FakeWindow(embedded=True), sdk=sdk)

        await adapter.resolve()
        adapter.reset()
        await adapter.resolve()

        assert sdk.safe.calls == 2


class TestDispatch:
    @pytest.mark.asyncio
    async def test_wallet_dispatch(self):
        provider = FakeProvider(
            {
                "eth_requestAccounts": [ACCOUNT],
                "eth_call": "0x05",
                "eth_sendTransaction": "0xhash",
            }
        )
        adapter, _, _ = _adapter(provider=provider)

        assert await adapter.is_available()
        assert await adapter.request_account_access() == [ACCOUNT]
        assert await adapter.call(CONTRACT, "0x70a08231") == "0x05"
        assert await adapter.send_transaction(CONTRACT, "0x4e71d92d", ACCOUNT) == "0xhash"

    @pytest.mark.asyncio
    async def test_call_without_wallet_is_unhandled(self):
        chain = ChainConfig()
        adapter = ConnectionAdapter(
            WalletConnector(None, chain),
            SafeConnector(lambda: None, chain, timeout=0.0),
        )

        assert not await adapter.is_available()
        assert await adapter.call(CONTRACT, "0x70a08231") is None

    @pytest.mark.asyncio
    async def test_safe_dispatch_sends_through_safe(self):
        sdk = FakeSafeSDK(send_result={"safeTxHash": "0xqueued"})
        provider = FakeProvider()
        adapter, _, _ = _adapter(host=FakeWindow(embedded=True), sdk=sdk, provider=provider)

        assert await adapter.call(CONTRACT, "0x70a08231") is None
        assert await adapter.send_transaction(CONTRACT, "0x4e71d92d", SAFE_ADDRESS) == "0xqueued"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_subscribe_routes_wallet_events(self):
        adapter, provider, _ = _adapter()
        seen: list[list[str]] = []

        unsubscribe = await adapter.subscribe(seen.append, lambda chain: None)
        provider.emit("accountsChanged", [ACCOUNT])
        unsubscribe()

        assert seen == [[ACCOUNT]]
