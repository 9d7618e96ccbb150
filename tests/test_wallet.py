from __future__ import annotations

import pytest

from gnosis_rewards.config import ChainConfig
from gnosis_rewards.connectors.wallet import WalletConnector
from gnosis_rewards.exceptions import (
    NoAccountsError,
    ProviderRpcError,
    UserRejectedError,
    WalletUnavailableError,
)

from .conftest import ACCOUNT, FakeProvider

CONTRACT = "0x0B98057eA310F4d31F2a452B414647007d1645d9"


def _wallet(responses=None) -> tuple[WalletConnector, FakeProvider]:
    provider = FakeProvider(responses)
    return WalletConnector(provider, ChainConfig()), provider


class TestAccounts:
    @pytest.mark.asyncio
    async def test_request_accounts(self):
        wallet, provider = _wallet({"eth_requestAccounts": [ACCOUNT]})

        assert await wallet.request_accounts() == [ACCOUNT]
        assert provider.methods() == ["eth_requestAccounts"]

    @pytest.mark.asyncio
    async def test_missing_provider(self):
        wallet = WalletConnector(None, ChainConfig())

        assert not wallet.is_available()
        with pytest.raises(WalletUnavailableError, match="Please install MetaMask"):
            await wallet.request_accounts()
        assert await wallet.get_accounts() == []

    @pytest.mark.asyncio
    async def test_empty_account_list(self):
        wallet, _ = _wallet({"eth_requestAccounts": []})

        with pytest.raises(NoAccountsError, match="No accounts found"):
            await wallet.request_accounts()

    @pytest.mark.asyncio
    async def test_user_rejection_propagates(self):
        wallet, _ = _wallet({"eth_requestAccounts": UserRejectedError("User rejected the request.")})

        with pytest.raises(UserRejectedError):
            await wallet.request_accounts()

    @pytest.mark.asyncio
    async def test_get_accounts_swallows_errors(self, caplog):
        wallet, _ = _wallet({"eth_accounts": RuntimeError("disconnected")})

        with caplog.at_level("ERROR"):
            assert await wallet.get_accounts() == []
        assert "Failed to get accounts" in caplog.text


class TestChainSwitching:
    @pytest.mark.asyncio
    async def test_switch_to_known_chain(self):
        wallet, provider = _wallet({"wallet_switchEthereumChain": None})

        await wallet.ensure_chain()

        assert provider.calls == [("wallet_switchEthereumChain", [{"chainId": "0x64"}])]

    @pytest.mark.asyncio
    async def test_unknown_chain_is_added(self):
        wallet, provider = _wallet(
            {
                "wallet_switchEthereumChain": ProviderRpcError("Unrecognized chain ID", code=4902),
                "wallet_addEthereumChain": None,
            }
        )

        await wallet.ensure_chain()

        method, params = provider.calls[1]
        assert method == "wallet_addEthereumChain"
        assert params[0]["chainId"] == "0x64"
        assert params[0]["chainName"] == "Gnosis Chain"
        assert params[0]["nativeCurrency"]["symbol"] == "XDAI"
        assert params[0]["rpcUrls"] == ["https://rpc.gnosischain.com/"]

    @pytest.mark.asyncio
    async def test_other_switch_errors_propagate(self):
        wallet, provider = _wallet(
            {"wallet_switchEthereumChain": UserRejectedError("User rejected the request.")}
        )

        with pytest.raises(UserRejectedError):
            await wallet.ensure_chain()
        assert provider.methods() == ["wallet_switchEthereumChain"]

    @pytest.mark.asyncio
    async def test_add_chain_failure_propagates(self):
        wallet, _ = _wallet(
            {
                "wallet_switchEthereumChain": ProviderRpcError("Unrecognized chain ID", code=4902),
                "wallet_addEthereumChain": ProviderRpcError("rejected", code=4001),
            }
        )

        with pytest.raises(ProviderRpcError):
            await wallet.ensure_chain()


class TestSubscriptions:
    def test_events_are_forwarded_and_unsubscribed(self):
        wallet, provider = _wallet()
        accounts_seen: list[list[str]] = []
        chains_seen: list[str] = []

        unsubscribe = wallet.subscribe(accounts_seen.append, chains_seen.append)
        provider.emit("accountsChanged", [ACCOUNT])
        provider.emit("chainChanged", "0x1")
        unsubscribe()
        provider.emit("accountsChanged", [])

        assert accounts_seen == [[ACCOUNT]]
        assert chains_seen == ["0x1"]
        assert not provider.listeners["accountsChanged"]
        assert not provider.listeners["chainChanged"]

    def test_subscribe_without_provider_is_noop(self):
        wallet = WalletConnector(None, ChainConfig())
        wallet.subscribe(lambda accounts: None, lambda chain: None)()


class TestTransactions:
    @pytest.mark.asyncio
    async def test_call(self):
        wallet, provider = _wallet({"eth_call": "0x01"})

        assert await wallet.call(CONTRACT, "0x70a08231") == "0x01"
        assert provider.calls == [("eth_call", [{"to": CONTRACT, "data": "0x70a08231"}, "latest"])]

    @pytest.mark.asyncio
    async def test_send_transaction(self):
        wallet, provider = _wallet({"eth_sendTransaction": "0xhash"})

        assert await wallet.send_transaction(CONTRACT, "0x4e71d92d", ACCOUNT) == "0xhash"
        assert provider.calls == [
            ("eth_sendTransaction", [{"to": CONTRACT, "from": ACCOUNT, "data": "0x4e71d92d"}])
        ]

    @pytest.mark.asyncio
    async def test_send_transaction_error_is_logged_and_raised(self, caplog):
        wallet, _ = _wallet({"eth_sendTransaction": UserRejectedError("User denied")})

        with caplog.at_level("ERROR"):
            with pytest.raises(UserRejectedError):
                await wallet.send_transaction(CONTRACT, "0x4e71d92d", ACCOUNT)
        assert "Transaction error" in caplog.text
