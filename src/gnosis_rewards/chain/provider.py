"""EIP-1193 provider backed by web3.py and a local signer."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from typing import Any, cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import HTTPProvider, Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ..config import DEFAULT_REQUEST_TIMEOUT
from ..exceptions import (
    UNRECOGNIZED_CHAIN_CODE,
    NetworkError,
    ProviderRpcError,
    ValidationError,
)

logger = logging.getLogger(__name__)

UNSUPPORTED_METHOD_CODE = 4200
INVALID_PARAMS_CODE = -32602

Web3Factory = Callable[[str], Web3]


class Web3Provider:
    """Headless wallet exposing the browser provider interface.

    Lets the connectors and controller run outside a browser: accounts come
    from ``private_key``, reads and writes go through ``rpc_url``, and chains
    added with ``wallet_addEthereumChain`` can later be switched to.
    """

    def __init__(
        self,
        private_key: str,
        rpc_url: str,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        web3_factory: Web3Factory | None = None,
    ) -> None:
        self._account: LocalAccount | None = self._load_account(private_key)
        self._request_timeout = request_timeout
        self._web3_factory = web3_factory or self._build_web3
        self._rpc_url = rpc_url
        self._web3: Web3 | None = None
        self._chain_id: int | None = None
        self._known_chains: dict[int, str] = {}
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._handlers: dict[str, Callable[[list[Any]], Any]] = {
            "eth_requestAccounts": self._accounts,
            "eth_accounts": self._accounts,
            "eth_chainId": self._eth_chain_id,
            "eth_call": self._eth_call,
            "eth_sendTransaction": self._eth_send_transaction,
            "wallet_switchEthereumChain": self._switch_chain,
            "wallet_addEthereumChain": self._add_chain,
        }

    # ------------------------------------------------------------------
    # EIP-1193 surface
    # ------------------------------------------------------------------
    async def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        handler = self._handlers.get(method)
        if handler is None:
            raise ProviderRpcError(f"Unsupported method: {method}", code=UNSUPPORTED_METHOD_CODE)

        previous_chain = self._chain_id
        try:
            result = await asyncio.to_thread(handler, list(params or []))
        except ProviderRpcError:
            raise
        except Exception as exc:
            raise ProviderRpcError.from_payload(
                {
                    "message": str(exc) or f"{method} failed",
                    "code": getattr(exc, "code", None),
                    "data": getattr(exc, "data", None),
                },
                details={"method": method},
            ) from exc

        if previous_chain is not None and self._chain_id != previous_chain:
            self._emit("chainChanged", hex(cast(int, self._chain_id)))
        return result

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self._listeners[event].append(listener)

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def switch_account(self, private_key: str | None) -> None:
        """Change (or with ``None`` drop) the signer and notify listeners."""

        if private_key is None:
            self._account = None
            self._emit("accountsChanged", [])
            return

        self._account = self._load_account(private_key)
        # Rebuilt lazily so the signing middleware matches the new account.
        self._web3 = None
        self._emit("accountsChanged", [self._account.address])

    @property
    def address(self) -> str | None:
        return self._account.address if self._account is not None else None

    # ------------------------------------------------------------------
    # Method handlers (run in a worker thread)
    # ------------------------------------------------------------------
    def _accounts(self, params: list[Any]) -> list[str]:
        return [self._account.address] if self._account is not None else []

    def _eth_chain_id(self, params: list[Any]) -> str:
        return hex(self._current_chain_id())

    def _eth_call(self, params: list[Any]) -> str:
        tx = self._tx_params(params)
        block = params[1] if len(params) > 1 else "latest"
        call: dict[str, Any] = {"to": Web3.to_checksum_address(tx["to"]), "data": tx.get("data", "0x")}
        if tx.get("from"):
            call["from"] = Web3.to_checksum_address(tx["from"])
        result = self.web3.eth.call(call, block)  # type: ignore[arg-type]
        return HexBytes(result).to_0x_hex()

    def _eth_send_transaction(self, params: list[Any]) -> str:
        if self._account is None:
            raise ProviderRpcError("No account connected", code=4100)

        tx = self._tx_params(params)
        sender = tx.get("from") or self._account.address
        if sender.lower() != self._account.address.lower():
            raise ProviderRpcError(
                f"Account {sender} is not managed by this provider", code=4100
            )

        transaction: dict[str, Any] = {
            "from": self._account.address,
            "to": Web3.to_checksum_address(tx["to"]),
            "data": tx.get("data", "0x"),
        }
        value = tx.get("value")
        if value not in (None, "", "0", "0x0"):
            transaction["value"] = int(value, 16) if str(value).startswith("0x") else int(value)

        tx_hash = self.web3.eth.send_transaction(transaction)  # type: ignore[arg-type]
        tx_hex = HexBytes(tx_hash).to_0x_hex()
        logger.info("Transaction sent from=%s to=%s hash=%s", sender, transaction["to"], tx_hex)
        return tx_hex

    def _switch_chain(self, params: list[Any]) -> None:
        requested = self._parse_chain_id(params)
        if requested == self._current_chain_id():
            return None

        rpc_url = self._known_chains.get(requested)
        if rpc_url is None:
            raise ProviderRpcError(
                f"Unrecognized chain ID {hex(requested)}", code=UNRECOGNIZED_CHAIN_CODE
            )
        self._connect(rpc_url)
        return None

    def _add_chain(self, params: list[Any]) -> None:
        metadata = params[0] if params and isinstance(params[0], Mapping) else None
        if metadata is None:
            raise ProviderRpcError("Missing chain parameters", code=INVALID_PARAMS_CODE)

        requested = self._parse_chain_id(params)
        rpc_urls = metadata.get("rpcUrls") or []
        if not rpc_urls:
            raise ProviderRpcError("Chain parameters lack rpcUrls", code=INVALID_PARAMS_CODE)

        previous = (self._web3, self._chain_id, self._rpc_url)
        self._connect(str(rpc_urls[0]))
        if self._chain_id != requested:
            self._web3, self._chain_id, self._rpc_url = previous
            raise ProviderRpcError(
                f"RPC endpoint does not serve chain {hex(requested)}", code=INVALID_PARAMS_CODE
            )

        self._known_chains[requested] = str(rpc_urls[0])
        logger.info("Added chain %s (%s)", metadata.get("chainName"), hex(requested))
        return None

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            self._connect(self._rpc_url)
        return cast(Web3, self._web3)

    def _current_chain_id(self) -> int:
        if self._chain_id is None:
            self.web3
        return cast(int, self._chain_id)

    def _connect(self, rpc_url: str) -> None:
        web3 = self._web3_factory(rpc_url)
        chain_id = int(web3.eth.chain_id)
        if self._account is not None:
            self._apply_account_middleware(web3, self._account)
        self._web3 = web3
        self._chain_id = chain_id
        self._rpc_url = rpc_url
        self._known_chains.setdefault(self._chain_id, rpc_url)
        logger.info("Connected headless wallet to %s (chain %s)", rpc_url, self._chain_id)

    def _build_web3(self, rpc_url: str) -> Web3:
        provider = HTTPProvider(rpc_url, request_kwargs={"timeout": self._request_timeout})
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError("Unable to connect to RPC", endpoint=rpc_url)
        return web3

    def _apply_account_middleware(self, web3: Web3, account: LocalAccount) -> None:
        web3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))  # type: ignore[arg-type]
        web3.eth.default_account = account.address

    def _emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for %s raised", event)

    @staticmethod
    def _load_account(private_key: str) -> LocalAccount:
        try:
            return cast(LocalAccount, Account.from_key(private_key))  # type: ignore[arg-type]
        except Exception as exc:
            raise ValidationError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc

    @staticmethod
    def _tx_params(params: list[Any]) -> Mapping[str, Any]:
        if not params or not isinstance(params[0], Mapping) or not params[0].get("to"):
            raise ProviderRpcError("Transaction object with 'to' is required", code=INVALID_PARAMS_CODE)
        return params[0]

    @staticmethod
    def _parse_chain_id(params: list[Any]) -> int:
        try:
            raw = params[0]["chainId"]
            return int(raw, 16) if isinstance(raw, str) else int(raw)
        except (IndexError, KeyError, TypeError, ValueError) as exc:
            raise ProviderRpcError("Invalid chainId parameter", code=INVALID_PARAMS_CODE) from exc
