"""Read-only contract calls with provider, direct RPC and demo fallbacks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import requests

from ..config import ClientConfig
from ..connectors.adapter import ConnectionAdapter
from ..constants import (
    MOCK_TOKEN_BALANCE,
    MOCK_WITHDRAWABLE_AMOUNT,
    Operation,
    selector_candidates,
)
from ..exceptions import NetworkError

logger = logging.getLogger(__name__)

ZERO_RESULT = "0x0"


class RpcClient:
    """Perform ``eth_call`` reads and route transaction submission.

    Reads try, in order, the active wallet connection, a direct JSON-RPC POST
    to ``config.rpc_url`` and, only in demo mode, canned values keyed on the
    selector. A failing tier is logged and the next one is tried.
    """

    def __init__(
        self,
        config: ClientConfig,
        adapter: ConnectionAdapter | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._adapter = adapter
        self._session = session or requests.Session()

    @property
    def rpc_url(self) -> str:
        return self._config.rpc_url

    async def call(self, contract_address: str, data: str) -> str:
        last_error: Exception | None = None

        if self._adapter is not None:
            try:
                result = await self._adapter.call(contract_address, data)
            except Exception as exc:
                last_error = exc
                logger.warning("Provider eth_call failed, trying direct RPC: %s", exc)
            else:
                if result is not None:
                    return result

        try:
            return await asyncio.to_thread(self._direct_call, contract_address, data)
        except Exception as exc:
            last_error = exc
            logger.warning("RPC call to %s failed: %s", self.rpc_url, exc)

        if self._config.demo_mode:
            logger.warning("Using mock data for demonstration (demo mode)")
            return self.mock_result(data)

        raise NetworkError(
            f"Contract call failed: {last_error}",
            endpoint=self.rpc_url,
            details={"to": contract_address, "data": data, "error": str(last_error)},
        ) from last_error

    def _direct_call(self, contract_address: str, data: str) -> str:
        body = {
            "jsonrpc": "2.0",
            "method": "eth_call",
            "params": [{"to": contract_address, "data": data}, "latest"],
            "id": 1,
        }

        try:
            response = self._session.post(
                self.rpc_url,
                json=body,
                timeout=self._config.request_timeout,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            payload: Any = response.json()
        except requests.RequestException as exc:
            raise NetworkError(
                "Failed to reach RPC endpoint",
                endpoint=self.rpc_url,
                status_code=getattr(getattr(exc, "response", None), "status_code", None),
                details={"error": str(exc)},
            ) from exc
        except ValueError as exc:
            raise NetworkError(
                "RPC endpoint returned invalid JSON",
                endpoint=self.rpc_url,
                details={"error": str(exc)},
            ) from exc

        if not isinstance(payload, Mapping):
            raise NetworkError("Unexpected RPC response", endpoint=self.rpc_url)

        error = payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, Mapping) else str(error)
            raise NetworkError(str(message), endpoint=self.rpc_url, details={"error": error})

        result = payload.get("result")
        if not isinstance(result, str):
            raise NetworkError("RPC response missing result", endpoint=self.rpc_url)
        return result

    @staticmethod
    def mock_result(data: str) -> str:
        """Return the canned demo value for the selector at the start of ``data``."""

        lowered = data.lower()
        for selector in selector_candidates(Operation.WITHDRAWABLE_AMOUNT):
            if lowered.startswith(selector.value):
                return MOCK_WITHDRAWABLE_AMOUNT
        for selector in selector_candidates(Operation.BALANCE_OF):
            if lowered.startswith(selector.value):
                return MOCK_TOKEN_BALANCE
        return ZERO_RESULT

    async def send_transaction(self, to: str, data: str, from_address: str) -> str:
        """Submit through the active connection. Writes are never mocked."""

        if self._adapter is None:
            raise NetworkError("No wallet or Safe connection available for transactions")
        return await self._adapter.send_transaction(to, data, from_address)
