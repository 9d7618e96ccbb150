"""Validator reward and GNO balance operations built on selector candidates."""

from __future__ import annotations

import logging

from ..constants import Operation, Selector, selector_candidates
from ..exceptions import UserRejectedError
from ..utils import build_call_data, first_success
from .rpc import RpcClient

logger = logging.getLogger(__name__)


class ContractService:
    """Domain-level contract reads and the claim transaction.

    Addresses are not validated here; callers check user-supplied input first.
    """

    def __init__(self, rpc: RpcClient, *, parameterless_claim: bool = True) -> None:
        self._rpc = rpc
        self._parameterless_claim = parameterless_claim

    async def get_withdrawable_amount(self, contract_address: str, account: str) -> str:
        """Return the hex wei amount claimable by ``account``."""

        async def attempt(selector: Selector) -> str:
            return await self._rpc.call(contract_address, build_call_data(selector, account))

        return await first_success(
            selector_candidates(Operation.WITHDRAWABLE_AMOUNT),
            attempt,
            label="withdrawableAmount call",
        )

    async def get_token_balance(self, token_address: str, account: str) -> str:
        """Return the hex wei ERC-20 balance of ``account``."""

        (selector,) = selector_candidates(Operation.BALANCE_OF)
        return await self._rpc.call(token_address, build_call_data(selector, account))

    def claim_call_data(self, account: str) -> list[str]:
        """Return the claim call data candidates in the order they are tried."""

        candidates: list[str] = []
        if self._parameterless_claim:
            candidates.extend(build_call_data(s) for s in selector_candidates(Operation.CLAIM))
        candidates.extend(
            build_call_data(s, account) for s in selector_candidates(Operation.CLAIM_WITHDRAWAL)
        )
        return candidates

    async def claim_withdrawal(self, contract_address: str, account: str) -> str:
        """Submit the claim and return the transaction (or Safe transaction) hash."""

        async def attempt(data: str) -> str:
            return await self._rpc.send_transaction(contract_address, data, account)

        tx_hash = await first_success(
            self.claim_call_data(account),
            attempt,
            label="claimWithdrawal transaction",
            should_retry=_retry_claim,
        )
        logger.info("Claim submitted for %s: %s", account, tx_hash)
        return tx_hash


def _retry_claim(exc: Exception) -> bool:
    # A declined prompt is final; do not re-prompt with another selector.
    return not isinstance(exc, UserRejectedError)
