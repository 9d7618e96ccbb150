"""Tests for gnosis_rewards.types and the exception helpers."""

import pytest

from gnosis_rewards.constants import Operation, Selector, selector_candidates
from gnosis_rewards.exceptions import ProviderRpcError, UserRejectedError
from gnosis_rewards.types import (
    AppState,
    EIP1193Provider,
    FrameContext,
    Message,
    MessageKind,
    SafeInfo,
    SafeTransaction,
)

from .conftest import SAFE_ADDRESS, FakeProvider


def test_safe_info_from_camel_case() -> None:
    info = SafeInfo.from_dict({"safeAddress": SAFE_ADDRESS, "chainId": 100, "network": "GNO"})

    assert info.safe_address == SAFE_ADDRESS
    assert info.chain_id == 100
    assert info.network == "GNO"


def test_safe_info_rejects_incomplete_payload() -> None:
    with pytest.raises(ValueError):
        SafeInfo.from_dict({"safeAddress": SAFE_ADDRESS})


def test_safe_transaction_as_dict() -> None:
    tx = SafeTransaction(to=SAFE_ADDRESS, data="0x4e71d92d")
    assert tx.as_dict() == {"to": SAFE_ADDRESS, "value": "0", "data": "0x4e71d92d"}


def test_messages_compare_by_identity() -> None:
    first = Message(MessageKind.ERROR, "boom")
    second = Message(MessageKind.ERROR, "boom")

    assert first != second
    assert first == first
    assert Message().is_empty
    assert not first.is_empty


def test_app_state_defaults() -> None:
    state = AppState()

    assert not state.is_connected
    assert not state.has_rewards
    assert state.withdrawable_amount == "0.000000"
    assert state.lookup.validator_count == 0


def test_app_state_clear_account_data() -> None:
    state = AppState(account=SAFE_ADDRESS, withdrawable_amount="1.500000", validator_count=4)
    assert state.has_rewards

    state.clear_account_data()

    assert state.account is None
    assert state.withdrawable_amount == "0.000000"
    assert state.validator_count == 0


def test_frame_context_embedding() -> None:
    assert not FrameContext.TOP_LEVEL.is_embedded
    assert FrameContext.EMBEDDED.is_embedded
    assert FrameContext.EMBEDDED_CROSS_ORIGIN.is_embedded


def test_fake_provider_satisfies_protocol() -> None:
    assert isinstance(FakeProvider(), EIP1193Provider)


def test_selector_candidates_order() -> None:
    assert selector_candidates(Operation.WITHDRAWABLE_AMOUNT) == (
        Selector.WITHDRAWABLE_AMOUNT,
        Selector.WITHDRAWABLE_AMOUNT_ALT,
    )
    assert selector_candidates(Operation.CLAIM) == (Selector.CLAIM, Selector.CLAIM_REWARDS)


def test_selector_candidates_unknown_operation() -> None:
    with pytest.raises(ValueError):
        selector_candidates("transfer")


def test_provider_error_from_payload() -> None:
    rejected = ProviderRpcError.from_payload({"code": 4001, "message": "User rejected the request."})
    unknown_chain = ProviderRpcError.from_payload({"code": "4902", "message": "Unrecognized chain"})
    bare = ProviderRpcError.from_payload({})

    assert isinstance(rejected, UserRejectedError)
    assert rejected.code == 4001
    assert type(unknown_chain) is ProviderRpcError
    assert unknown_chain.code == 4902
    assert bare.message == "Provider request failed"
    assert bare.code is None
