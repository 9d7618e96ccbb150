"""Contract addresses, chain metadata and function selectors for Gnosis Chain."""

from enum import Enum

VALIDATOR_CONTRACT_ADDRESS = "0x0b98057ea310f4d31f2a452b414647007d1645d9"
GNO_TOKEN_ADDRESS = "0x9C58BAcC331c9aa871AFD802DB6379a98e80CEdb"

GNOSIS_CHAIN_ID = 100
GNOSIS_CHAIN_NAME = "Gnosis Chain"
GNOSIS_RPC_URL = "https://rpc.gnosischain.com/"
GNOSIS_EXPLORER_URL = "https://gnosisscan.io/"
GNOSIS_INDEXER_URL = "https://gnosis.beaconcha.in/api/v1"

NATIVE_CURRENCY = {"name": "xDAI", "symbol": "XDAI", "decimals": 18}

TOKEN_DECIMALS = 18
ZERO_AMOUNT = "0.000000"
INDEXER_PAGE_SIZE = 200
INDEXER_MAX_PAGES = 500


class Operation(str, Enum):
    """Semantic contract operations the client knows how to encode."""

    WITHDRAWABLE_AMOUNT = "withdrawable-amount"
    BALANCE_OF = "balance-of"
    CLAIM_WITHDRAWAL = "claim-withdrawal"
    CLAIM = "claim"


class Selector(str, Enum):
    """Known 4-byte function selectors.

    These are fixed constants rather than keccak hashes computed at runtime.
    The validator contract does not publish a verified ABI, so the withdrawable
    amount and claim selectors (and their alternates) should be re-checked
    against the deployed bytecode whenever the contract is upgraded.
    """

    WITHDRAWABLE_AMOUNT = "0xf3fef3a3"  # withdrawableAmount(address)
    WITHDRAWABLE_AMOUNT_ALT = "0x1ac51b98"
    BALANCE_OF = "0x70a08231"  # balanceOf(address)
    CLAIM_WITHDRAWAL = "0x4782f779"  # claimWithdrawal(address)
    CLAIM_WITHDRAWAL_ALT = "0x5cc4aa9f"
    CLAIM = "0x4e71d92d"  # claim()
    CLAIM_REWARDS = "0x372500ab"  # claimRewards()


# Ordered candidates per operation; the first selector that succeeds wins.
SELECTOR_CANDIDATES: dict[Operation, tuple[Selector, ...]] = {
    Operation.WITHDRAWABLE_AMOUNT: (
        Selector.WITHDRAWABLE_AMOUNT,
        Selector.WITHDRAWABLE_AMOUNT_ALT,
    ),
    Operation.BALANCE_OF: (Selector.BALANCE_OF,),
    Operation.CLAIM_WITHDRAWAL: (
        Selector.CLAIM_WITHDRAWAL,
        Selector.CLAIM_WITHDRAWAL_ALT,
    ),
    # Parameterless variants act on msg.sender.
    Operation.CLAIM: (Selector.CLAIM, Selector.CLAIM_REWARDS),
}

# Canned eth_call results used only in demo mode.
MOCK_WITHDRAWABLE_AMOUNT = "0x6f05b59d3b20000"  # 0.5 GNO
MOCK_TOKEN_BALANCE = "0x8e3f50b173c10000"  # 10.25 GNO


def selector_candidates(operation: Operation | str) -> tuple[Selector, ...]:
    """Return the ordered selector candidates for an operation.

    Args:
        operation: Operation enum member or its string value

    Returns:
        Tuple of selectors in priority order

    Raises:
        ValueError: If the operation is unknown
    """
    try:
        key = Operation(operation)
    except ValueError:
        raise ValueError(f"Unknown contract operation: {operation}") from None
    return SELECTOR_CANDIDATES[key]
