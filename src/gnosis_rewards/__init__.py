"""Gnosis Chain validator rewards client.

Reads withdrawable validator rewards, GNO balances and validator counts, and
submits claim transactions through a browser-style wallet provider or a Safe
App, falling back to direct JSON-RPC for reads.
"""

from .base import ConnectorBase
from .chain import ContractService, RpcClient, Web3Provider
from .config import ChainConfig, ClientConfig
from .connectors import ConnectionAdapter, SafeConnector, WalletConnector, probe_frame
from .constants import Operation, Selector, selector_candidates
from .controller import AppController
from .exceptions import (
    ChainMismatchError,
    GnosisRewardsError,
    NetworkError,
    NoAccountsError,
    ProviderRpcError,
    SafeUnavailableError,
    UserRejectedError,
    ValidationError,
    WalletUnavailableError,
)
from .indexer import ValidatorCountService
from .types import (
    AppState,
    ConnectionContext,
    FrameContext,
    LookupState,
    Message,
    MessageKind,
    SafeInfo,
    SafeTransaction,
)
from .utils import (
    build_call_data,
    encode_address,
    first_success,
    format_amount,
    is_valid_address,
    to_decimal_amount,
)

__version__ = "0.1.0"

__all__ = [
    # Services
    "AppController",
    "ConnectionAdapter",
    "ConnectorBase",
    "ContractService",
    "RpcClient",
    "SafeConnector",
    "ValidatorCountService",
    "WalletConnector",
    "Web3Provider",
    "probe_frame",
    # Configuration and constants
    "ChainConfig",
    "ClientConfig",
    "Operation",
    "Selector",
    "selector_candidates",
    # Types
    "AppState",
    "ConnectionContext",
    "FrameContext",
    "LookupState",
    "Message",
    "MessageKind",
    "SafeInfo",
    "SafeTransaction",
    # Exceptions
    "GnosisRewardsError",
    "ChainMismatchError",
    "NetworkError",
    "NoAccountsError",
    "ProviderRpcError",
    "SafeUnavailableError",
    "UserRejectedError",
    "ValidationError",
    "WalletUnavailableError",
    # Utility functions
    "build_call_data",
    "encode_address",
    "first_success",
    "format_amount",
    "is_valid_address",
    "to_decimal_amount",
]
