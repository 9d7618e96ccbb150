"""On-chain reads, claim transactions and the headless wallet provider."""

from .contracts import ContractService
from .provider import Web3Provider
from .rpc import RpcClient

__all__ = ["ContractService", "RpcClient", "Web3Provider"]
