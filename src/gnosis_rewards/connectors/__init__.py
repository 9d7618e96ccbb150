"""Wallet and Safe connectors plus the adapter choosing between them."""

from .adapter import ConnectionAdapter, probe_frame
from .safe import SafeConnector
from .wallet import WalletConnector

__all__ = [
    "ConnectionAdapter",
    "SafeConnector",
    "WalletConnector",
    "probe_frame",
]
