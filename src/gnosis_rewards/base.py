"""Common interface for the wallet and Safe connectors."""

from abc import ABC, abstractmethod

from .types import AccountsListener, ChainListener, ConnectionContext, Unsubscribe


class ConnectorBase(ABC):
    """Account, chain and transaction access for one connection context."""

    context: ConnectionContext

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    async def request_accounts(self) -> list[str]:
        pass

    @abstractmethod
    async def get_accounts(self) -> list[str]:
        pass

    @abstractmethod
    async def ensure_chain(self) -> None:
        pass

    @abstractmethod
    def subscribe(self, on_accounts: AccountsListener, on_chain: ChainListener) -> Unsubscribe:
        pass

    @abstractmethod
    async def call(self, to: str, data: str) -> str | None:
        pass

    @abstractmethod
    async def send_transaction(self, to: str, data: str, from_address: str) -> str:
        pass
