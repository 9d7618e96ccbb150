"""Exception hierarchy for the Gnosis validator rewards client."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

USER_REJECTED_CODE = 4001
UNRECOGNIZED_CHAIN_CODE = 4902


class GnosisRewardsError(Exception):
    """Base exception for all rewards client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class WalletUnavailableError(GnosisRewardsError):
    """Raised when no wallet provider has been injected."""

    pass


class SafeUnavailableError(GnosisRewardsError):
    """Raised when the Safe Apps SDK cannot be reached or is not initialised."""

    pass


class NoAccountsError(GnosisRewardsError):
    """Raised when the wallet grants access but returns no accounts."""

    pass


class ChainMismatchError(GnosisRewardsError):
    """Raised when a Safe lives on a chain other than the configured one."""

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.expected = expected
        self.actual = actual


class ProviderRpcError(GnosisRewardsError):
    """Raised when a wallet provider rejects a request."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        data: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.data = data

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], details: dict | None = None
    ) -> ProviderRpcError:
        """Build the matching error from an EIP-1193 style error object."""

        message = str(payload.get("message") or "Provider request failed")
        code = payload.get("code")
        try:
            code = int(code) if code is not None else None
        except (TypeError, ValueError):
            code = None

        if code == USER_REJECTED_CODE:
            return UserRejectedError(message, data=payload.get("data"), details=details)
        return cls(message, code=code, data=payload.get("data"), details=details)


class UserRejectedError(ProviderRpcError):
    """Raised when the user declines a permission or transaction prompt."""

    def __init__(self, message: str, data: Any | None = None, details: dict | None = None):
        super().__init__(message, code=USER_REJECTED_CODE, data=data, details=details)


class NetworkError(GnosisRewardsError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ValidationError(GnosisRewardsError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value
