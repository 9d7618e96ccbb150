"""Encoding, formatting and retry helpers for the rewards client."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Any, TypeVar

from .constants import TOKEN_DECIMALS, ZERO_AMOUNT
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_RE = re.compile(r"^(0[xX])?[0-9a-fA-F]+$")
_DISPLAY_QUANTUM = Decimal("0.000001")


def encode_address(address: str) -> str:
    """Left-pad an address to a 32-byte ABI word (64 hex chars, no prefix)."""
    return address.lower().replace("0x", "", 1).rjust(64, "0")


def is_valid_address(address: Any) -> bool:
    """Check the 0x-prefixed 40 hex character address format."""
    return isinstance(address, str) and _ADDRESS_RE.match(address) is not None


def build_call_data(selector: str | Enum, *addresses: str) -> str:
    """Concatenate a selector with ABI-encoded address parameters."""
    prefix = selector.value if isinstance(selector, Enum) else selector
    return prefix + "".join(encode_address(address) for address in addresses)


def to_decimal_amount(value: str | None, decimals: int = TOKEN_DECIMALS) -> Decimal:
    """Convert a hex wei string to a Decimal in token units.

    Missing, empty or malformed input converts to zero.
    """
    if not isinstance(value, str):
        return Decimal(0)

    value = value.strip()
    if not _HEX_RE.match(value):
        return Decimal(0)

    wei = int(value, 16)
    with localcontext() as ctx:
        # bit_length sizes the context without a decimal string conversion.
        ctx.prec = max(28, wei.bit_length() * 302 // 1000 + 2 + decimals)
        return Decimal(wei) / (Decimal(10) ** decimals)


def format_amount(value: str | None, decimals: int = TOKEN_DECIMALS) -> str:
    """Format a hex wei string with exactly six fractional digits.

    Examples:
        >>> format_amount("0x6f05b59d3b20000")
        '0.500000'
        >>> format_amount("0x")
        '0.000000'
    """
    try:
        amount = to_decimal_amount(value, decimals)
        if not amount:
            return ZERO_AMOUNT

        with localcontext() as ctx:
            ctx.rounding = ROUND_HALF_UP
            ctx.prec = max(28, amount.adjusted() + 8)
            quantized = amount.quantize(_DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)
        return f"{quantized:f}"
    except Exception:
        logger.debug("Could not format amount %r", value, exc_info=True)
        return ZERO_AMOUNT


async def first_success(
    candidates: Sequence[T],
    attempt: Callable[[T], Awaitable[R]],
    *,
    label: str,
    should_retry: Callable[[Exception], bool] | None = None,
) -> R:
    """Await ``attempt`` for each candidate in order and return the first result.

    Every failure is logged. When all candidates fail the last error is
    re-raised. An error for which ``should_retry`` returns False is raised
    immediately without trying the remaining candidates.
    """
    last_error: Exception | None = None
    for index, candidate in enumerate(candidates):
        try:
            return await attempt(candidate)
        except Exception as exc:
            last_error = exc
            remaining = len(candidates) - index - 1
            logger.warning(
                "%s failed with candidate %s (%d remaining): %s",
                label,
                candidate.value if isinstance(candidate, Enum) else candidate,
                remaining,
                exc,
            )
            if should_retry is not None and not should_retry(exc):
                raise

    if last_error is None:
        raise ValidationError(f"No candidates to try for {label}", field="candidates")
    raise last_error
