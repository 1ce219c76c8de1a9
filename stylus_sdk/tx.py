"""Information about the current transaction and ink pricing."""

from __future__ import annotations

from .host import current_environment, current_host

U64_MAX = 2**64 - 1


def _check_u64(amount: int, what: str) -> int:
    if not 0 <= amount <= U64_MAX:
        raise ValueError(f"{what} must fit in an unsigned 64-bit integer")
    return amount


def ink_price() -> int:
    """Return the price of ink in evm gas basis points, cached after the first query."""
    return current_environment().ink_price.get()


def gas_to_ink(gas: int) -> int:
    """Convert evm gas to ink, saturating at the 64-bit maximum."""
    gas = _check_u64(gas, "gas")
    return min(gas * ink_price(), U64_MAX)


def ink_to_gas(ink: int) -> int:
    """Convert ink to evm gas, rounding down.

    Raises ZeroDivisionError when the ink price is zero.
    """
    ink = _check_u64(ink, "ink")
    return ink // ink_price()


def gas_price() -> bytes:
    """Return the gas price in wei per gas as a 32-byte word."""
    return current_host().tx_gas_price()


def origin() -> bytes:
    """Return the 20-byte address of the transaction's top-level sender."""
    return current_host().tx_origin()