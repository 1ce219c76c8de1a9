"""Inspecting the balance and code of accounts."""

from __future__ import annotations

from .host import ZERO_WORD, current_host


def balance(address: bytes) -> bytes:
    """Return the balance in wei of ``address`` as a 32-byte word."""
    return current_host().account_balance(bytes(address))


def codehash(address: bytes) -> bytes | None:
    """Return the code hash of the contract at ``address``, or None for an account without one."""
    data = current_host().account_codehash(bytes(address))
    return None if data == ZERO_WORD else data