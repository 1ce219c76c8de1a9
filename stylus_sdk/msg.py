"""Information about the message that invoked the program."""

from __future__ import annotations

from .host import current_host


def reentrant() -> bool:
    """Return whether the current call is reentrant."""
    return bool(current_host().msg_reentrant())


def sender() -> bytes:
    """Return the 20-byte address of the account that called the program."""
    return current_host().msg_sender()


def value() -> int:
    """Return the wei sent to the program."""
    return int.from_bytes(current_host().msg_value(), "big")