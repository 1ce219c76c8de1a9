"""Logging and metering operations of the virtual machine."""

from __future__ import annotations

from collections.abc import Iterable

from .host import MAX_TOPICS, current_host
from .util import WORD_SIZE


def raw_log(topics: Iterable[bytes], data: bytes) -> None:
    """Emit a log from its raw 32-byte topics and its data.

    Raises ValueError when there are more than four topics or a topic is not a word.
    """
    topics = [bytes(topic) for topic in topics]
    if len(topics) > MAX_TOPICS:
        raise ValueError("too many topics")
    for topic in topics:
        if len(topic) != WORD_SIZE:
            raise ValueError(f"topic must be {WORD_SIZE} bytes, got {len(topic)}")
    current_host().emit_log(b"".join(topics) + bytes(data), len(topics))


def memory_grow(pages: int) -> None:
    """Tell the host the memory grew by ``pages`` pages; this only consumes gas."""
    current_host().memory_grow(pages)


def gas_left() -> int:
    """Return the amount of gas remaining."""
    return current_host().evm_gas_left()


def ink_left() -> int:
    """Return the amount of ink remaining."""
    return current_host().evm_ink_left()