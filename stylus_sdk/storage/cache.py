"""Cached access to persistent storage and the base types of storage accessors."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any

from ..host import Host, current_environment, current_host
from ..util import WORD_SIZE

_KEY_LIMIT = 2 ** (8 * WORD_SIZE)
_MAX_BITS = 8 * WORD_SIZE


def _key_bytes(key: int) -> bytes:
    if not 0 <= key < _KEY_LIMIT:
        raise ValueError("storage key must fit in an unsigned 256-bit integer")
    return key.to_bytes(WORD_SIZE, "big")


def _check_span(offset: int, size: int) -> None:
    if offset < 0 or size < 0 or offset + size > WORD_SIZE:
        raise ValueError("access would cross a word boundary")


def _check_bits(bits: int) -> int:
    if not 0 <= bits <= _MAX_BITS:
        raise ValueError(f"bit width must be between 0 and {_MAX_BITS}")
    return bits // 8


def _check_word(value: bytes) -> bytes:
    value = bytes(value)
    if len(value) != WORD_SIZE:
        raise ValueError(f"word must be {WORD_SIZE} bytes, got {len(value)}")
    return value


def load_bytes32(key: int) -> bytes:
    """Read the word at ``key`` directly from the active host, bypassing all caches."""
    return current_host().storage_load_bytes32(_key_bytes(key))


def store_bytes32(key: int, data: bytes) -> None:
    """Write the word ``data`` at ``key`` directly to the active host, bypassing all caches."""
    current_host().storage_store_bytes32(_key_bytes(key), _check_word(data))


@dataclass
class StorageWord:
    """The current value of a storage slot and, if known, the value the host holds."""

    value: bytes
    known: bytes | None = None

    def dirty(self) -> bool:
        """Return whether the slot must be written back to the host."""
        return self.value != self.known


class StorageCache:
    """Word cache over a host's persistent storage, loading and storing only as needed.

    Keys are unsigned 256-bit integers; offsets count bytes from the left of a word.
    """

    def __init__(self, host: Host) -> None:
        self._host = host
        self._words: dict[int, StorageWord] = {}

    def _entry(self, key: int) -> StorageWord:
        raw_key = _key_bytes(key)
        word = self._words.get(key)
        if word is None:
            loaded = _check_word(self._host.storage_load_bytes32(raw_key))
            word = StorageWord(loaded, loaded)
            self._words[key] = word
        return word

    def get(self, key: int, offset: int, size: int) -> bytes:
        """Return ``size`` bytes of the word at ``key`` starting at ``offset``."""
        _check_span(offset, size)
        return self.get_word(key)[offset : offset + size]

    def get_uint(self, key: int, offset: int, bits: int) -> int:
        """Return the big-endian unsigned integer of ``bits`` bits at ``offset``."""
        size = _check_bits(bits)
        return int.from_bytes(self.get(key, offset, size), "big")

    def get_signed(self, key: int, offset: int, bits: int) -> int:
        """Return the two's-complement integer of ``bits`` bits at ``offset``."""
        raw = self.get_uint(key, offset, bits)
        if bits and (raw >> (bits - 1)) & 1:
            raw -= 1 << bits
        return raw

    def get_byte(self, key: int, offset: int) -> int:
        """Return the byte at ``offset`` in the word at ``key``."""
        return self.get(key, offset, 1)[0]

    def get_word(self, key: int) -> bytes:
        """Return the whole 32-byte word at ``key``."""
        return self._entry(key).value

    def set(self, key: int, offset: int, value: bytes) -> None:
        """Write ``value`` into the word at ``key`` starting at ``offset``."""
        value = bytes(value)
        _check_span(offset, len(value))
        if len(value) == WORD_SIZE:
            self.set_word(key, value)
            return
        word = self._entry(key)
        word.value = word.value[:offset] + value + word.value[offset + len(value) :]

    def set_uint(self, key: int, offset: int, bits: int, value: int) -> None:
        """Write the unsigned integer ``value`` of ``bits`` bits big-endian at ``offset``."""
        size = _check_bits(bits)
        if not 0 <= value < (1 << bits):
            raise ValueError(f"value does not fit in {bits} unsigned bits")
        if bits == _MAX_BITS:
            self.set_word(key, value.to_bytes(WORD_SIZE, "big"))
            return
        _check_span(offset, size)
        truncated = value & ((1 << (8 * size)) - 1)
        self.set(key, offset, truncated.to_bytes(size, "big"))

    def set_signed(self, key: int, offset: int, bits: int, value: int) -> None:
        """Write the integer ``value`` of ``bits`` bits in two's complement at ``offset``."""
        _check_bits(bits)
        low = -(1 << (bits - 1)) if bits else 0
        high = (1 << (bits - 1)) if bits else 1
        if not low <= value < high:
            raise ValueError(f"value does not fit in {bits} signed bits")
        raw = value % (1 << bits) if bits else 0
        self.set_uint(key, offset, bits, raw)

    def set_byte(self, key: int, offset: int, value: int) -> None:
        """Write the byte ``value`` at ``offset`` in the word at ``key``."""
        if not 0 <= value <= 0xFF:
            raise ValueError("byte value must be between 0 and 255")
        self.set(key, offset, bytes([value]))

    def set_word(self, key: int, value: bytes) -> None:
        """Replace the whole word at ``key``; it will be written back on flush."""
        _key_bytes(key)
        self._words[key] = StorageWord(_check_word(value))

    def clear_word(self, key: int) -> None:
        """Set the word at ``key`` to zero."""
        self.set_word(key, bytes(WORD_SIZE))

    def flush(self) -> None:
        """Write every dirty word to the host, keeping what was loaded."""
        for key, word in self._words.items():
            if word.dirty():
                self._host.storage_store_bytes32(_key_bytes(key), word.value)

    def clear(self) -> None:
        """Flush, then forget every cached word."""
        self.flush()
        self._words.clear()


def storage_cache() -> StorageCache:
    """Return the storage cache of the active environment, creating it on first use."""
    environment = current_environment()
    cache = getattr(environment, "_storage_cache", None)
    if cache is None:
        cache = StorageCache(environment.host)
        environment._storage_cache = cache  # type: ignore[attr-defined]
    return cache


class StorageType(abc.ABC):
    """An accessor for a value living at a storage slot and byte offset.

    ``SLOT_BYTES`` is the number of bytes of a word the value takes (at most 32);
    ``REQUIRED_SLOTS`` is the number of whole words it fills, 0 for primitives.
    """

    SLOT_BYTES: int = WORD_SIZE
    REQUIRED_SLOTS: int = 0

    def __init__(self, slot: int, offset: int = 0) -> None:
        _key_bytes(slot)
        if not 0 <= offset <= WORD_SIZE:
            raise ValueError(f"offset must be between 0 and {WORD_SIZE}")
        self.slot = slot
        self.offset = offset

    @abc.abstractmethod
    def load(self) -> Any:
        """Return the value this accessor wraps."""


class SimpleStorageType(StorageType):
    """An accessor whose whole value lives inline and can be written and erased directly."""

    @abc.abstractmethod
    def set_by_wrapped(self, value: Any) -> None:
        """Write ``value`` to persistent storage."""

    @abc.abstractmethod
    def erase(self) -> None:
        """Reset the stored value to its zero value."""