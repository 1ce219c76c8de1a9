"""Storage accessors for fixed-size values: integers, byte strings, booleans, addresses and block data."""

from __future__ import annotations

import abc
from typing import Any, ClassVar

from ..host import ADDRESS_SIZE
from ..util import WORD_SIZE
from .cache import SimpleStorageType, storage_cache

_MAX_BITS = 8 * WORD_SIZE
_BLOCK_NUMBER_SIZE = 8
_U64_LIMIT = 1 << 64
_UNSET: Any = object()


def _check_bytes(value: bytes, size: int, what: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{what} must be bytes")
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(value)}")
    return value


class _Primitive(SimpleStorageType):
    """Shared behaviour of accessors that read lazily and remember the last value."""

    def __init__(self, slot: int, offset: int = 0) -> None:
        super().__init__(slot, offset)
        if self.offset + self.SLOT_BYTES > WORD_SIZE:
            raise ValueError("value would cross a word boundary")
        self._cached: Any = _UNSET

    @abc.abstractmethod
    def _read(self) -> Any:
        """Fetch the value from the storage cache."""

    @abc.abstractmethod
    def _write(self, value: Any) -> None:
        """Write an already validated value to the storage cache."""

    @abc.abstractmethod
    def _coerce(self, value: Any) -> Any:
        """Validate ``value`` and return it in canonical form."""

    def _fetch(self) -> Any:
        if self._cached is _UNSET:
            self._cached = self._read()
        return self._cached

    def _assign(self, value: Any) -> None:
        value = self._coerce(value)
        self._cached = value
        self._write(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(slot={self.slot:#x}, offset={self.offset})"


def _check_bits(bits: int) -> int:
    if not isinstance(bits, int) or not 0 <= bits <= _MAX_BITS:
        raise ValueError(f"bit width must be between 0 and {_MAX_BITS}")
    return bits


class StorageUint(_Primitive):
    """Accessor for an unsigned integer of ``BITS`` bits; use ``StorageUint.of(bits)``."""

    BITS: ClassVar[int] = _MAX_BITS
    SLOT_BYTES = _MAX_BITS // 8
    _variants: ClassVar[dict[int, type[StorageUint]]] = {}

    @classmethod
    def of(cls, bits: int) -> type[StorageUint]:
        """Return the accessor class for unsigned integers of ``bits`` bits."""
        bits = _check_bits(bits)
        variant = StorageUint._variants.get(bits)
        if variant is None:
            variant = type(f"StorageU{bits}", (StorageUint,), {"BITS": bits, "SLOT_BYTES": bits // 8})
            StorageUint._variants[bits] = variant
        return variant

    def get(self) -> int:
        """Return the stored integer, reading storage only on first use."""
        return self._fetch()

    def set(self, value: int) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> int:
        """Return the stored integer."""
        return self.get()

    def set_by_wrapped(self, value: int) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored integer to zero."""
        self.set(0)

    def _read(self) -> int:
        return storage_cache().get_uint(self.slot, self.offset, self.BITS)

    def _write(self, value: int) -> None:
        storage_cache().set_uint(self.slot, self.offset, self.BITS, value)

    def _coerce(self, value: int) -> int:
        value = int(value)
        if not 0 <= value < (1 << self.BITS):
            raise ValueError(f"value does not fit in {self.BITS} unsigned bits")
        return value


class StorageSigned(_Primitive):
    """Accessor for a two's-complement integer of ``BITS`` bits; use ``StorageSigned.of(bits)``."""

    BITS: ClassVar[int] = _MAX_BITS
    SLOT_BYTES = _MAX_BITS // 8
    _variants: ClassVar[dict[int, type[StorageSigned]]] = {}

    @classmethod
    def of(cls, bits: int) -> type[StorageSigned]:
        """Return the accessor class for signed integers of ``bits`` bits."""
        bits = _check_bits(bits)
        variant = StorageSigned._variants.get(bits)
        if variant is None:
            variant = type(f"StorageI{bits}", (StorageSigned,), {"BITS": bits, "SLOT_BYTES": bits // 8})
            StorageSigned._variants[bits] = variant
        return variant

    def get(self) -> int:
        """Return the stored integer, reading storage only on first use."""
        return self._fetch()

    def set(self, value: int) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> int:
        """Return the stored integer."""
        return self.get()

    def set_by_wrapped(self, value: int) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored integer to zero."""
        self.set(0)

    def _read(self) -> int:
        return storage_cache().get_signed(self.slot, self.offset, self.BITS)

    def _write(self, value: int) -> None:
        storage_cache().set_signed(self.slot, self.offset, self.BITS, value)

    def _coerce(self, value: int) -> int:
        value = int(value)
        if self.BITS == 0:
            low, high = 0, 1
        else:
            low, high = -(1 << (self.BITS - 1)), 1 << (self.BITS - 1)
        if not low <= value < high:
            raise ValueError(f"value does not fit in {self.BITS} signed bits")
        return value


class StorageFixedBytes(_Primitive):
    """Accessor for a byte string of ``SIZE`` bytes; use ``StorageFixedBytes.of(size)``."""

    SIZE: ClassVar[int] = WORD_SIZE
    SLOT_BYTES = WORD_SIZE
    _variants: ClassVar[dict[int, type[StorageFixedBytes]]] = {}

    @classmethod
    def of(cls, size: int) -> type[StorageFixedBytes]:
        """Return the accessor class for byte strings of ``size`` bytes."""
        if not isinstance(size, int) or not 0 <= size <= WORD_SIZE:
            raise ValueError(f"size must be between 0 and {WORD_SIZE}")
        variant = StorageFixedBytes._variants.get(size)
        if variant is None:
            variant = type(f"StorageB{size * 8}", (StorageFixedBytes,), {"SIZE": size, "SLOT_BYTES": size})
            StorageFixedBytes._variants[size] = variant
        return variant

    def get(self) -> bytes:
        """Return the stored bytes, reading storage only on first use."""
        return self._fetch()

    def set(self, value: bytes) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> bytes:
        """Return the stored bytes."""
        return self.get()

    def set_by_wrapped(self, value: bytes) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored bytes to zeros."""
        self.set(bytes(self.SIZE))

    def _read(self) -> bytes:
        return storage_cache().get(self.slot, self.offset, self.SIZE)

    def _write(self, value: bytes) -> None:
        storage_cache().set(self.slot, self.offset, value)

    def _coerce(self, value: bytes) -> bytes:
        return _check_bytes(value, self.SIZE, "value")


class StorageBool(_Primitive):
    """Accessor for a boolean stored in a single byte."""

    SLOT_BYTES = 1

    def get(self) -> bool:
        """Return the stored flag, reading storage only on first use."""
        return self._fetch()

    def set(self, value: bool) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> bool:
        """Return the stored flag."""
        return self.get()

    def set_by_wrapped(self, value: bool) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored flag to false."""
        self.set(False)

    def _read(self) -> bool:
        return storage_cache().get_byte(self.slot, self.offset) != 0

    def _write(self, value: bool) -> None:
        storage_cache().set_byte(self.slot, self.offset, int(value))

    def _coerce(self, value: bool) -> bool:
        return bool(value)


class StorageAddress(_Primitive):
    """Accessor for a 20-byte address."""

    SLOT_BYTES = ADDRESS_SIZE

    def get(self) -> bytes:
        """Return the stored address, reading storage only on first use."""
        return self._fetch()

    def set(self, value: bytes) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> bytes:
        """Return the stored address."""
        return self.get()

    def set_by_wrapped(self, value: bytes) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored address to the zero address."""
        self.set(bytes(ADDRESS_SIZE))

    def _read(self) -> bytes:
        return storage_cache().get(self.slot, self.offset, ADDRESS_SIZE)

    def _write(self, value: bytes) -> None:
        storage_cache().set(self.slot, self.offset, value)

    def _coerce(self, value: bytes) -> bytes:
        return _check_bytes(value, ADDRESS_SIZE, "address")


class StorageBlockNumber(_Primitive):
    """Accessor for a block number, stored as a big-endian unsigned 64-bit integer."""

    SLOT_BYTES = _BLOCK_NUMBER_SIZE

    def get(self) -> int:
        """Return the stored block number, reading storage only on first use."""
        return self._fetch()

    def set(self, value: int) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> int:
        """Return the stored block number."""
        return self.get()

    def set_by_wrapped(self, value: int) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored block number to zero."""
        self.set(0)

    def _read(self) -> int:
        data = storage_cache().get(self.slot, self.offset, _BLOCK_NUMBER_SIZE)
        return int.from_bytes(data, "big")

    def _write(self, value: int) -> None:
        storage_cache().set(self.slot, self.offset, value.to_bytes(_BLOCK_NUMBER_SIZE, "big"))

    def _coerce(self, value: int) -> int:
        value = int(value)
        if not 0 <= value < _U64_LIMIT:
            raise ValueError("block number must fit in an unsigned 64-bit integer")
        return value


class StorageBlockHash(_Primitive):
    """Accessor for a 32-byte block hash filling a whole word; the offset is ignored."""

    SLOT_BYTES = WORD_SIZE

    def __init__(self, slot: int, offset: int = 0) -> None:
        super().__init__(slot, 0)

    def get(self) -> bytes:
        """Return the stored hash, reading storage only on first use."""
        return self._fetch()

    def set(self, value: bytes) -> None:
        """Write ``value`` to storage."""
        self._assign(value)

    def load(self) -> bytes:
        """Return the stored hash."""
        return self.get()

    def set_by_wrapped(self, value: bytes) -> None:
        """Write ``value`` to storage."""
        self.set(value)

    def erase(self) -> None:
        """Reset the stored hash to zeros."""
        self.set(bytes(WORD_SIZE))

    def _read(self) -> bytes:
        return storage_cache().get_word(self.slot)

    def _write(self, value: bytes) -> None:
        storage_cache().set_word(self.slot, value)

    def _coerce(self, value: bytes) -> bytes:
        return _check_bytes(value, WORD_SIZE, "block hash")