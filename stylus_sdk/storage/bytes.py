"""Storage accessors for dynamically sized byte strings and text."""

from __future__ import annotations

from collections.abc import Iterable

from ..util import WORD_SIZE, keccak
from .cache import StorageType, storage_cache
from .primitives import StorageFixedBytes

_SLOT_LIMIT = 1 << (8 * WORD_SIZE)
_LEN_BYTE = WORD_SIZE - 1


def _slot_add(base: int, delta: int) -> int:
    return (base + delta) % _SLOT_LIMIT


class StorageBytes(StorageType):
    """Accessor for a storage-backed byte string laid out like a Solidity ``bytes``.

    Up to 31 bytes live in the root word alongside twice their length; longer
    contents live in consecutive words starting at the keccak hash of the root,
    with the root holding twice the length plus one.
    """

    def __init__(self, slot: int, offset: int = 0) -> None:
        if offset != 0:
            raise ValueError("byte strings must start at offset 0")
        super().__init__(slot, offset)
        self._base: int | None = None

    def _base_slot(self) -> int:
        if self._base is None:
            digest = keccak(self.slot.to_bytes(WORD_SIZE, "big"))
            self._base = int.from_bytes(digest, "big")
        return self._base

    def __len__(self) -> int:
        word = storage_cache().get_word(self.slot)
        last = word[_LEN_BYTE]
        if last & 1 == 0:
            return last // 2
        return int.from_bytes(word, "big") // 2

    def __repr__(self) -> str:
        return f"StorageBytes(slot={self.slot:#x})"

    def _write_len(self, length: int) -> None:
        cache = storage_cache()
        if length < WORD_SIZE:
            cache.set_byte(self.slot, _LEN_BYTE, length * 2)
        else:
            cache.set_word(self.slot, (length * 2 + 1).to_bytes(WORD_SIZE, "big"))

    def set_len(self, length: int) -> None:
        """Overwrite the length, moving bytes between representations as needed.

        Growing may expose junk bytes left over from earlier operations.
        """
        if length < 0:
            raise ValueError("length must not be negative")
        old = len(self)
        if (old < WORD_SIZE) == (length < WORD_SIZE):
            self._write_len(length)
            return
        cache = storage_cache()
        if length < WORD_SIZE:
            cache.set_word(self.slot, cache.get_word(self._base_slot()))
            self._write_len(length)
            return
        word = cache.get_word(self.slot)
        cache.set_word(self._base_slot(), word[:_LEN_BYTE] + b"\x00")
        self._write_len(length)

    def push(self, b: int) -> None:
        """Append the byte ``b``."""
        if not 0 <= b <= 0xFF:
            raise ValueError("byte value must be between 0 and 255")
        cache = storage_cache()
        index = len(self)
        if index < _LEN_BYTE:
            cache.set_byte(self.slot, index, b)
            self._write_len(index + 1)
            return
        if index == _LEN_BYTE:
            # the length byte is overwritten by the byte pushed below
            cache.set_word(self._base_slot(), cache.get_word(self.slot))
        slot = _slot_add(self._base_slot(), index // WORD_SIZE)
        cache.set_byte(slot, index % WORD_SIZE, b)
        self._write_len(index + 1)

    def pop(self) -> int | None:
        """Remove and return the last byte, or None when empty.

        In the long representation a word is only cleared once all its bytes are freed.
        """
        length = len(self)
        if length == 0:
            return None
        cache = storage_cache()
        index = length - 1
        clean = index % WORD_SIZE == 0
        byte = self._get_unchecked(index)

        if length == WORD_SIZE:
            base = self._base_slot()
            cache.set_word(self.slot, cache.get_word(base))
            cache.clear_word(base)
        if length > WORD_SIZE and clean:
            cache.clear_word(self._index_slot(index)[0])
        if length < WORD_SIZE:
            cache.set_byte(self.slot, index, 0)

        self._write_len(index)
        return byte

    def get(self, index: int) -> int | None:
        """Return the byte at ``index``, or None when out of range."""
        if index < 0 or index >= len(self):
            return None
        return self._get_unchecked(index)

    def get_mut(self, index: int) -> StorageFixedBytes | None:
        """Return a one-byte accessor for the byte at ``index``, or None when out of range."""
        if index < 0 or index >= len(self):
            return None
        slot, offset = self._index_slot(index)
        return StorageFixedBytes.of(1)(slot, offset)

    def _get_unchecked(self, index: int) -> int:
        slot, offset = self._index_slot(index)
        return storage_cache().get_byte(slot, offset)

    def get_bytes(self) -> bytes:
        """Return the full contents."""
        return bytes(self._get_unchecked(i) for i in range(len(self)))

    def set_bytes(self, data: bytes) -> None:
        """Replace the contents with ``data``, erasing what was stored before."""
        data = bytes(data)
        self.erase()
        self.extend(data)

    def extend(self, data: Iterable[int]) -> None:
        """Append every byte of ``data``."""
        for b in data:
            self.push(b)

    def _index_slot(self, index: int) -> tuple[int, int]:
        if len(self) >= WORD_SIZE:
            slot = _slot_add(self._base_slot(), index // WORD_SIZE)
        else:
            slot = self.slot
        return slot, index % WORD_SIZE

    def erase(self) -> None:
        """Clear every word the contents occupy, leaving an empty string."""
        cache = storage_cache()
        remaining = len(self)
        if remaining > _LEN_BYTE:
            while remaining > 0:
                cache.clear_word(self._index_slot(remaining - 1)[0])
                remaining -= WORD_SIZE
        cache.clear_word(self.slot)

    def load(self) -> StorageBytes:
        """Return this accessor."""
        return self


class StorageString(StorageType):
    """Accessor for storage-backed UTF-8 text, stored like ``StorageBytes``."""

    def __init__(self, slot: int, offset: int = 0) -> None:
        super().__init__(slot, offset)
        self.inner = StorageBytes(slot, offset)

    def __len__(self) -> int:
        """Return the number of bytes stored."""
        return len(self.inner)

    def __repr__(self) -> str:
        return f"StorageString(slot={self.slot:#x})"

    def push(self, c: str) -> None:
        """Append the character ``c``."""
        if len(c) != 1:
            raise ValueError("expected a single character")
        self.inner.extend(c.encode("utf-8"))

    def get_string(self) -> str:
        """Return the stored text, replacing invalid UTF-8 sequences."""
        return self.inner.get_bytes().decode("utf-8", errors="replace")

    def set_str(self, text: str) -> None:
        """Replace the stored text with ``text``."""
        self.erase()
        self.extend(text)

    def extend(self, chars: Iterable[str]) -> None:
        """Append every character of ``chars``."""
        for c in chars:
            self.push(c)

    def erase(self) -> None:
        """Erase the stored text."""
        self.inner.erase()

    def load(self) -> StorageString:
        """Return this accessor."""
        return self