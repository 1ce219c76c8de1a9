"""Storage accessor for dynamically sized vectors of storage values."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from ..util import WORD_SIZE, keccak
from .cache import SimpleStorageType, StorageType, storage_cache

_SLOT_LIMIT = 1 << (8 * WORD_SIZE)


class StorageVec(StorageType):
    """Accessor for a storage-backed vector laid out like a Solidity dynamic array.

    The length lives at the vector's slot; elements are packed from the keccak hash
    of that slot onward. Use ``StorageVec.of(element_type)`` to get a concrete class.
    """

    ELEMENT: ClassVar[type[StorageType] | None] = None
    _variants: ClassVar[dict[type, type[StorageVec]]] = {}

    @classmethod
    def of(cls, element_type: type[StorageType]) -> type[StorageVec]:
        """Return the vector accessor class holding elements of ``element_type``."""
        if not (isinstance(element_type, type) and issubclass(element_type, StorageType)):
            raise TypeError("element type must be a storage type")
        if not 0 < element_type.SLOT_BYTES <= WORD_SIZE:
            raise ValueError("element type must take between 1 and 32 bytes of a slot")
        variant = StorageVec._variants.get(element_type)
        if variant is None:
            name = f"StorageVec[{element_type.__name__}]"
            variant = type(name, (StorageVec,), {"ELEMENT": element_type})
            StorageVec._variants[element_type] = variant
        return variant

    def __init__(self, slot: int, offset: int = 0) -> None:
        if self.ELEMENT is None:
            raise TypeError("use StorageVec.of(element_type) to choose the element type")
        if offset != 0:
            raise ValueError("vectors must start at offset 0")
        super().__init__(slot, offset)
        self._base: int | None = None

    def __len__(self) -> int:
        return int.from_bytes(storage_cache().get_word(self.slot), "big")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(slot={self.slot:#x})"

    def set_len(self, length: int) -> None:
        """Overwrite the length; new elements may hold junk from earlier operations."""
        if length < 0:
            raise ValueError("length must not be negative")
        storage_cache().set_word(self.slot, length.to_bytes(WORD_SIZE, "big"))

    def _density(self) -> int:
        return WORD_SIZE // self.ELEMENT.SLOT_BYTES

    def _base_slot(self) -> int:
        if self._base is None:
            digest = keccak(self.slot.to_bytes(WORD_SIZE, "big"))
            self._base = int.from_bytes(digest, "big")
        return self._base

    def _index_slot(self, index: int) -> tuple[int, int]:
        width = self.ELEMENT.SLOT_BYTES
        words = max(self.ELEMENT.REQUIRED_SLOTS, 1)
        density = self._density()
        slot = (self._base_slot() + words * index // density) % _SLOT_LIMIT
        offset = WORD_SIZE - width * (1 + index % density)
        return slot, offset

    def _accessor_unchecked(self, index: int) -> StorageType:
        slot, offset = self._index_slot(index)
        return self.ELEMENT(slot, offset)

    def _accessor(self, index: int) -> StorageType | None:
        if index < 0 or index >= len(self):
            return None
        return self._accessor_unchecked(index)

    def _require_simple(self) -> None:
        if not issubclass(self.ELEMENT, SimpleStorageType):
            raise TypeError(f"{self.ELEMENT.__name__} cannot be written directly")

    def getter(self, index: int) -> StorageType | None:
        """Return an accessor for the element at ``index``, or None when out of range."""
        return self._accessor(index)

    def setter(self, index: int) -> StorageType | None:
        """Return an accessor for the element at ``index``, or None when out of range."""
        return self._accessor(index)

    def get(self, index: int) -> Any:
        """Return the element at ``index``, or None when out of range."""
        store = self._accessor(index)
        return None if store is None else store.load()

    def get_mut(self, index: int) -> StorageType | None:
        """Return a mutable accessor for the element at ``index``, or None when out of range."""
        return self._accessor(index)

    def grow(self) -> StorageType:
        """Extend the vector by one element and return an accessor for the new slot."""
        index = len(self)
        self.set_len(index + 1)
        return self._accessor_unchecked(index)

    def shrink(self) -> StorageType | None:
        """Remove the last element and return its accessor, or None when empty."""
        length = len(self)
        if length == 0:
            return None
        index = length - 1
        self.set_len(index)
        return self._accessor_unchecked(index)

    def truncate(self, length: int) -> None:
        """Keep only the first ``length`` elements without erasing storage."""
        if length < len(self):
            self.set_len(length)

    def push(self, value: Any) -> None:
        """Append ``value``."""
        self._require_simple()
        self.grow().set_by_wrapped(value)

    def pop(self) -> Any:
        """Remove and return the last element, or None when empty.

        The storage words are cleared once every element they hold has been removed.
        """
        self._require_simple()
        store = self.shrink()
        if store is None:
            return None
        index = len(self)
        value = store.load()
        if index % self._density() == 0:
            slot = self._index_slot(index)[0]
            cache = storage_cache()
            for i in range(max(self.ELEMENT.REQUIRED_SLOTS, 1)):
                cache.clear_word((slot + i) % _SLOT_LIMIT)
        return value

    def erase_last(self) -> None:
        """Erase the last element and remove it."""
        length = len(self)
        if length == 0:
            return
        index = length - 1
        self._accessor_unchecked(index).erase()
        self.set_len(index)

    def erase(self) -> None:
        """Erase every element and set the length to zero."""
        for index in range(len(self)):
            self._accessor_unchecked(index).erase()
        self.truncate(0)

    def extend(self, values: Iterable[Any]) -> None:
        """Append every value of ``values``."""
        for value in values:
            self.push(value)

    def load(self) -> StorageVec:
        """Return this accessor."""
        return self