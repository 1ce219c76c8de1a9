"""The host interface a program runs against, an in-memory host, and the active environment."""

from __future__ import annotations

import abc
import contextlib
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, TypeVar

from .util import WORD_SIZE, keccak

ADDRESS_SIZE = 20
MAX_TOPICS = 4
ZERO_ADDRESS = bytes(ADDRESS_SIZE)
ZERO_WORD = bytes(WORD_SIZE)

T = TypeVar("T")


def _require(data: bytes, size: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(data)}")
    return data


def _word(value: int) -> bytes:
    return value.to_bytes(WORD_SIZE, "big")


class Host(abc.ABC):
    """Operations a program may request of the virtual machine hosting it.

    Addresses are 20-byte strings and words are 32-byte strings.
    """

    @abc.abstractmethod
    def account_balance(self, address: bytes) -> bytes:
        """Return the balance in wei of ``address`` as a 32-byte word."""

    @abc.abstractmethod
    def account_codehash(self, address: bytes) -> bytes:
        """Return the code hash of ``address``, or the zero word when it has no code."""

    @abc.abstractmethod
    def storage_load_bytes32(self, key: bytes) -> bytes:
        """Read the 32-byte word stored at ``key``; zero when never set."""

    @abc.abstractmethod
    def storage_store_bytes32(self, key: bytes, value: bytes) -> None:
        """Write a 32-byte word to ``key``."""

    @abc.abstractmethod
    def create1(self, code: bytes, endowment: bytes) -> tuple[bytes, int]:
        """Deploy ``code`` with CREATE semantics.

        Returns the new address (zero on failure) and the length of the revert data.
        """

    @abc.abstractmethod
    def create2(self, code: bytes, endowment: bytes, salt: bytes) -> tuple[bytes, int]:
        """Deploy ``code`` with CREATE2 semantics.

        Returns the new address (zero on failure) and the length of the revert data.
        """

    @abc.abstractmethod
    def emit_log(self, data: bytes, topics: int) -> None:
        """Emit a log whose first ``topics`` words are its topics."""

    @abc.abstractmethod
    def evm_gas_left(self) -> int:
        """Return the gas remaining."""

    @abc.abstractmethod
    def evm_ink_left(self) -> int:
        """Return the ink remaining."""

    @abc.abstractmethod
    def memory_grow(self, pages: int) -> None:
        """Note that the program's memory grew by ``pages`` pages."""

    @abc.abstractmethod
    def msg_reentrant(self) -> bool:
        """Return whether the current call is reentrant."""

    @abc.abstractmethod
    def msg_sender(self) -> bytes:
        """Return the address of the caller."""

    @abc.abstractmethod
    def msg_value(self) -> bytes:
        """Return the wei sent with the call as a 32-byte word."""

    @abc.abstractmethod
    def read_return_data(self, offset: int, size: int) -> bytes:
        """Copy the overlapping part of the last return data at ``offset`` of length ``size``."""

    @abc.abstractmethod
    def return_data_size(self) -> int:
        """Return the length of the last call or deployment result."""

    @abc.abstractmethod
    def tx_gas_price(self) -> bytes:
        """Return the gas price in wei per gas as a 32-byte word."""

    @abc.abstractmethod
    def tx_ink_price(self) -> int:
        """Return the price of ink in evm gas basis points."""

    @abc.abstractmethod
    def tx_origin(self) -> bytes:
        """Return the top-level sender of the transaction."""


def _rlp_uint(value: int) -> bytes:
    if value == 0:
        return b"\x80"
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    if len(raw) == 1 and raw[0] < 0x80:
        return raw
    return bytes([0x80 + len(raw)]) + raw


def _create1_address(sender: bytes, nonce: int) -> bytes:
    payload = bytes([0x80 + ADDRESS_SIZE]) + sender + _rlp_uint(nonce)
    encoded = bytes([0xC0 + len(payload)]) + payload
    return keccak(encoded)[-ADDRESS_SIZE:]


def _create2_address(sender: bytes, salt: bytes, code: bytes) -> bytes:
    return keccak(b"\xff" + sender + salt + keccak(code))[-ADDRESS_SIZE:]


class MemoryHost(Host):
    """A host that keeps all chain state in memory, for running programs off-chain."""

    def __init__(
        self,
        *,
        address: bytes = ZERO_ADDRESS,
        sender: bytes = ZERO_ADDRESS,
        origin: bytes = ZERO_ADDRESS,
        value: int = 0,
        gas_price: int = 0,
        ink_price: int = 10_000,
        gas_left: int = 1_000_000,
        ink_left: int = 10_000_000_000,
        reentrant: bool = False,
        nonce: int = 1,
    ) -> None:
        self.address = _require(address, ADDRESS_SIZE, "address")
        self.sender = _require(sender, ADDRESS_SIZE, "sender")
        self.origin = _require(origin, ADDRESS_SIZE, "origin")
        self.value = value
        self.gas_price = gas_price
        self.ink_price = ink_price
        self.gas_left = gas_left
        self.ink_left = ink_left
        self.reentrant = reentrant
        self.nonce = nonce
        self.balances: dict[bytes, int] = {}
        self.codes: dict[bytes, bytes] = {}
        self.storage: dict[bytes, bytes] = {}
        self.logs: list[tuple[tuple[bytes, ...], bytes]] = []
        self.return_data = b""
        self.deploy_revert: bytes | None = None
        self.memory_pages = 0
        self.storage_loads = 0
        self.storage_stores: list[tuple[bytes, bytes]] = []

    def account_balance(self, address: bytes) -> bytes:
        address = _require(address, ADDRESS_SIZE, "address")
        return _word(self.balances.get(address, 0))

    def account_codehash(self, address: bytes) -> bytes:
        address = _require(address, ADDRESS_SIZE, "address")
        code = self.codes.get(address)
        return ZERO_WORD if code is None else keccak(code)

    def storage_load_bytes32(self, key: bytes) -> bytes:
        key = _require(key, WORD_SIZE, "key")
        self.storage_loads += 1
        return self.storage.get(key, ZERO_WORD)

    def storage_store_bytes32(self, key: bytes, value: bytes) -> None:
        key = _require(key, WORD_SIZE, "key")
        value = _require(value, WORD_SIZE, "value")
        self.storage_stores.append((key, value))
        self.storage[key] = value

    def _deploy(self, contract: bytes, code: bytes, endowment: bytes) -> tuple[bytes, int]:
        amount = int.from_bytes(_require(endowment, WORD_SIZE, "endowment"), "big")
        self.nonce += 1
        if self.deploy_revert is not None:
            self.return_data = bytes(self.deploy_revert)
            return ZERO_ADDRESS, len(self.return_data)
        self.codes[contract] = bytes(code)
        self.balances[contract] = self.balances.get(contract, 0) + amount
        self.return_data = b""
        return contract, 0

    def create1(self, code: bytes, endowment: bytes) -> tuple[bytes, int]:
        contract = _create1_address(self.address, self.nonce)
        return self._deploy(contract, code, endowment)

    def create2(self, code: bytes, endowment: bytes, salt: bytes) -> tuple[bytes, int]:
        salt = _require(salt, WORD_SIZE, "salt")
        contract = _create2_address(self.address, salt, bytes(code))
        return self._deploy(contract, code, endowment)

    def emit_log(self, data: bytes, topics: int) -> None:
        data = bytes(data)
        if not 0 <= topics <= MAX_TOPICS:
            raise ValueError("too many topics")
        split = topics * WORD_SIZE
        if len(data) < split:
            raise ValueError("log data is shorter than its topics")
        words = tuple(data[start : start + WORD_SIZE] for start in range(0, split, WORD_SIZE))
        self.logs.append((words, data[split:]))

    def evm_gas_left(self) -> int:
        return self.gas_left

    def evm_ink_left(self) -> int:
        return self.ink_left

    def memory_grow(self, pages: int) -> None:
        if pages < 0:
            raise ValueError("page count must not be negative")
        self.memory_pages += pages

    def msg_reentrant(self) -> bool:
        return self.reentrant

    def msg_sender(self) -> bytes:
        return self.sender

    def msg_value(self) -> bytes:
        return _word(self.value)

    def read_return_data(self, offset: int, size: int) -> bytes:
        if offset < 0 or size < 0:
            raise ValueError("offset and size must not be negative")
        return self.return_data[offset : offset + size]

    def return_data_size(self) -> int:
        return len(self.return_data)

    def tx_gas_price(self) -> bytes:
        return _word(self.gas_price)

    def tx_ink_price(self) -> int:
        return self.ink_price

    def tx_origin(self) -> bytes:
        return self.origin


class CachedValue(Generic[T]):
    """A value fetched from the host once and then remembered until overwritten."""

    def __init__(self, loader: Callable[[], T]) -> None:
        self._loader = loader
        self._value: T | None = None
        self._loaded = False

    def get(self) -> T:
        """Return the cached value, loading it on first use."""
        if not self._loaded:
            self._value = self._loader()
            self._loaded = True
        return self._value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        """Overwrite the cached value."""
        self._value = value
        self._loaded = True


@dataclass
class Environment:
    """The host a program runs against together with values cached from it."""

    host: Host
    return_data_size: CachedValue[int] = field(init=False)
    ink_price: CachedValue[int] = field(init=False)

    def __post_init__(self) -> None:
        self.return_data_size = CachedValue(self.host.return_data_size)
        self.ink_price = CachedValue(self.host.tx_ink_price)


_environments: ContextVar[tuple[Environment, ...]] = ContextVar("_environments", default=())


@contextlib.contextmanager
def use_host(host: Host) -> Iterator[Environment]:
    """Make ``host`` the active host for the duration of the ``with`` block."""
    environment = Environment(host)
    token = _environments.set(_environments.get() + (environment,))
    try:
        yield environment
    finally:
        _environments.reset(token)


def current_environment() -> Environment:
    """Return the active environment, raising RuntimeError when no host is active."""
    stack = _environments.get()
    if not stack:
        raise RuntimeError("no host is active")
    return stack[-1]


def current_host() -> Host:
    """Return the active host, raising RuntimeError when no host is active."""
    return current_environment().host