"""Small helpers shared across the package: EVM word arithmetic and hashing."""

from Crypto.Hash import keccak as _keccak

WORD_SIZE = 32


def evm_words(num_bytes: int) -> int:
    """Return the minimum number of 32-byte EVM words needed to hold ``num_bytes`` bytes."""
    if num_bytes < 0:
        raise ValueError("byte count must not be negative")
    return (num_bytes + WORD_SIZE - 1) // WORD_SIZE


def evm_padded_length(num_bytes: int) -> int:
    """Pad a length up to the next multiple of 32 bytes."""
    return evm_words(num_bytes) * WORD_SIZE


def keccak(data: bytes | bytearray | memoryview) -> bytes:
    """Compute the 32-byte keccak256 digest of ``data``."""
    digest = _keccak.new(digest_bits=256)
    digest.update(bytes(data))
    return digest.digest()