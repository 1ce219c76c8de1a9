import pytest

from stylus_sdk import accounts
from stylus_sdk.host import MemoryHost, use_host
from stylus_sdk.util import keccak

ACCOUNT = b"\x42" * 20


def test_balance_of_unknown_account_is_zero():
    with use_host(MemoryHost()):
        assert accounts.balance(ACCOUNT) == bytes(32)


def test_balance_word():
    host = MemoryHost()
    host.balances[ACCOUNT] = 5000
    with use_host(host):
        word = accounts.balance(ACCOUNT)
    assert int.from_bytes(word, "big") == 5000


def test_codehash_none_without_code():
    with use_host(MemoryHost()):
        assert accounts.codehash(ACCOUNT) is None


def test_codehash_of_empty_code():
    host = MemoryHost()
    host.codes[ACCOUNT] = b""
    with use_host(host):
        assert accounts.codehash(ACCOUNT) == bytes.fromhex(
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )


def test_codehash_matches_code():
    host = MemoryHost()
    host.codes[ACCOUNT] = b"\x60\x00"
    with use_host(host):
        assert accounts.codehash(ACCOUNT) == keccak(b"\x60\x00")


def test_bad_address_length():
    with use_host(MemoryHost()):
        with pytest.raises(ValueError):
            accounts.balance(b"\x01" * 19)