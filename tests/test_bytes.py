import pytest

from stylus_sdk.host import MemoryHost, use_host
from stylus_sdk.storage.bytes import StorageBytes, StorageString
from stylus_sdk.storage.cache import storage_cache
from stylus_sdk.util import keccak

ROOT = 5


@pytest.fixture
def host():
    memory = MemoryHost()
    with use_host(memory):
        yield memory


def _base(slot):
    return int.from_bytes(keccak(slot.to_bytes(32, "big")), "big")


def test_short_representation_layout(host):
    data = StorageBytes(ROOT)
    data.extend(b"abc")
    storage_cache().flush()
    assert host.storage[ROOT.to_bytes(32, "big")] == b"abc" + bytes(28) + bytes([6])


def test_long_representation_layout(host):
    data = StorageBytes(ROOT)
    payload = bytes(range(40))
    data.set_bytes(payload)
    cache = storage_cache()
    assert int.from_bytes(cache.get_word(ROOT), "big") == 2 * 40 + 1
    assert cache.get_word(_base(ROOT)) == payload[:32]
    assert cache.get_word(_base(ROOT) + 1)[:8] == payload[32:]


@pytest.mark.parametrize("length", [0, 1, 31, 32, 33, 64, 65, 100])
def test_set_bytes_round_trip(host, length):
    data = StorageBytes(ROOT)
    payload = bytes((i * 7) % 256 for i in range(length))
    data.set_bytes(payload)
    assert len(data) == length
    assert data.get_bytes() == payload


def test_set_bytes_overwrites(host):
    data = StorageBytes(ROOT)
    data.set_bytes(bytes(range(70)))
    data.set_bytes(b"xy")
    assert data.get_bytes() == b"xy"


def test_pop_matches_list(host):
    data = StorageBytes(ROOT)
    expected = list(range(70))
    data.extend(expected)
    while expected:
        assert data.pop() == expected.pop()
        assert data.get_bytes() == bytes(expected)
    assert data.pop() is None
    assert len(data) == 0


def test_pop_clears_storage(host):
    data = StorageBytes(ROOT)
    data.extend(range(1, 41))
    for _ in range(40):
        data.pop()
    cache = storage_cache()
    assert cache.get_word(ROOT) == bytes(32)
    assert cache.get_word(_base(ROOT)) == bytes(32)
    assert cache.get_word(_base(ROOT) + 1) == bytes(32)


def test_get_out_of_range(host):
    data = StorageBytes(ROOT)
    data.extend(b"hi")
    assert data.get(0) == ord("h")
    assert data.get(2) is None
    assert data.get(-1) is None


def test_get_mut_writes_byte(host):
    data = StorageBytes(ROOT)
    data.extend(range(40))
    accessor = data.get_mut(35)
    accessor.set(b"\xaa")
    assert data.get(35) == 0xAA
    assert data.get_mut(40) is None


def test_push_rejects_non_byte(host):
    with pytest.raises(ValueError):
        StorageBytes(ROOT).push(256)


def test_erase_clears_words(host):
    data = StorageBytes(ROOT)
    data.extend(range(1, 70))
    data.erase()
    cache = storage_cache()
    assert len(data) == 0
    assert all(cache.get_word(slot) == bytes(32) for slot in (ROOT, _base(ROOT), _base(ROOT) + 2))


def test_set_len_grow_keeps_prefix(host):
    data = StorageBytes(ROOT)
    data.extend(b"hello")
    data.set_len(40)
    assert len(data) == 40
    assert data.get_bytes()[:5] == b"hello"


def test_set_len_shrink_keeps_prefix(host):
    data = StorageBytes(ROOT)
    payload = bytes(range(1, 41))
    data.set_bytes(payload)
    data.set_len(10)
    assert data.get_bytes() == payload[:10]
    data.set_len(4)
    assert data.get_bytes() == payload[:4]


def test_set_len_negative(host):
    with pytest.raises(ValueError):
        StorageBytes(ROOT).set_len(-1)


def test_nonzero_offset_rejected(host):
    with pytest.raises(ValueError):
        StorageBytes(ROOT, 3)


def test_persists_after_flush(host):
    StorageBytes(ROOT).set_bytes(bytes(range(50)))
    storage_cache().clear()
    assert StorageBytes(ROOT).get_bytes() == bytes(range(50))


def test_string_round_trip(host):
    text = StorageString(ROOT)
    text.set_str("héllo wörld, a longer line of text")
    assert text.get_string() == "héllo wörld, a longer line of text"
    assert len(text) == len("héllo wörld, a longer line of text".encode("utf-8"))


def test_string_push_multibyte(host):
    text = StorageString(ROOT)
    text.push("é")
    text.extend("ab")
    assert text.get_string() == "éab"
    assert text.inner.get_bytes() == "éab".encode("utf-8")


def test_string_invalid_utf8_replaced(host):
    text = StorageString(ROOT)
    text.inner.set_bytes(b"a\xff")
    assert text.get_string() == "a\ufffd"


def test_string_erase(host):
    text = StorageString(ROOT)
    text.set_str("x" * 50)
    text.erase()
    assert len(text) == 0
    assert text.get_string() == ""


def test_string_push_rejects_multiple_chars(host):
    with pytest.raises(ValueError):
        StorageString(ROOT).push("ab")