import pytest

from stylus_sdk.host import MemoryHost, use_host
from stylus_sdk.storage.bytes import StorageBytes
from stylus_sdk.storage.cache import storage_cache
from stylus_sdk.storage.primitives import StorageBool, StorageUint
from stylus_sdk.storage.vec import StorageVec
from stylus_sdk.util import keccak

SLOT = 3
U256 = StorageUint.of(256)
U64 = StorageUint.of(64)


@pytest.fixture
def host():
    memory = MemoryHost()
    with use_host(memory):
        yield memory


def _base(slot):
    return int.from_bytes(keccak(slot.to_bytes(32, "big")), "big")


def test_push_and_get(host):
    vec = StorageVec.of(U256)(SLOT)
    vec.extend([10, 20, 30])
    assert len(vec) == 3
    assert [vec.get(i) for i in range(3)] == [10, 20, 30]
    assert int.from_bytes(storage_cache().get_word(SLOT), "big") == 3


def test_get_out_of_range(host):
    vec = StorageVec.of(U256)(SLOT)
    vec.push(1)
    assert vec.get(1) is None
    assert vec.get(-1) is None
    assert vec.getter(5) is None


def test_packing_layout(host):
    vec = StorageVec.of(U64)(SLOT)
    vec.extend([1, 2, 3, 4, 5])
    cache = storage_cache()
    word = cache.get_word(_base(SLOT))
    assert word[24:32] == (1).to_bytes(8, "big")
    assert word[16:24] == (2).to_bytes(8, "big")
    assert cache.get_word(_base(SLOT) + 1)[24:32] == (5).to_bytes(8, "big")


def test_pop_clears_words(host):
    vec = StorageVec.of(U64)(SLOT)
    vec.extend([1, 2, 3, 4, 5])
    assert vec.pop() == 5
    cache = storage_cache()
    assert cache.get_word(_base(SLOT) + 1) == bytes(32)
    assert [vec.pop() for _ in range(4)] == [4, 3, 2, 1]
    assert cache.get_word(_base(SLOT)) == bytes(32)
    assert vec.pop() is None
    assert len(vec) == 0


def test_nested_grow(host):
    outer = StorageVec.of(StorageVec.of(U256))(StorageVec.of(U256).SLOT_BYTES * 0)
    inner = outer.grow()
    inner.push(8)
    assert inner.get(0) == 8
    assert len(inner) == 1
    assert len(outer) == 1
    assert outer.get(0).get(0) == 8


def test_truncate_keeps_storage(host):
    vec = StorageVec.of(U256)(SLOT)
    vec.extend([1, 2, 3])
    vec.truncate(1)
    assert len(vec) == 1
    vec.truncate(5)
    assert len(vec) == 1
    vec.set_len(3)
    assert vec.get(2) == 3


def test_erase_last(host):
    vec = StorageVec.of(U256)(SLOT)
    vec.extend([1, 2])
    vec.erase_last()
    assert len(vec) == 1
    vec.set_len(2)
    assert vec.get(1) == 0


def test_erase_all(host):
    vec = StorageVec.of(U256)(SLOT)
    vec.extend([4, 5, 6])
    vec.erase()
    assert len(vec) == 0
    vec.set_len(3)
    assert [vec.get(i) for i in range(3)] == [0, 0, 0]


def test_setter_writes(host):
    vec = StorageVec.of(U64)(SLOT)
    vec.extend([1, 2])
    vec.setter(1).set(9)
    vec.get_mut(0).set(7)
    assert [vec.get(0), vec.get(1)] == [7, 9]


def test_shrink(host):
    vec = StorageVec.of(U256)(SLOT)
    assert vec.shrink() is None
    vec.push(42)
    store = vec.shrink()
    assert store.get() == 42
    assert len(vec) == 0


def test_bool_vector(host):
    vec = StorageVec.of(StorageBool)(SLOT)
    values = [True, False, True] * 12
    vec.extend(values)
    assert [vec.get(i) for i in range(len(values))] == values
    assert [vec.pop() for _ in range(len(values))] == values[::-1]


def test_bytes_elements(host):
    vec = StorageVec.of(StorageBytes)(SLOT)
    vec.grow().set_bytes(b"first")
    vec.grow().set_bytes(bytes(range(40)))
    assert vec.get(0).get_bytes() == b"first"
    assert vec.get(1).get_bytes() == bytes(range(40))
    with pytest.raises(TypeError):
        vec.push(b"x")


def test_persists_after_clear(host):
    StorageVec.of(U64)(SLOT).extend([11, 12, 13])
    storage_cache().clear()
    vec = StorageVec.of(U64)(SLOT)
    assert [vec.get(i) for i in range(len(vec))] == [11, 12, 13]


def test_of_is_cached(host):
    variant = StorageVec.of(U64)
    assert StorageVec.of(U64) is variant
    variant(SLOT).push(5)
    again = StorageVec.of(U64)(SLOT)
    assert len(again) == 1
    assert again.get(0) == 5


def test_plain_vec_rejected(host):
    with pytest.raises(TypeError):
        StorageVec(SLOT)


def test_zero_width_element_rejected():
    with pytest.raises(ValueError):
        StorageVec.of(StorageUint.of(0))


def test_set_len_negative(host):
    with pytest.raises(ValueError):
        StorageVec.of(U256)(SLOT).set_len(-1)