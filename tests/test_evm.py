import pytest

from stylus_sdk import evm
from stylus_sdk.host import MemoryHost, use_host


def test_raw_log_records_topics_and_data():
    host = MemoryHost()
    first, second = b"\x01" * 32, b"\x02" * 32
    with use_host(host):
        evm.raw_log([first, second], b"payload")
    assert host.logs == [((first, second), b"payload")]


def test_raw_log_without_topics():
    host = MemoryHost()
    with use_host(host):
        evm.raw_log([], b"data")
    assert host.logs == [((), b"data")]


def test_raw_log_four_topics_allowed():
    host = MemoryHost()
    topics = [bytes([i]) * 32 for i in range(4)]
    with use_host(host):
        evm.raw_log(topics, b"")
    assert host.logs[0][0] == tuple(topics)


def test_raw_log_too_many_topics():
    host = MemoryHost()
    with use_host(host):
        with pytest.raises(ValueError, match="too many topics"):
            evm.raw_log([bytes(32)] * 5, b"")
    assert host.logs == []


def test_raw_log_rejects_short_topic():
    with use_host(MemoryHost()):
        with pytest.raises(ValueError):
            evm.raw_log([b"\x01" * 31], b"")


def test_gas_and_ink_left():
    host = MemoryHost(gas_left=1234, ink_left=98765)
    with use_host(host):
        assert evm.gas_left() == 1234
        assert evm.ink_left() == 98765


def test_memory_grow_reaches_host():
    host = MemoryHost()
    with use_host(host):
        evm.memory_grow(3)
        evm.memory_grow(2)
    assert host.memory_pages == 5


def test_without_host_raises():
    with pytest.raises(RuntimeError):
        evm.gas_left()