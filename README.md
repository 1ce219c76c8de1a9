# stylus_sdk

Building blocks for contract programs that keep their state in 32-byte EVM
storage words: a write-back storage cache, storage types laid out the way
Solidity lays them out, raw event logging, raw contract deployment and access
to call and transaction context.

All host access goes through a `Host` object (`stylus_sdk.host.Host`, an
abstract base class). `MemoryHost` is a complete in-memory host, useful for
tests and simulations.

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Choosing a host

```python
from stylus_sdk.host import MemoryHost, use_host

host = MemoryHost(ink_price=10_000)
with use_host(host):
    ...  # everything in here talks to `host`
```

`use_host` is a context manager; hosts may be nested and the innermost one is
active. `current_host()` returns the active host and `current_environment()`
returns its `Environment`, which caches the ink price and the return data size
(`CachedValue` objects). Both raise `RuntimeError` when no host is active.

`MemoryHost` keeps its state in plain attributes you can set up and inspect:
`storage`, `balances`, `codes`, `logs`, `return_data`, `nonce`, and
`deploy_revert` (set it to bytes to make the next deployments fail with that
revert data). It also counts `storage_loads` and records `storage_stores`.

## Storage

Storage types are accessors bound to a slot (an unsigned 256-bit integer) and a
byte offset within that slot. Reads and writes go through the active
environment's `StorageCache` (`storage_cache()`), which only reaches the host
when a word is first read or when the cache is flushed.

```python
from stylus_sdk.host import MemoryHost, use_host
from stylus_sdk.storage.cache import storage_cache
from stylus_sdk.storage.primitives import StorageUint, StorageBool
from stylus_sdk.storage.vec import StorageVec
from stylus_sdk.storage.bytes import StorageString

host = MemoryHost()
with use_host(host):
    counter = StorageUint.of(256)(0, 0)
    counter.set(41)
    counter.set(counter.get() + 1)

    flags = StorageVec.of(StorageBool)(1, 0)
    flags.push(True)
    flags.push(False)
    assert len(flags) == 2 and flags.pop() is False

    name = StorageString(3, 0)
    name.set_str("hello")

    storage_cache().flush()  # write dirty words to the host
```

Available accessors:

- `stylus_sdk.storage.primitives`: `StorageUint.of(bits)`,
  `StorageSigned.of(bits)`, `StorageFixedBytes.of(size)`, `StorageBool`,
  `StorageAddress`, `StorageBlockNumber`, `StorageBlockHash`. Each has `get`,
  `set`, `load`, `set_by_wrapped` and `erase`; values are checked against
  their width and `ValueError` is raised when they do not fit.
- `stylus_sdk.storage.bytes`: `StorageBytes` (`push`, `pop`, `get`, `get_mut`,
  `get_bytes`, `set_bytes`, `extend`, `set_len`, `erase`, `len()`) and
  `StorageString` (`push`, `get_string`, `set_str`, `extend`, `erase`, `len()`
  in bytes). Up to 31 bytes live in the root slot; longer contents live from
  `keccak(slot)`.
- `stylus_sdk.storage.vec`: `StorageVec.of(element_type)` with `push`, `pop`,
  `get`, `getter`, `setter`, `get_mut`, `grow`, `shrink`, `truncate`,
  `erase_last`, `erase`, `extend`, `set_len` and `len()`. The length lives at
  the vector's slot; elements are packed from `keccak(slot)`.

`stylus_sdk.storage.cache` also offers `StorageCache` itself (`get`,
`get_uint`, `get_signed`, `get_byte`, `get_word`, the matching `set_*`
methods, `clear_word`, `flush`, `clear`) and `load_bytes32` /
`store_bytes32`, which bypass the cache. `StorageType` and
`SimpleStorageType` are the base classes for writing new accessors.

## Logs, context and deployment

```python
from stylus_sdk import evm, msg, tx
from stylus_sdk.accounts import balance, codehash
from stylus_sdk.deploy import RawDeploy, DeployError
from stylus_sdk.host import MemoryHost, use_host

with use_host(MemoryHost()):
    evm.raw_log([b"\x00" * 32], b"payload")  # at most four 32-byte topics
    who = msg.sender()
    ink = tx.gas_to_ink(1000)

    try:
        address = RawDeploy().salt(b"\x01" * 32).deploy(b"init code", 0)
    except DeployError as err:
        revert_data = err.revert_data
```

- `evm`: `raw_log`, `memory_grow`, `gas_left`, `ink_left`.
- `msg`: `reentrant`, `sender`, `value` (an int of wei).
- `tx`: `ink_price` (cached per environment), `gas_to_ink` (saturates at
  2**64 - 1), `ink_to_gas` (raises `ZeroDivisionError` for a zero ink price),
  `gas_price`, `origin`.
- `accounts`: `balance(address)` returns a 32-byte word; `codehash(address)`
  returns `None` for an account without code.
- `deploy`: `RawDeploy` is immutable; `salt`, `salt_option`,
  `limit_revert_data` and `skip_revert_data` return new configurations.
  With a salt it deploys with CREATE2, otherwise with CREATE. A failed
  deployment raises `DeployError` with the copied `revert_data`. The storage
  cache is neither flushed nor cleared by a deployment.

`util.keccak` computes Keccak-256; `util.evm_words` and
`util.evm_padded_length` compute word counts and padded lengths.

## What this package does not do

- There is no mapping storage type. Keyed entries at hashed slots have to be
  built by hand from `util.keccak` and the accessors above.
- Events are emitted only from raw topics and data; there is no ABI encoding
  of typed events or call data.
- The `Host` interface has no operations for calling other contracts, and the
  only host provided is `MemoryHost`; connecting to a real chain means writing
  your own `Host` subclass.