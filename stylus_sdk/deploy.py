"""Raw deployment of other contracts."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from .host import ZERO_ADDRESS, current_environment
from .util import WORD_SIZE


class DeployError(Exception):
    """A deployment failed; ``revert_data`` holds the copied revert data."""

    def __init__(self, revert_data: bytes) -> None:
        super().__init__(f"deployment reverted with {len(revert_data)} bytes of data")
        self.revert_data = revert_data


def _word(value: bytes | int, what: str) -> bytes:
    if isinstance(value, int):
        if not 0 <= value < 2 ** (8 * WORD_SIZE):
            raise ValueError(f"{what} does not fit in a word")
        return value.to_bytes(WORD_SIZE, "big")
    value = bytes(value)
    if len(value) != WORD_SIZE:
        raise ValueError(f"{what} must be {WORD_SIZE} bytes, got {len(value)}")
    return value


@dataclass(frozen=True)
class RawDeploy:
    """Configuration for deploying a contract from init code.

    Each configuring method returns a new, updated configuration.
    """

    salt_value: bytes | None = None
    revert_offset: int = 0
    revert_size: int | None = None

    def salt(self, salt: bytes) -> RawDeploy:
        """Deploy with CREATE2 using ``salt``, giving a deterministic address."""
        return dataclasses.replace(self, salt_value=_word(salt, "salt"))

    def salt_option(self, salt: bytes | None) -> RawDeploy:
        """Deploy with CREATE2 using ``salt`` if given, otherwise with CREATE."""
        value = None if salt is None else _word(salt, "salt")
        return dataclasses.replace(self, salt_value=value)

    def limit_revert_data(self, offset: int, size: int) -> RawDeploy:
        """Copy only ``size`` bytes of revert data starting at ``offset`` on failure."""
        if offset < 0 or size < 0:
            raise ValueError("offset and size must not be negative")
        return dataclasses.replace(self, revert_offset=offset, revert_size=size)

    def skip_revert_data(self) -> RawDeploy:
        """Copy no revert data on failure."""
        return self.limit_revert_data(0, 0)

    def deploy(self, code: bytes, endowment: bytes | int) -> bytes:
        """Deploy ``code`` with ``endowment`` wei and return the new contract's address.

        Raises DeployError carrying the revert data when the deployment fails.
        The storage cache is not flushed or cleared.
        """
        environment = current_environment()
        host = environment.host
        code = bytes(code)
        endowment = _word(endowment, "endowment")

        if self.salt_value is not None:
            contract, revert_len = host.create2(code, endowment, self.salt_value)
        else:
            contract, revert_len = host.create1(code, endowment)
        environment.return_data_size.set(revert_len)

        if contract == ZERO_ADDRESS:
            size = self.revert_size
            if size is None:
                size = max(environment.return_data_size.get() - self.revert_offset, 0)
            raise DeployError(host.read_return_data(self.revert_offset, size))
        return contract