"""Decoding the instruction bytes of the PDA program."""

from __future__ import annotations

import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)

_INVALID_PARAMETERS = "Invalid parameters passed"
_INVALID_FLAG = "Invalid function flag"


class InstructionError(ValueError):
    """The instruction bytes could not be decoded."""


@dataclass(frozen=True)
class PdaCreate:
    """Create a program-derived account."""

    seed: str
    bump: int
    account_size: int


@dataclass(frozen=True)
class PdaWrite:
    """Write a word into a program-derived account."""

    seed: str


def _seed(rest: bytes, length: int) -> str:
    if len(rest) < length:
        raise InstructionError("seed is shorter than its stated length")
    try:
        return rest[:length].decode("utf-8")
    except UnicodeDecodeError as err:
        raise InstructionError("seed is not valid UTF-8") from err


def unpack(data: bytes) -> PdaCreate | PdaWrite:
    """Decode ``flag, seed_length, seed[, bump, ..., account_size]``.

    The account size is always the last byte of the payload.
    """
    data = bytes(data)
    log.debug("Total payload: %r", data)
    if len(data) < 2:
        raise InstructionError(_INVALID_PARAMETERS)
    flag, key_length, rest = data[0], data[1], data[2:]
    log.debug("Received function flag: %d", flag)

    match flag:
        case 0:
            seed = _seed(rest, key_length)
            if len(rest) <= key_length:
                raise InstructionError("bump byte is missing")
            bump = rest[key_length]
            account_size = rest[-1]
            return PdaCreate(seed=seed, bump=bump, account_size=account_size)
        case 1:
            return PdaWrite(seed=_seed(rest, key_length))
        case _:
            raise InstructionError(_INVALID_FLAG)