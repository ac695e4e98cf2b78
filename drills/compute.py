"""Finding the n-th prime by trial division."""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)

_U8_MAX = 255
_U16_MAX = 65535


def is_prime(number: int) -> bool:
    """Trial division up to half the number.

    As in the on-chain version, 0 and 1 are reported as prime.
    """
    if not 0 <= number <= _U16_MAX:
        raise ValueError(f"number out of range: {number}")
    upper = int(number / 2.0 + 1.0)
    return all(number % divisor for divisor in range(2, upper))


def nth_prime(n: int) -> int:
    """Return the n-th prime counting from 2; for n == 0 this is 2."""
    if not 0 <= n <= _U8_MAX:
        raise ValueError(f"n must fit in one byte: {n}")
    found = 0
    candidate = 2
    latest = 2
    while found < n:
        if is_prime(candidate):
            found += 1
            latest = candidate
            log.debug("%d th prime number is %d", found, latest)
        candidate += 1
    return latest


def process_instruction(instruction_data: bytes) -> int:
    """Read n from the first byte and return the n-th prime."""
    if not instruction_data:
        raise ValueError("instruction data is empty")
    count = instruction_data[0]
    log.debug("will find %d-prime", count)
    prime = nth_prime(count)
    log.debug("%d th prime number is %d", count, prime)
    return prime