# src/polyfactor/primes.py
"""
Prime lists used for modular reduction.

Each range starts from a fixed table (small primes, or the primes just below
2^28, 2^29, 2^32 for MEDIUM and 2^59, 2^60, 2^63 for LARGE) and continues
past the table with sympy.nextprime, so a PrimeList never runs dry on its own.
Bounding how many primes are tried is the caller's job (PrimeSchedule).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import IntEnum
from functools import lru_cache

from sympy import nextprime, prevprime, primerange

from polyfactor.errors import InvalidArgument, ResourceExhaustion

logger = logging.getLogger(__name__)


class PrimeRange(IntEnum):
    SMALL = 1
    MEDIUM = 2
    LARGE = 3


_BITS = {
    PrimeRange.MEDIUM: (28, 29, 32),
    PrimeRange.LARGE: (59, 60, 63),
}
_PER_BITSIZE = 10


def _primes_below(bound: int, count: int) -> list[int]:
    out: list[int] = []
    p = bound
    for _ in range(count):
        p = prevprime(p)
        out.append(p)
    return out


@lru_cache(maxsize=None)
def _table(r: PrimeRange) -> tuple[int, ...]:
    if r is PrimeRange.SMALL:
        return tuple(primerange(2, 30))
    primes: list[int] = []
    for bits in _BITS[r]:
        primes.extend(_primes_below(1 << bits, _PER_BITSIZE))
    return tuple(primes)


class PrimeList:
    """Restartable, unbounded sequence of primes for one range."""

    def __init__(self, r: PrimeRange = PrimeRange.MEDIUM):
        self.range = r
        self._table = _table(r)

    def __len__(self) -> int:
        # size of the fixed table; iteration continues beyond it
        return len(self._table)

    def __getitem__(self, i: int) -> int:
        if i < 0:
            raise IndexError(i)
        if i < len(self._table):
            return self._table[i]
        p = max(self._table)
        for _ in range(i - len(self._table) + 1):
            p = nextprime(p)
        return p

    def __iter__(self) -> Iterator[int]:
        yield from self._table
        p = max(self._table)
        while True:
            p = nextprime(p)
            yield p

    def __repr__(self) -> str:
        return f"PrimeList({self.range.name})"


class PrimeSchedule:
    """
    Bounded stream of candidate primes.

    At most ``pool`` primes are drawn from each range. When a range is used up
    the schedule escalates SMALL -> MEDIUM -> LARGE; once LARGE is used up as
    well, ResourceExhaustion is raised.
    """

    def __init__(self, pool: int, start: PrimeRange = PrimeRange.SMALL, skip: tuple[int, ...] = ()):
        if pool < 1:
            raise InvalidArgument(f"prime pool must be positive, got {pool}")
        self.pool = pool
        self.skip = frozenset(skip)
        self.drawn = 0
        self._switch(start)

    def _switch(self, r: PrimeRange) -> None:
        self.range = r
        self._it = iter(PrimeList(r))
        self._used = 0

    def escalate(self, r: PrimeRange) -> None:
        """Move to range r unless the schedule is already there or beyond."""
        if r > self.range:
            logger.debug("prime schedule: %s -> %s", self.range.name, r.name)
            self._switch(r)

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        while True:
            if self._used >= self.pool:
                if self.range is PrimeRange.LARGE:
                    raise ResourceExhaustion(f"prime list exhausted after {self.drawn} candidates")
                self.escalate(PrimeRange(self.range + 1))
            p = next(self._it)
            if p in self.skip:
                continue
            self._used += 1
            self.drawn += 1
            return p
