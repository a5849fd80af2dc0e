# src/polyfactor/domain.py
"""
Coefficient domains.

A domain is a small capability object chosen once, when a polynomial ring is
built, and threaded through every algorithm via ``ring.domain``. Elements are
plain Python ints; the domain knows how to reduce, combine and invert them.

Two kinds exist:

    ZZ                 the integers (characteristic 0, not a field)
    ModularRing(m)     residues modulo m, stored in [0, m); a field iff m is prime

Algorithms branch on ``domain.kind`` (a ``DomainKind``), never on the Python
type of the domain.
"""

from __future__ import annotations

import math
from enum import Enum

import gmpy2
from sympy import isprime

from polyfactor.errors import DomainMismatch, InvalidArgument


class DomainKind(Enum):
    INTEGER = "integer"
    MODULAR = "modular"


class IntegerRing:
    kind = DomainKind.INTEGER
    characteristic = 0
    is_field = False
    is_finite = False
    modulus = None

    zero = 0
    one = 1

    # --- construction / conversion ---

    def from_int(self, n: int) -> int:
        return int(n)

    def to_int(self, a: int) -> int:
        return a

    def reduce(self, a: int) -> int:
        return a

    def symmetric(self, a: int) -> int:
        return a

    # --- arithmetic ---

    def add(self, a: int, b: int) -> int:
        return a + b

    def sub(self, a: int, b: int) -> int:
        return a - b

    def mul(self, a: int, b: int) -> int:
        return a * b

    def neg(self, a: int) -> int:
        return -a

    def pow(self, a: int, e: int) -> int:
        return a ** e

    def is_zero(self, a: int) -> bool:
        return a == 0

    def is_one(self, a: int) -> bool:
        return a == 1

    def is_unit(self, a: int) -> bool:
        return a in (1, -1)

    def inverse(self, a: int) -> int:
        if not self.is_unit(a):
            raise DomainMismatch(f"{a} is not invertible in ZZ")
        return a

    def divides(self, b: int, a: int) -> bool:
        if b == 0:
            return a == 0
        return a % b == 0

    def divide(self, a: int, b: int) -> int:
        """Exact quotient a / b."""
        if b == 0:
            raise InvalidArgument("division by zero")
        q, r = divmod(a, b)
        if r:
            raise InvalidArgument(f"{b} does not divide {a} in ZZ")
        return q

    def gcd(self, a: int, b: int) -> int:
        return math.gcd(a, b)

    def abs(self, a: int) -> int:
        return abs(a)

    def sign(self, a: int) -> int:
        return (a > 0) - (a < 0)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IntegerRing)

    def __hash__(self) -> int:
        return hash("ZZ")

    def __repr__(self) -> str:
        return "ZZ"


class ModularRing:
    """Integers modulo ``modulus``; residues are kept in ``[0, modulus)``."""

    kind = DomainKind.MODULAR
    is_finite = True

    zero = 0
    one = 1

    def __init__(self, modulus: int, field: bool | None = None):
        modulus = int(modulus)
        if modulus < 2:
            raise InvalidArgument(f"modulus must be >= 2, got {modulus}")
        self.modulus = modulus
        self.is_field = isprime(modulus) if field is None else bool(field)

    @property
    def characteristic(self) -> int:
        return self.modulus

    # --- construction / conversion ---

    def from_int(self, n: int) -> int:
        return int(n) % self.modulus

    def to_int(self, a: int) -> int:
        """Signed integer image: the symmetric representative."""
        return self.symmetric(a)

    def reduce(self, a: int) -> int:
        return a % self.modulus

    def symmetric(self, a: int) -> int:
        """Representative in (-m/2, m/2]."""
        m = self.modulus
        a %= m
        return a - m if a > m // 2 else a

    # --- arithmetic ---

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def neg(self, a: int) -> int:
        return (-a) % self.modulus

    def pow(self, a: int, e: int) -> int:
        if e < 0:
            return pow(self.inverse(a), -e, self.modulus)
        return pow(a, e, self.modulus)

    def is_zero(self, a: int) -> bool:
        return a % self.modulus == 0

    def is_one(self, a: int) -> bool:
        return a % self.modulus == 1

    def is_unit(self, a: int) -> bool:
        return math.gcd(a, self.modulus) == 1

    def inverse(self, a: int) -> int:
        if not self.is_unit(a):
            raise DomainMismatch(f"{a} is not invertible modulo {self.modulus}")
        return int(gmpy2.invert(a, self.modulus))

    def divides(self, b: int, a: int) -> bool:
        g = math.gcd(b, self.modulus)
        return a % g == 0

    def divide(self, a: int, b: int) -> int:
        """Some q with b*q == a; b need not be a unit when gcd(b, m) divides a."""
        m = self.modulus
        a, b = a % m, b % m
        if b == 0:
            raise InvalidArgument("division by zero")
        g = math.gcd(b, m)
        if a % g:
            raise InvalidArgument(f"{b} does not divide {a} modulo {m}")
        n = m // g
        return (a // g) * int(gmpy2.invert(b // g, n)) % n

    def gcd(self, a: int, b: int) -> int:
        g = math.gcd(a % self.modulus, b % self.modulus)
        if g == 0:
            return 0
        return math.gcd(g, self.modulus)

    def abs(self, a: int) -> int:
        return a % self.modulus

    def sign(self, a: int) -> int:
        # residues are unordered
        return 0 if self.is_zero(a) else 1

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ModularRing) and other.modulus == self.modulus

    def __hash__(self) -> int:
        return hash(("ZZ/m", self.modulus))

    def __repr__(self) -> str:
        return f"GF({self.modulus})" if self.is_field else f"ZZ/{self.modulus}"


ZZ = IntegerRing()


def GF(p: int) -> ModularRing:
    """Prime field with p elements."""
    if not isprime(p):
        raise InvalidArgument(f"GF(p) needs a prime, got {p}")
    return ModularRing(p, field=True)
