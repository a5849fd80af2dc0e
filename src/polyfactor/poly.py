# src/polyfactor/poly.py
"""
Univariate polynomials over a coefficient domain.

``PolyRing(domain, var)`` builds and converts polynomials; ``Poly`` is an
immutable sparse map exponent -> coefficient with no zero entries, kept in
descending exponent order. Coefficients are plain ints reduced by the domain.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Iterator, Mapping
from math import isqrt
from typing import Any

from polyfactor.domain import ZZ, DomainKind
from polyfactor.errors import DomainMismatch, InvalidArgument


class Poly:
    __slots__ = ("ring", "_terms")

    def __init__(self, ring: PolyRing, terms: Mapping[int, int] | None = None):
        self.ring = ring
        dom = ring.domain
        clean: dict[int, int] = {}
        if terms:
            for e in sorted(terms, reverse=True):
                if e < 0:
                    raise InvalidArgument(f"negative exponent {e}")
                c = dom.reduce(terms[e])
                if c:
                    clean[e] = c
        self._terms = clean

    @classmethod
    def _raw(cls, ring: PolyRing, terms: dict[int, int]) -> Poly:
        """Build from an already reduced, zero-free, descending dict."""
        p = object.__new__(cls)
        p.ring = ring
        p._terms = terms
        return p

    # --- structure ---

    @property
    def domain(self):
        return self.ring.domain

    def degree(self) -> int:
        """Degree; -1 for the zero polynomial."""
        for e in self._terms:
            return e
        return -1

    def terms(self) -> Iterator[tuple[int, int]]:
        """Yield (exponent, coefficient) pairs, highest exponent first."""
        yield from self._terms.items()

    def coefficient(self, e: int) -> int:
        return self._terms.get(e, 0)

    @property
    def lc(self) -> int:
        for c in self._terms.values():
            return c
        return 0

    @property
    def tc(self) -> int:
        """Coefficient of the lowest-order term."""
        if not self._terms:
            return 0
        return self._terms[min(self._terms)]

    @property
    def is_zero(self) -> bool:
        return not self._terms

    @property
    def is_one(self) -> bool:
        return len(self._terms) == 1 and self._terms.get(0) == 1

    @property
    def is_constant(self) -> bool:
        return self.degree() <= 0

    @property
    def is_monic(self) -> bool:
        return self.lc == 1

    def __len__(self) -> int:
        return len(self._terms)

    def __bool__(self) -> bool:
        return bool(self._terms)

    # --- arithmetic ---

    def _coerce(self, other: Any) -> Poly:
        if isinstance(other, Poly):
            if other.ring != self.ring:
                raise InvalidArgument(f"ring mismatch: {self.ring} vs {other.ring}")
            return other
        if isinstance(other, int):
            return self.ring.constant(other)
        return NotImplemented

    def __add__(self, other: Any) -> Poly:
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        dom = self.domain
        out = dict(self._terms)
        for e, c in other._terms.items():
            out[e] = dom.add(out.get(e, 0), c)
        return Poly(self.ring, out)

    __radd__ = __add__

    def __neg__(self) -> Poly:
        dom = self.domain
        return Poly._raw(self.ring, {e: dom.neg(c) for e, c in self._terms.items()})

    def __sub__(self, other: Any) -> Poly:
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        dom = self.domain
        out = dict(self._terms)
        for e, c in other._terms.items():
            out[e] = dom.sub(out.get(e, 0), c)
        return Poly(self.ring, out)

    def __rsub__(self, other: Any) -> Poly:
        return (-self) + other

    def __mul__(self, other: Any) -> Poly:
        if isinstance(other, int):
            return self.scale(other)
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        if not self._terms or not other._terms:
            return self.ring.zero
        dom = self.domain
        out: dict[int, int] = {}
        for e1, c1 in self._terms.items():
            for e2, c2 in other._terms.items():
                e = e1 + e2
                out[e] = dom.add(out.get(e, 0), dom.mul(c1, c2))
        return Poly(self.ring, out)

    __rmul__ = __mul__

    def __pow__(self, n: int) -> Poly:
        if n < 0:
            raise InvalidArgument("negative polynomial power")
        result = self.ring.one
        base = self
        while n:
            if n & 1:
                result = result * base
            n >>= 1
            if n:
                base = base * base
        return result

    def scale(self, c: int) -> Poly:
        """Multiply every coefficient by the scalar c."""
        dom = self.domain
        c = dom.from_int(c)
        if dom.is_zero(c):
            return self.ring.zero
        return Poly(self.ring, {e: dom.mul(a, c) for e, a in self._terms.items()})

    def shift(self, k: int) -> Poly:
        """Multiply by x**k."""
        return Poly._raw(self.ring, {e + k: c for e, c in self._terms.items()})

    def mul_term(self, c: int, k: int) -> Poly:
        return self.scale(c).shift(k)

    def divide_scalar(self, c: int) -> Poly:
        """Exact division of every coefficient by c."""
        dom = self.domain
        return Poly(self.ring, {e: dom.divide(a, c) for e, a in self._terms.items()})

    # --- division ---

    def quo_rem(self, other: Poly) -> tuple[Poly, Poly]:
        """Euclidean division; the divisor's leading coefficient must be a unit."""
        other = self._coerce(other)
        if other.is_zero:
            raise InvalidArgument("polynomial division by zero")
        dom = self.domain
        if not dom.is_unit(other.lc):
            raise DomainMismatch(f"leading coefficient {other.lc} of divisor is not a unit in {dom}")
        inv = dom.inverse(other.lc)
        n = other.degree()
        q: dict[int, int] = {}
        r = self
        while not r.is_zero and r.degree() >= n:
            k = r.degree() - n
            a = dom.mul(r.lc, inv)
            q[k] = a
            r = r - other.mul_term(a, k)
        return Poly(self.ring, q), r

    def __floordiv__(self, other: Any) -> Poly:
        return self.quo_rem(other)[0]

    def __mod__(self, other: Any) -> Poly:
        return self.quo_rem(other)[1]

    def exact_quotient(self, other: Poly) -> Poly:
        """
        Quotient self / other, which must be exact.

        Works over non-fields: each step divides the leading coefficient
        exactly in the domain. Raises InvalidArgument if other does not divide self.
        """
        other = self._coerce(other)
        if other.is_zero:
            raise InvalidArgument("polynomial division by zero")
        dom = self.domain
        n = other.degree()
        b = other.lc
        q: dict[int, int] = {}
        r = self
        while not r.is_zero:
            k = r.degree() - n
            if k < 0 or not dom.divides(b, r.lc):
                raise InvalidArgument("polynomial division is not exact")
            a = dom.divide(r.lc, b)
            q[k] = a
            r = r - other.mul_term(a, k)
        return Poly(self.ring, q)

    def pseudo_quo_rem(self, other: Poly) -> tuple[Poly, Poly]:
        """
        Dense pseudo-division: lc(other)**(deg self - deg other + 1) * self = q * other + r.
        """
        other = self._coerce(other)
        if other.is_zero:
            raise InvalidArgument("polynomial division by zero")
        n = other.degree()
        m = self.degree()
        if m < n:
            return self.ring.zero, self
        b = other.lc
        e = m - n + 1
        q = self.ring.zero
        r = self
        while not r.is_zero and r.degree() >= n:
            k = r.degree() - n
            t = self.ring.monomial(r.lc, k)
            q = q.scale(b) + t
            r = r.scale(b) - other * t
            e -= 1
        f = self.domain.pow(b, e)
        return q.scale(f), r.scale(f)

    def pseudo_remainder(self, other: Poly) -> Poly:
        return self.pseudo_quo_rem(other)[1]

    def sparse_pseudo_remainder(self, other: Poly) -> Poly:
        """
        Pseudo-remainder that only scales by lc(other) when the leading
        coefficient is not already divisible by it. Agrees with the dense
        pseudo-remainder up to a nonzero scalar, so it is zero exactly when
        other divides self over the fraction field.
        """
        other = self._coerce(other)
        if other.is_zero:
            raise InvalidArgument("polynomial division by zero")
        dom = self.domain
        n = other.degree()
        b = other.lc
        r = self
        while not r.is_zero and r.degree() >= n:
            k = r.degree() - n
            a = r.lc
            if dom.divides(b, a):
                r = r - other.mul_term(dom.divide(a, b), k)
            else:
                r = r.scale(b) - other.mul_term(a, k)
        return r

    def pow_mod(self, e: int, mod: Poly) -> Poly:
        """self**e reduced modulo mod, by repeated squaring."""
        if e < 0:
            raise InvalidArgument("negative exponent in pow_mod")
        result = self.ring.one % mod
        base = self % mod
        while e:
            if e & 1:
                result = (result * base) % mod
            e >>= 1
            if e:
                base = (base * base) % mod
        return result

    # --- normalisation ---

    def monic(self) -> Poly:
        if self.is_zero:
            return self
        dom = self.domain
        lc = self.lc
        if dom.is_one(lc):
            return self
        if not dom.is_unit(lc):
            raise DomainMismatch(f"leading coefficient {lc} is not a unit in {dom}")
        return self.scale(dom.inverse(lc))

    def signum(self) -> int:
        return self.domain.sign(self.lc)

    def abs(self) -> Poly:
        return -self if self.signum() < 0 else self

    def derivative(self) -> Poly:
        dom = self.domain
        return Poly(self.ring, {e - 1: dom.mul(c, dom.from_int(e)) for e, c in self._terms.items() if e > 0})

    # --- measures / evaluation ---

    def max_norm(self) -> int:
        to_int = self.domain.to_int
        return max((abs(to_int(c)) for c in self._terms.values()), default=0)

    def sum_norm(self) -> int:
        to_int = self.domain.to_int
        return sum(abs(to_int(c)) for c in self._terms.values())

    def l2_norm_ceil(self) -> int:
        """Ceiling of the Euclidean norm of the coefficient vector."""
        to_int = self.domain.to_int
        s = sum(to_int(c) ** 2 for c in self._terms.values())
        r = isqrt(s)
        return r if r * r == s else r + 1

    def evaluate(self, a: int) -> int:
        dom = self.domain
        a = dom.from_int(a)
        acc = dom.zero
        prev = self.degree()
        for e, c in self._terms.items():
            acc = dom.mul(acc, dom.pow(a, prev - e))
            acc = dom.add(acc, c)
            prev = e
        if prev > 0:
            acc = dom.mul(acc, dom.pow(a, prev))
        return acc

    def __call__(self, a: int) -> int:
        return self.evaluate(a)

    # --- conversion / comparison ---

    def to_coefficients(self) -> list[int]:
        """Dense ascending coefficient list as signed ints."""
        n = self.degree()
        to_int = self.domain.to_int
        return [to_int(self._terms.get(e, 0)) for e in range(n + 1)]

    def as_dict(self) -> dict[int, int]:
        return dict(self._terms)

    def sort_key(self) -> tuple:
        to_int = self.domain.to_int
        return (self.degree(), tuple((e, to_int(c)) for e, c in self._terms.items()))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int):
            if other == 0:
                return self.is_zero
            return self.is_constant and self.lc == self.domain.from_int(other)
        if not isinstance(other, Poly):
            return NotImplemented
        return self.ring == other.ring and self._terms == other._terms

    def __hash__(self) -> int:
        return hash((self.ring, tuple(self._terms.items())))

    def __lt__(self, other: Poly) -> bool:
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        if not self._terms:
            return "0"
        var = self.ring.var
        to_int = self.domain.to_int
        parts: list[str] = []
        for e, c in self._terms.items():
            c = to_int(c)
            sign = "-" if c < 0 else "+"
            a = abs(c)
            if e == 0:
                body = str(a)
            else:
                mono = var if e == 1 else f"{var}^{e}"
                body = mono if a == 1 else f"{a}*{mono}"
            parts.append(sign)
            parts.append(body)
        head = "-" + parts[1] if parts[0] == "-" else parts[1]
        rest = " ".join(parts[2:])
        return f"{head} {rest}" if rest else head

    def __repr__(self) -> str:
        return f"Poly({self}, {self.domain!r})"


class PolyRing:
    """Univariate polynomial ring ``domain[var]``."""

    def __init__(self, domain=ZZ, var: str = "x"):
        self.domain = domain
        self.var = var

    @property
    def zero(self) -> Poly:
        return Poly._raw(self, {})

    @property
    def one(self) -> Poly:
        return Poly._raw(self, {0: 1})

    @property
    def gen(self) -> Poly:
        return Poly._raw(self, {1: 1})

    @property
    def characteristic(self) -> int:
        return self.domain.characteristic

    def constant(self, c: int) -> Poly:
        return Poly(self, {0: self.domain.from_int(c)})

    def monomial(self, c: int, k: int) -> Poly:
        return Poly(self, {k: self.domain.from_int(c)})

    def from_dict(self, terms: Mapping[int, int]) -> Poly:
        dom = self.domain
        return Poly(self, {e: dom.from_int(c) for e, c in terms.items()})

    def from_coefficients(self, coeffs: Iterable[int]) -> Poly:
        """Build from an ascending coefficient list [a0, a1, ..., an]."""
        dom = self.domain
        return Poly(self, {e: dom.from_int(c) for e, c in enumerate(coeffs)})

    def __call__(self, value: Any) -> Poly:
        if isinstance(value, Poly):
            return self.convert(value)
        if isinstance(value, int):
            return self.constant(value)
        if isinstance(value, Mapping):
            return self.from_dict(value)
        return self.from_coefficients(value)

    def convert(self, p: Poly) -> Poly:
        """
        Move p into this ring. Coefficients travel through their signed integer
        image, so modular coefficients come back as symmetric representatives.
        """
        if p.ring == self:
            return p
        src, dst = p.domain, self.domain
        return Poly(self, {e: dst.from_int(src.to_int(c)) for e, c in p.terms()})

    def with_domain(self, domain) -> PolyRing:
        """Ring with the same variable over another coefficient domain."""
        return PolyRing(domain, self.var)

    def random(self, rng: random.Random, degree: int, *, bound: int = 2**8) -> Poly:
        """
        Random polynomial of degree <= degree. Integer coefficients are drawn
        from [-bound, bound]; modular ones uniformly from the residues.
        """
        dom = self.domain
        if dom.kind is DomainKind.MODULAR:
            coeffs = [rng.randrange(dom.modulus) for _ in range(degree + 1)]
        else:
            coeffs = [rng.randint(-bound, bound) for _ in range(degree + 1)]
        return self.from_coefficients(coeffs)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PolyRing) and self.domain == other.domain and self.var == other.var

    def __hash__(self) -> int:
        return hash((self.domain, self.var))

    def __repr__(self) -> str:
        return f"{self.domain!r}[{self.var}]"
