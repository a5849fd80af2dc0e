# src/polyfactor/squarefree.py
"""
Squarefree decomposition.

``squarefree_factors(P)`` returns {f: e} with P == c * prod f**e, every f
squarefree and the f pairwise coprime. Constant entries carry the content
(over ZZ) or the leading coefficient (over a prime field).

Characteristic 0 runs Yun's algorithm on the primitive part. Characteristic p
runs the same loop; when it stalls on a p-th power it takes the p-th root and
restarts with the multiplicity scaled by p.
"""

from __future__ import annotations

from functools import lru_cache

from polyfactor.domain import DomainKind
from polyfactor.errors import DomainMismatch
from polyfactor.gcd import GcdEngine, gcd_engine
from polyfactor.poly import Poly


def normalize_factorization(factors: dict[Poly, int]) -> dict[Poly, int]:
    """
    Integer sign convention: every non-constant factor gets a positive leading
    coefficient and all constants (sign included) collapse into one constant
    entry of multiplicity 1, dropped when it is 1. Order: constant first, then
    by degree and coefficients.
    """
    if not factors:
        return {}
    unit = 1
    out: dict[Poly, int] = {}
    ring = None
    for f, e in factors.items():
        ring = f.ring
        if f.is_constant:
            unit *= f.lc ** e
            continue
        if f.signum() < 0:
            f = -f
            if e % 2:
                unit = -unit
        out[f] = out.get(f, 0) + e
    result: dict[Poly, int] = {}
    if unit != 1:
        result[ring.constant(unit)] = 1
    for f in sorted(out, key=Poly.sort_key):
        result[f] = out[f]
    return result


def root_characteristic(P: Poly) -> Poly | None:
    """
    p-th root of P over GF(p), or None when some exponent is not a multiple
    of p. Coefficients stay as they are: Frobenius is the identity on GF(p).
    """
    p = P.ring.characteristic
    if p == 0:
        raise DomainMismatch("p-th roots need positive characteristic")
    terms: dict[int, int] = {}
    for e, c in P.terms():
        if e % p:
            return None
        terms[e // p] = c
    return Poly(P.ring, terms)


class SquarefreeEngine:
    def __init__(self, domain, engine: GcdEngine | None = None):
        self.domain = domain
        self.engine = engine or gcd_engine(domain)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.domain!r}, {self.engine!r})"

    def squarefree_factors(self, P: Poly) -> dict[Poly, int]:
        raise NotImplementedError

    def _yun(self, T0: Poly, normal) -> tuple[list[tuple[Poly, int]], Poly]:
        """
        One pass of Yun's loop on T0. Returns the (factor, multiplicity)
        pairs found and the residual T left when V became constant.
        """
        eng = self.engine
        T = normal(eng.gcd(T0, T0.derivative()))
        V = T0.exact_quotient(T)
        found: list[tuple[Poly, int]] = []
        k = 0
        while not V.is_constant:
            k += 1
            W = normal(eng.gcd(T, V))
            z = V.exact_quotient(W)
            V = W
            T = T.exact_quotient(V)
            if z.degree() > 0:
                found.append((normal(z), k))
        return found, T

    def is_squarefree(self, P: Poly) -> bool:
        if P.is_constant:
            return True
        return self.engine.gcd(P, P.derivative()).degree() == 0

    def squarefree_part(self, P: Poly) -> Poly:
        """Product of the distinct squarefree factors, normalized."""
        if P.is_zero:
            return P
        out = P.ring.one
        for f in self.squarefree_factors(P):
            if not f.is_constant:
                out = out * f
        return out


class SquarefreeZero(SquarefreeEngine):
    """Characteristic 0 (integer coefficients)."""

    def squarefree_factors(self, P: Poly) -> dict[Poly, int]:
        if P.is_zero:
            return {}
        if P.is_constant:
            return {P: 1}
        eng = self.engine
        factors: dict[Poly, int] = {}
        c = eng.content(P)
        if P.signum() < 0:
            c = -c
        if c != 1:
            factors[P.ring.constant(c)] = 1
            P = P.divide_scalar(c)
        found, _ = self._yun(P, eng.primitive_part)
        for z, k in found:
            factors[z] = factors.get(z, 0) + k
        return normalize_factorization(factors)


class SquarefreeFiniteField(SquarefreeEngine):
    """Characteristic p, coefficients in GF(p)."""

    def __init__(self, domain, engine: GcdEngine | None = None):
        if domain.kind is not DomainKind.MODULAR or not domain.is_field:
            raise DomainMismatch(f"characteristic p squarefree decomposition needs a prime field, got {domain!r}")
        super().__init__(domain, engine)

    def squarefree_factors(self, P: Poly) -> dict[Poly, int]:
        if P.is_zero:
            return {}
        if P.is_constant:
            return {P: 1}
        factors: dict[Poly, int] = {}
        if not P.is_monic:
            factors[P.ring.constant(P.lc)] = 1
            P = P.monic()
        p = self.domain.characteristic
        T0 = P
        e = 1
        while T0 is not None and not T0.is_constant:
            found, T = self._yun(T0, Poly.monic)
            for z, k in found:
                factors[z] = factors.get(z, 0) + e * k
            T0 = root_characteristic(T)
            e *= p
        return dict(sorted(factors.items(), key=lambda fe: fe[0].sort_key()))


@lru_cache(maxsize=None)
def squarefree_engine(domain) -> SquarefreeEngine:
    if domain.kind is DomainKind.INTEGER:
        return SquarefreeZero(domain)
    if domain.is_field:
        return SquarefreeFiniteField(domain, gcd_engine(domain))
    raise DomainMismatch(f"no squarefree decomposition over {domain!r}")
