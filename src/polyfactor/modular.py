# src/polyfactor/modular.py
"""
Factorization over a prime field GF(p).

Distinct-degree factorization splits a monic squarefree polynomial into
blocks whose irreducible factors share one degree; equal-degree splitting
(Cantor-Zassenhaus) breaks each block apart with random splitting
polynomials drawn from an injected ``random.Random``.
"""

from __future__ import annotations

import logging
import random

from polyfactor.base import FactorAbstract
from polyfactor.domain import DomainKind
from polyfactor.errors import DomainMismatch, InvalidArgument, ResourceExhaustion
from polyfactor.gcd import GcdStrategy, gcd_engine
from polyfactor.poly import Poly
from polyfactor.runtime import LIMIT

logger = logging.getLogger(__name__)


class FactorModular(FactorAbstract):
    def __init__(self, domain):
        if domain.kind is not DomainKind.MODULAR or not domain.is_field:
            raise DomainMismatch(f"modular factorization needs a prime field, got {domain!r}")
        super().__init__(domain)
        self.mod_engine = gcd_engine(domain, GcdStrategy.MODEVAL)

    def distinct_degree_factors(self, P: Poly) -> dict[int, Poly]:
        """
        {d: product of all irreducible factors of degree d} for monic squarefree P.
        """
        self._check(P)
        if P.is_zero:
            return {}
        q = self.domain.modulus
        x = P.ring.gen
        h = x
        f = P
        facs: dict[int, Poly] = {}
        d = 0
        while d + 1 <= f.degree() // 2:
            d += 1
            h = h.pow_mod(q, f)
            g = self.mod_engine.gcd(h - x, f)
            if not g.is_one:
                facs[d] = g
                f = f.exact_quotient(g)
                h = h % f
        if not f.is_constant:
            facs[f.degree()] = f
        return facs

    def equal_degree_factors(self, P: Poly, d: int, rng: random.Random) -> list[Poly]:
        """Split P, a product of distinct monic irreducibles of degree d."""
        self._check(P)
        if P.is_zero:
            return []
        if P.degree() == d:
            return [P]
        if P.degree() % d:
            raise InvalidArgument(f"degree {P.degree()} is not a multiple of {d}")
        g = self._split(P, d, rng)
        return self.equal_degree_factors(g, d, rng) + self.equal_degree_factors(P.exact_quotient(g), d, rng)

    def _split(self, f: Poly, d: int, rng: random.Random) -> Poly:
        """Proper monic factor of f, retried up to FACTORING.SPLIT_TRIALS times."""
        R = f.ring
        p = self.domain.modulus
        n = f.degree()
        one = R.one
        trials = LIMIT("FACTORING.SPLIT_TRIALS")
        exponent = (p ** d) >> 1
        for _ in range(trials):
            r = R.random(rng, 2 * d - 1)
            if r.degree() >= n:
                r = r % f
            if r.is_constant:
                continue
            if p == 2:
                # trace map t + t^2 + ... + t^(2^(d-1))
                h = r
                for _ in range(1, d):
                    h = (r + h * h) % f
            else:
                h = r.pow_mod(exponent, f) - one
            g = self.mod_engine.gcd(h, f)
            if 0 < g.degree() < n:
                return g
        raise ResourceExhaustion(f"no splitting polynomial for degree {d} block after {trials} trials")

    def base_factors_squarefree(self, P: Poly, rng: random.Random) -> list[Poly]:
        """Sorted monic irreducible factors of a monic squarefree P."""
        self._check(P)
        if P.is_zero:
            return []
        if P.is_one:
            return [P]
        if not P.is_monic:
            raise InvalidArgument(f"leading coefficient of {P} is not 1")
        factors: list[Poly] = []
        for d, block in self.distinct_degree_factors(P).items():
            found = self.equal_degree_factors(block, d, rng)
            logger.debug("GF(%d): degree %d block split into %d factor(s)", self.domain.modulus, d, len(found))
            factors.extend(found)
        return sorted((f.monic() for f in factors), key=Poly.sort_key)
