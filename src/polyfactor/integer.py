# src/polyfactor/integer.py
"""
Factorization over ZZ: modular factorization, Hensel lifting and a bounded
search over subsets of the lifted factors (Zassenhaus).
"""

from __future__ import annotations

import logging
import random
from itertools import combinations

from polyfactor.base import FactorAbstract
from polyfactor.domain import ZZ, ModularRing
from polyfactor.errors import InvalidArgument
from polyfactor.gcd import GcdStrategy, gcd_engine
from polyfactor.hensel import lift_hensel_monic, lift_hensel_quadratic
from polyfactor.modular import FactorModular
from polyfactor.poly import Poly
from polyfactor.primes import PrimeRange, PrimeSchedule
from polyfactor.runtime import LIMIT

logger = logging.getLogger(__name__)


def factor_degrees(degrees: list[int], total: int) -> int:
    """
    Bit-set of reachable factor degrees: bit d is set when some sub-multiset
    of ``degrees`` sums to d. Bits above ``total`` are dropped.
    """
    mask = (1 << (total + 1)) - 1
    bits = 1
    for d in degrees:
        bits = (bits | (bits << d)) & mask
    return bits


def factor_bound(P: Poly) -> int:
    """
    Coefficient bound for factors of P (Mignotte): 2**deg * ||P||_2,
    scaled by |lc(P)| to cover factors carrying the leading coefficient.
    """
    return abs(P.domain.to_int(P.lc)) * (1 << P.degree()) * P.l2_norm_ceil()


def _has_degree(D: int, d: int) -> bool:
    return (D >> d) & 1 == 1


class FactorInteger(FactorAbstract):
    def __init__(self):
        super().__init__(ZZ)

    def base_factors_squarefree(self, P: Poly, rng: random.Random) -> list[Poly]:
        """
        Irreducible factors of a primitive squarefree P.

        Tries FACTORING.MODULAR_TRIALS lucky primes (the last one from the
        medium range), keeps the prime with the fewest modular factors and
        intersects the degree sets of all of them.
        """
        self._check(P)
        if P.is_zero:
            return []
        if P.is_one:
            return [P]
        if not self.domain.is_one(self.engine.content(P)):
            raise InvalidArgument(f"{P} is not primitive")
        n = P.degree()
        if n <= 1:
            return [P]

        M = factor_bound(P)
        trials = LIMIT("FACTORING.MODULAR_TRIALS")
        schedule = PrimeSchedule(LIMIT("FACTORING.PRIME_POOL"), PrimeRange.SMALL, skip=(2, 3))

        best: tuple[int, list[Poly]] | None = None
        AD = None
        for k in range(trials):
            if k == trials - 1:
                schedule.escalate(PrimeRange.MEDIUM)
            p, am = self._lucky_prime(P, schedule)
            mlist = FactorModular(am.domain).base_factors_squarefree(am.monic(), rng)
            logger.debug("p = %d: %d modular factor(s)", p, len(mlist))
            if len(mlist) <= 1:
                return [P]
            D = factor_degrees([f.degree() for f in mlist], n)
            AD = D if AD is None else AD & D
            if best is None or len(mlist) < len(best[1]):
                best = (p, mlist)

        p, mlist = best
        if AD.bit_count() <= 2:
            logger.debug("degree sets admit no proper factor")
            return [P]
        logger.debug("using p = %d with %d factor(s), %d feasible degree(s)", p, len(mlist), AD.bit_count())
        if self.domain.is_one(P.lc):
            factors = self.search_factors_monic(P, M, mlist, AD)
        else:
            factors = self.search_factors_nonmonic(P, M, mlist, AD)
        return factors

    def _lucky_prime(self, P: Poly, schedule: PrimeSchedule) -> tuple[int, Poly]:
        """
        Next prime from the schedule under which P keeps its degree and stays
        squarefree. Returns the prime and the image of P.
        """
        n = P.degree()
        while True:
            p = next(schedule)
            if P.lc % p == 0:
                continue
            dom = ModularRing(p, field=True)
            am = P.ring.with_domain(dom).convert(P)
            if am.degree() != n:
                continue
            ap = am.derivative()
            if ap.is_zero:
                continue
            if gcd_engine(dom, GcdStrategy.MODEVAL).gcd(am, ap).degree() == 0:
                return p, am
            logger.debug("unlucky prime %d", p)

    def _lift_exponent(self, p: int, M: int) -> int:
        k, pk = 1, p
        while pk <= 2 * M:
            k += 1
            pk *= p
        return k

    def search_factors_monic(self, C: Poly, M: int, F: list[Poly], D: int) -> list[Poly]:
        """
        Factor search for monic C: lift all of F to p**k > 2M once, then try
        products of subsets of the lifted factors.
        """
        F = [f for f in F if not f.is_constant]
        if len(F) <= 1:
            return [C]
        p = F[0].domain.modulus
        k = self._lift_exponent(p, M)
        lift = lift_hensel_monic(C, F, k)
        logger.debug("monic lift to %d^%d", p, k)
        R = C.ring
        mring = lift[0].ring

        factors: list[Poly] = []
        u = C
        j = 1
        while j <= len(lift) // 2:
            hit = None
            for idx in combinations(range(len(lift)), j):
                if not _has_degree(D, sum(lift[i].degree() for i in idx)):
                    continue
                mtrial = mring.one
                for i in idx:
                    mtrial = mtrial * lift[i]
                trial = self.engine.primitive_part(R.convert(mtrial))
                if u.sparse_pseudo_remainder(trial).is_zero:
                    hit = idx
                    factors.append(trial)
                    u = u.exact_quotient(trial)
                    break
            if hit is None:
                j += 1
                continue
            lift = [f for i, f in enumerate(lift) if i not in hit]
            j = 1
        if not u.is_one:
            factors.append(u)
        return factors

    def search_factors_nonmonic(self, C: Poly, M: int, F: list[Poly], D: int) -> list[Poly]:
        """
        Factor search for non-monic C: each candidate product is lifted with
        the quadratic Hensel lift against its cofactor in the current
        remaining polynomial.
        """
        F = [f for f in F if not f.is_constant]
        if len(F) <= 1:
            return [C]
        mring = F[0].ring
        factors: list[Poly] = []
        u = C
        um = mring.convert(u)
        mlist = list(F)
        j = 1
        while j <= len(mlist) // 2:
            hit = None
            for idx in combinations(range(len(mlist)), j):
                if not _has_degree(D, sum(mlist[i].degree() for i in idx)):
                    continue
                trial = mring.constant(um.lc)
                for i in idx:
                    trial = trial * mlist[i]
                cofactor = um.exact_quotient(trial)
                approx = lift_hensel_quadratic(u, M, trial, cofactor)
                itrial = self.engine.primitive_part(approx.A)
                if u.sparse_pseudo_remainder(itrial).is_zero:
                    hit = idx
                    factors.append(itrial)
                    u = u.exact_quotient(itrial)
                    um = mring.convert(u)
                    break
            if hit is None:
                j += 1
                continue
            mlist = [f for i, f in enumerate(mlist) if i not in hit]
            j = 1
        if not u.is_one:
            factors.append(u)
        return factors
