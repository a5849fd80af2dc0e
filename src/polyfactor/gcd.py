# src/polyfactor/gcd.py
"""
Polynomial gcd engines.

    PRIMITIVE     pseudo-remainder sequence, content removed at every step
    MONIC         remainder sequence over a field, each remainder made monic
    SUBRESULTANT  subresultant PRS (Collins / Brown correction factors)
    MODEVAL       MONIC restricted to finite fields; used inside modular factoring
    MODULAR       multi-modular gcd over ZZ with CRT reconstruction

``gcd_engine(domain, strategy)`` picks one from the domain kind.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from sympy.ntheory.modular import crt

from polyfactor.domain import DomainKind, ModularRing
from polyfactor.errors import DomainMismatch, InvalidArgument
from polyfactor.poly import Poly
from polyfactor.primes import PrimeList, PrimeRange
from polyfactor.runtime import LIMIT

logger = logging.getLogger(__name__)


class GcdStrategy(Enum):
    PRIMITIVE = "primitive"
    MONIC = "monic"
    SUBRESULTANT = "subresultant"
    MODEVAL = "modeval"
    MODULAR = "modular"


class GcdEngine:
    """Common part of all engines: content, primitive part, lcm, argument checks."""

    strategy: GcdStrategy

    def __init__(self, domain):
        self.domain = domain

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.domain!r})"

    # --- coefficient level ---

    def content(self, P: Poly) -> int:
        """
        gcd of the coefficients. 0 for the zero polynomial, non-negative over
        ZZ, and the leading coefficient over a field.
        """
        if P.is_zero:
            return 0
        dom = self.domain
        if dom.is_field:
            return P.lc
        g = 0
        for _, c in P.terms():
            g = dom.gcd(g, c)
            if dom.is_one(g):
                break
        return g

    def primitive_part(self, P: Poly) -> Poly:
        if P.is_zero:
            return P
        c = self.content(P)
        if self.domain.is_one(c):
            return P
        return P.divide_scalar(c)

    # --- polynomial level ---

    def _check(self, P: Poly, S: Poly) -> None:
        if P.domain != self.domain or S.domain != self.domain:
            raise InvalidArgument(f"{self!r} cannot handle {P.ring!r} and {S.ring!r}")
        if P.ring != S.ring:
            raise InvalidArgument(f"ring mismatch: {P.ring!r} vs {S.ring!r}")

    def gcd(self, P: Poly, S: Poly) -> Poly:
        self._check(P, S)
        if S.is_zero:
            return P
        if P.is_zero:
            return S
        r, q = (P, S) if P.degree() >= S.degree() else (S, P)
        dom = self.domain
        c = dom.gcd(self.content(r), self.content(q))
        r = self.primitive_part(r)
        q = self.primitive_part(q)
        if r.is_constant or q.is_constant:
            return self._finish(P.ring.one, c)
        return self._finish(self._prs(r, q), c)

    def _finish(self, g: Poly, c: int) -> Poly:
        if self.domain.is_field:
            return g.monic()
        g = self.primitive_part(g).abs()
        return g if self.domain.is_one(c) else g.scale(c)

    def _prs(self, r: Poly, q: Poly) -> Poly:
        """gcd of two primitive polynomials with deg r >= deg q >= 1."""
        raise NotImplementedError

    def lcm(self, P: Poly, S: Poly) -> Poly:
        self._check(P, S)
        if P.is_zero or S.is_zero:
            return P.ring.zero
        g = self.gcd(P, S)
        L = (P * S).exact_quotient(g)
        return L.monic() if self.domain.is_field else L.abs()

    def coprime(self, P: Poly, S: Poly) -> bool:
        """True when gcd(P, S) is a unit."""
        g = self.gcd(P, S)
        return g.is_constant and not g.is_zero and self.domain.is_unit(g.lc)


class PrimitivePrs(GcdEngine):
    strategy = GcdStrategy.PRIMITIVE

    def _prs(self, r: Poly, q: Poly) -> Poly:
        while True:
            x = r.pseudo_remainder(q)
            if x.is_zero:
                return q
            if x.is_constant:
                return r.ring.one
            r, q = q, self.primitive_part(x)


class MonicPrs(GcdEngine):
    strategy = GcdStrategy.MONIC

    def __init__(self, domain):
        if not domain.is_field:
            raise DomainMismatch(f"monic remainder sequence needs a field, got {domain!r}")
        super().__init__(domain)

    def _prs(self, r: Poly, q: Poly) -> Poly:
        r, q = r.monic(), q.monic()
        while True:
            x = r % q
            if x.is_zero:
                return q
            if x.is_constant:
                return r.ring.one
            r, q = q, x.monic()

    def egcd(self, a: Poly, b: Poly) -> tuple[Poly, Poly, Poly]:
        """Return (g, s, t) with s*a + t*b == g and g monic."""
        self._check(a, b)
        R = a.ring
        dom = self.domain
        if b.is_zero:
            if a.is_zero:
                return R.zero, R.zero, R.zero
            inv = dom.inverse(a.lc)
            return a.scale(inv), R.constant(inv), R.zero
        r0, r1 = a, b
        s0, s1 = R.one, R.zero
        t0, t1 = R.zero, R.one
        while not r1.is_zero:
            quo, rem = r0.quo_rem(r1)
            r0, r1 = r1, rem
            s0, s1 = s1, s0 - quo * s1
            t0, t1 = t1, t0 - quo * t1
        inv = dom.inverse(r0.lc)
        return r0.scale(inv), s0.scale(inv), t0.scale(inv)


class ModEvalGcd(MonicPrs):
    strategy = GcdStrategy.MODEVAL

    def __init__(self, domain):
        if domain.kind is not DomainKind.MODULAR or not domain.is_field:
            raise DomainMismatch(f"modular evaluation gcd needs a prime field, got {domain!r}")
        super().__init__(domain)


class SubresultantPrs(GcdEngine):
    strategy = GcdStrategy.SUBRESULTANT

    def _prs(self, r: Poly, q: Poly) -> Poly:
        dom = self.domain
        g = h = dom.one
        while True:
            delta = r.degree() - q.degree()
            x = r.pseudo_remainder(q)
            if x.is_zero:
                return q
            if x.is_constant:
                return r.ring.one
            r = q
            q = x.divide_scalar(dom.mul(g, dom.pow(h, delta)))
            g = r.lc
            h = _next_h(dom, g, h, delta)

    def resultant(self, P: Poly, S: Poly) -> int:
        """Resultant res(P, S) by the subresultant algorithm."""
        self._check(P, S)
        dom = self.domain
        if P.is_zero or S.is_zero:
            return dom.zero
        A, B = P, S
        s = 1
        if A.degree() < B.degree():
            A, B = B, A
            if A.degree() % 2 and B.degree() % 2:
                s = -1
        a = self.content(A)
        b = self.content(B)
        A = self.primitive_part(A)
        B = self.primitive_part(B)
        t = dom.mul(dom.pow(a, B.degree()), dom.pow(b, A.degree()))
        if B.degree() == 0:
            return dom.mul(t, dom.pow(B.lc, A.degree()))
        g = h = dom.one
        while True:
            dA, dB = A.degree(), B.degree()
            delta = dA - dB
            if dA % 2 and dB % 2:
                s = -s
            R = A.pseudo_remainder(B)
            A = B
            if R.is_zero:
                return dom.zero
            B = R.divide_scalar(dom.mul(g, dom.pow(h, delta)))
            g = A.lc
            h = _next_h(dom, g, h, delta)
            if B.degree() == 0:
                break
        dA = A.degree()
        h = _next_h(dom, B.lc, h, dA)
        res = dom.mul(t, h)
        return res if s > 0 else dom.neg(res)

    def discriminant(self, P: Poly) -> int:
        """(-1)^(n(n-1)/2) * res(P, P') / lc(P)."""
        n = P.degree()
        if n < 1:
            raise InvalidArgument("discriminant needs a non-constant polynomial")
        dom = self.domain
        r = self.resultant(P, P.derivative())
        d = dom.divide(r, P.lc)
        return dom.neg(d) if (n * (n - 1) // 2) % 2 else d


def _next_h(dom, g: int, h: int, delta: int) -> int:
    """h^(1 - delta) * g^delta, an exact quotient."""
    if delta == 0:
        return h
    if delta == 1:
        return g
    return dom.divide(dom.pow(g, delta), dom.pow(h, delta - 1))


class ModularGcd(GcdEngine):
    """
    gcd over ZZ from gcds modulo a stream of word-sized primes.

    Each image is the monic gcd mod p scaled by gcd(lc P, lc S); images of
    lower degree restart the reconstruction, images of higher degree come from
    unlucky primes and are dropped. Once the CRT candidate stops changing it
    is accepted if it divides both inputs. At most FACTORING.GCD_PRIMES primes
    are used, after which the subresultant sequence answers.
    """

    strategy = GcdStrategy.MODULAR

    def __init__(self, domain):
        if domain.kind is not DomainKind.INTEGER:
            raise DomainMismatch(f"modular gcd is defined over ZZ, got {domain!r}")
        super().__init__(domain)

    def _prs(self, r: Poly, q: Poly) -> Poly:
        R = r.ring
        lcg = self.domain.gcd(r.lc, q.lc)
        limit = LIMIT("FACTORING.GCD_PRIMES")

        H: dict[int, int] = {}
        modulus = 1
        deg = None
        candidate = None
        for used, p in enumerate(PrimeList(PrimeRange.MEDIUM)):
            if used >= limit:
                break
            if r.lc % p == 0 or q.lc % p == 0:
                continue
            Rp = R.with_domain(ModularRing(p, field=True))
            gp = ModEvalGcd(Rp.domain).gcd(Rp.convert(r), Rp.convert(q))
            d = gp.degree()
            if d == 0:
                return R.one
            gp = gp.scale(lcg)
            if deg is not None and d > deg:
                continue
            if deg is None or d < deg:
                deg = d
                modulus = p
                H = {e: Rp.domain.symmetric(c) for e, c in gp.terms()}
                candidate = None
                continue
            for e in range(d + 1):
                v, _ = crt([modulus, p], [H.get(e, 0), gp.coefficient(e)], symmetric=True)
                H[e] = int(v)
            modulus *= p
            G = R.from_dict(H)
            if G == candidate:
                G = self.primitive_part(G)
                if r.sparse_pseudo_remainder(G).is_zero and q.sparse_pseudo_remainder(G).is_zero:
                    return G
            candidate = G
        logger.debug("modular gcd: prime budget of %d spent, using subresultant PRS", limit)
        return SubresultantPrs(self.domain)._prs(r, q)


_ENGINES = {
    GcdStrategy.PRIMITIVE: PrimitivePrs,
    GcdStrategy.MONIC: MonicPrs,
    GcdStrategy.SUBRESULTANT: SubresultantPrs,
    GcdStrategy.MODEVAL: ModEvalGcd,
    GcdStrategy.MODULAR: ModularGcd,
}


@lru_cache(maxsize=None)
def gcd_engine(domain, strategy: GcdStrategy | None = None) -> GcdEngine:
    """Engine for ``domain``; MODULAR over ZZ, MONIC over fields, PRIMITIVE otherwise."""
    if strategy is None:
        if domain.kind is DomainKind.INTEGER:
            strategy = GcdStrategy.MODULAR
        elif domain.is_field:
            strategy = GcdStrategy.MONIC
        else:
            strategy = GcdStrategy.PRIMITIVE
    return _ENGINES[strategy](domain)
