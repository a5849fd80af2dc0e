# src/polyfactor/hensel.py
"""
Hensel lifting of modular factorizations.

Two lifts are provided:

* ``lift_hensel_monic`` lifts C == prod f_i (mod p) for a monic integer C to
  precision p**k, one power of p per step (linear lifting with a telescoped
  Bezout solution).
* ``lift_hensel_quadratic`` lifts a two-factor split A*B == C (mod p) of a
  possibly non-monic C, squaring the modulus at every step and lifting the
  Bezout pair along with the factors.

Every lift is checked against the identity it promises; a mismatch raises
LiftVerificationFailure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from polyfactor.domain import ZZ, DomainKind, ModularRing
from polyfactor.errors import DomainMismatch, InvalidArgument, LiftVerificationFailure
from polyfactor.gcd import GcdStrategy, gcd_engine
from polyfactor.poly import Poly, PolyRing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HenselApprox:
    """Integer lifts A, B and their images Am, Bm modulo the final modulus."""
    A: Poly
    B: Poly
    Am: Poly
    Bm: Poly


# --- helpers -----------------------------------------------------------------

def _prime_of(P: Poly) -> int:
    dom = P.domain
    if dom.kind is not DomainKind.MODULAR or not dom.is_field:
        raise DomainMismatch(f"lifting starts from a prime field, got {dom!r}")
    return dom.modulus


def _integer(P: Poly) -> Poly:
    return P.ring.with_domain(ZZ).convert(P)


def _modular(P: Poly, m: int, p: int) -> Poly:
    """Image of P in (ZZ/m)[x]; m is a power of the prime p."""
    dom = ModularRing(m, field=(m == p))
    return P.ring.with_domain(dom).convert(P)


def _egcd(A: Poly, B: Poly) -> tuple[Poly, Poly]:
    """(S, T) with S*A + T*B == 1 over GF(p); DomainMismatch when A, B are not coprime."""
    g, S, T = gcd_engine(A.domain, GcdStrategy.MONIC).egcd(A, B)
    if not g.is_one:
        raise DomainMismatch(f"lifting needs coprime factors, gcd is {g}")
    return S, T


def _product(polys: list[Poly], ring: PolyRing) -> Poly:
    out = ring.one
    for f in polys:
        out = out * f
    return out


def _cofactors(polys: list[Poly], ring: PolyRing) -> list[Poly]:
    """[prod_{j != i} polys[j] for each i]."""
    n = len(polys)
    prefix = [ring.one]
    for f in polys:
        prefix.append(prefix[-1] * f)
    suffix = [ring.one]
    for f in reversed(polys):
        suffix.append(suffix[-1] * f)
    suffix.reverse()
    return [prefix[i] * suffix[i + 1] for i in range(n)]


def _reduce_to(P: Poly, m: int) -> Poly:
    """Integer polynomial with coefficients reduced symmetrically modulo m."""
    half = m // 2
    terms = {}
    for e, c in P.terms():
        c %= m
        terms[e] = c - m if c > half else c
    return Poly(P.ring, terms)


def _div_exact(E: Poly, m: int, what: str) -> Poly:
    for _, c in E.terms():
        if c % m:
            raise LiftVerificationFailure(f"{what}: error term is not divisible by {m}")
    return Poly(E.ring, {e: c // m for e, c in E.terms()})


# --- soundness checks --------------------------------------------------------

def is_extended_euclidean_lift(A: Poly, B: Poly, S: Poly, T: Poly, m: int) -> bool:
    """S*A + T*B == 1 (mod m), all arguments read as integer polynomials."""
    A, B, S, T = (_integer(f) for f in (A, B, S, T))
    return _reduce_to(S * A + T * B - 1, m).is_zero


def is_diophant_lift(F: list[Poly], S: list[Poly], m: int) -> bool:
    """sum_i S[i] * prod_{j != i} F[j] == 1 (mod m)."""
    if len(F) != len(S):
        return False
    R = F[0].ring.with_domain(ZZ)
    Fi = [_integer(f) for f in F]
    total = R.zero
    for s, q in zip(S, _cofactors(Fi, R), strict=True):
        total = total + _integer(s) * q
    return _reduce_to(total - 1, m).is_zero


def is_hensel_lift(C: Poly, F: list[Poly], m: int) -> bool:
    """prod F == C (mod m)."""
    R = C.ring.with_domain(ZZ)
    prod = _product([_integer(f) for f in F], R)
    return _reduce_to(_integer(C) - prod, m).is_zero


# --- Bezout / Diophantine lifting -------------------------------------------

def _diophant_mod_p(F: list[Poly]) -> list[Poly]:
    """
    Telescoped solution of sum_i s_i * prod_{j != i} f_j == 1 over GF(p),
    with deg s_i < deg f_i for all but possibly the last entry.
    """
    R = F[0].ring
    n = len(F)
    if n == 1:
        return [R.one]
    tails = [R.one] * n
    for i in range(n - 2, -1, -1):
        tails[i] = tails[i + 1] * F[i + 1]
    target = R.one
    S: list[Poly] = []
    for i in range(n - 1):
        f, rest = F[i], tails[i]
        u, v = _egcd(f, rest)
        # u*f + v*rest == 1  =>  s_i = v*target mod f, next target = (target - s_i*rest) / f
        quo, s = (v * target).quo_rem(f)
        S.append(s)
        target = u * target + quo * rest
    S.append(target)
    return S


def lift_diophant(F: list[Poly], k: int) -> list[Poly]:
    """
    Lift the Bezout-type relation sum_i s_i * prod_{j != i} f_j == 1 from
    GF(p) to (ZZ/p**k). F are pairwise coprime polynomials over GF(p).
    """
    if not F:
        raise InvalidArgument("empty factor list")
    if k < 1:
        raise InvalidArgument(f"lifting exponent must be >= 1, got {k}")
    p = _prime_of(F[0])
    S0 = _diophant_mod_p(F)
    if not is_diophant_lift(F, S0, p):
        raise LiftVerificationFailure("Bezout solution mod p does not satisfy the identity")

    R = F[0].ring.with_domain(ZZ)
    Fi = [_integer(f) for f in F]
    Q = _cofactors(Fi, R)
    S = [_integer(s) for s in S0]
    Rp = F[0].ring
    pi = p
    for _ in range(1, k):
        total = R.zero
        for s, q in zip(S, Q, strict=True):
            total = total + s * q
        E = R.one - total
        if E.is_zero:
            break
        e = Rp.convert(_div_exact(E, pi, "diophant lift"))
        for i, f in enumerate(F):
            d = (S0[i] * e) % f
            S[i] = S[i] + _integer(d).scale(pi)
        pi *= p
    m = p ** k
    out = [_modular(s, m, p) for s in S]
    if not is_diophant_lift(F, out, m):
        raise LiftVerificationFailure(f"diophant lift to modulus {p}^{k} failed")
    return out


def lift_extended_euclidean(A: Poly, B: Poly, k: int) -> tuple[Poly, Poly]:
    """(S, T) over ZZ/p**k with S*A + T*B == 1 (mod p**k); A, B coprime over GF(p)."""
    # with F = [A, B] the cofactor of A is B and vice versa
    T, S = lift_diophant([A, B], k)
    m = _prime_of(A) ** k
    if not is_extended_euclidean_lift(A, B, S, T, m):
        raise LiftVerificationFailure(f"extended Euclidean lift to modulus {m} failed")
    return S, T


# --- factor lifting ----------------------------------------------------------

def lift_hensel_monic(C: Poly, F: list[Poly], k: int) -> list[Poly]:
    """
    Lift C == prod F (mod p) to C == prod G (mod p**k).

    C is a monic integer polynomial, F a list of pairwise coprime monic
    polynomials over GF(p). A constant entry in F is ignored. The result lives
    in (ZZ/p**k)[x].
    """
    if C.domain.kind is not DomainKind.INTEGER:
        raise InvalidArgument(f"lift target must have integer coefficients, got {C.ring!r}")
    if k < 1:
        raise InvalidArgument(f"lifting exponent must be >= 1, got {k}")
    F = [f for f in F if not f.is_constant]
    if not F:
        raise InvalidArgument("no factors to lift")
    p = _prime_of(F[0])
    if not C.is_monic or any(not f.is_monic for f in F):
        raise InvalidArgument("monic lifting needs a monic target and monic factors")
    if not is_hensel_lift(C, F, p):
        raise LiftVerificationFailure("factors do not multiply to the target mod p")
    if len(F) == 1:
        return [_modular(C, p ** k, p)]

    S = _diophant_mod_p(F)
    if not is_diophant_lift(F, S, p):
        raise LiftVerificationFailure("Bezout solution mod p does not satisfy the identity")

    Rp = F[0].ring
    G = [_integer(f) for f in F]
    pi = p
    for step in range(1, k):
        E = C - _product(G, C.ring)
        if E.is_zero:
            logger.debug("monic lift exact after %d step(s)", step)
            break
        e = Rp.convert(_div_exact(E, pi, "monic lift"))
        for i, f in enumerate(F):
            d = (S[i] * e) % f
            G[i] = G[i] + _integer(d).scale(pi)
        pi *= p

    m = p ** k
    out = [_modular(g, m, p) for g in G]
    if not is_hensel_lift(C, out, m):
        raise LiftVerificationFailure(f"monic lift to modulus {p}^{k} failed")
    return out


def lift_hensel_quadratic(C: Poly, M: int, A: Poly, B: Poly) -> HenselApprox:
    """
    Quadratic lift of A*B == C (mod p) until the modulus exceeds 2*M.

    C is an integer polynomial with leading coefficient c prime to p. The lift
    solves c*C == A'*B' with lc(A') == lc(B') == c, so A' and B' carry the
    factor c that a true factor of C may lack; take primitive parts to recover
    the integer factors. If the error vanishes early the loop stops there.
    """
    if C.domain.kind is not DomainKind.INTEGER:
        raise InvalidArgument(f"lift target must have integer coefficients, got {C.ring!r}")
    if C.is_zero or A.is_zero or B.is_zero:
        raise InvalidArgument("zero polynomial in quadratic lift")
    p = _prime_of(A)
    if B.domain != A.domain:
        raise InvalidArgument(f"factors live in different rings: {A.ring!r}, {B.ring!r}")
    dom = A.domain
    c = C.lc
    cp = dom.from_int(c)
    if dom.is_zero(cp):
        raise DomainMismatch(f"leading coefficient {c} vanishes modulo {p}")
    if A.degree() + B.degree() != C.degree() or not is_hensel_lift(C, [A, B], p):
        raise LiftVerificationFailure("A*B does not reproduce C mod p")

    S, T = _egcd(A, B)
    # scale so both factors have leading coefficient c mod p
    alpha = dom.mul(cp, dom.inverse(A.lc))
    beta = dom.mul(cp, dom.inverse(B.lc))
    A0 = A.scale(alpha)
    B0 = B.scale(beta)
    S0 = S.scale(dom.inverse(alpha))
    T0 = T.scale(dom.inverse(beta))

    CC = C.scale(c)
    Ai = _with_lc(_integer(A0), c)
    Bi = _with_lc(_integer(B0), c)
    Si = _integer(S0)
    Ti = _integer(T0)

    q = p
    bound = 2 * M
    while q <= bound:
        E = CC - Ai * Bi
        if E.is_zero:
            logger.debug("quadratic lift exact at modulus %d", q)
            Rq = C.ring.with_domain(ModularRing(q, field=(q == p)))
            return HenselApprox(Ai, Bi, Rq.convert(Ai), Rq.convert(Bi))
        Rq = C.ring.with_domain(ModularRing(q, field=(q == p)))
        e = Rq.convert(_div_exact(E, q, "quadratic lift"))
        Aq, Bq, Sq, Tq = (Rq.convert(f) for f in (Ai, Bi, Si, Ti))
        # dA*B + dB*A == e (mod q), deg dA < deg A
        quo, dA = (e * Tq).quo_rem(Aq)
        dB = e * Sq + quo * Bq
        Ai = Ai + _integer(dA).scale(q)
        Bi = Bi + _integer(dB).scale(q)

        # Bezout pair for the new factors, now modulo q**2
        err = C.ring.one - Si * Ai - Ti * Bi
        if not err.is_zero:
            f = Rq.convert(_div_exact(err, q, "Bezout lift"))
            Aq, Bq = Rq.convert(Ai), Rq.convert(Bi)
            quo, dT = (f * Tq).quo_rem(Aq)
            dS = f * Sq + quo * Bq
            Si = Si + _integer(dS).scale(q)
            Ti = Ti + _integer(dT).scale(q)
        q = q * q
        logger.debug("quadratic lift: modulus now %d bits", q.bit_length())

    Ai = _reduce_to(Ai, q)
    Bi = _reduce_to(Bi, q)
    if not _reduce_to(CC - Ai * Bi, q).is_zero:
        raise LiftVerificationFailure(f"quadratic lift to modulus {q} failed")
    Rq = C.ring.with_domain(ModularRing(q, field=(q == p)))
    return HenselApprox(Ai, Bi, Rq.convert(Ai), Rq.convert(Bi))


def _with_lc(P: Poly, c: int) -> Poly:
    """P with its leading coefficient replaced by c."""
    terms = P.as_dict()
    terms[P.degree()] = c
    return Poly(P.ring, terms)
