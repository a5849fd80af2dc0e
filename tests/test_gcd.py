# tests/test_gcd.py
"""
Tests for the gcd engines (all strategies), resultants and discriminants.
"""

from __future__ import annotations

import pytest

from polyfactor.domain import GF, ZZ, ModularRing
from polyfactor.errors import DomainMismatch, InvalidArgument
from polyfactor.gcd import GcdStrategy, gcd_engine
from polyfactor.poly import PolyRing
from polyfactor.runtime import APPLY

R = PolyRing(ZZ)
x = R.gen
R7 = PolyRing(GF(7))
y = R7.gen

INTEGER_STRATEGIES = [GcdStrategy.PRIMITIVE, GcdStrategy.SUBRESULTANT, GcdStrategy.MODULAR]
FIELD_STRATEGIES = [GcdStrategy.PRIMITIVE, GcdStrategy.MONIC, GcdStrategy.SUBRESULTANT, GcdStrategy.MODEVAL]

# (a, b, expected gcd) over ZZ, expected in normal form (positive leading coefficient)
GCD_CASES = [
    (x**2 - 1, x**2 - 2 * x + 1, x - 1),
    (6 * x**2 - 6, 4 * x - 4, 2 * x - 2),
    ((x + 1) ** 3 * (x - 2) * (3 * x + 5), (x + 1) ** 2 * (x - 2) ** 2 * (2 * x - 7), (x + 1) ** 2 * (x - 2)),
    (x**4 + 1, x**3 + x + 1, R.one),
    (-(x**2) + 1, x + 1, x + 1),
    ((2 * x + 3) ** 2 * (x**2 + 7), (2 * x + 3) * (5 * x**3 - 1), 2 * x + 3),
]
GCD_IDS = ["example-6", "with-content", "repeated", "coprime", "negative", "non-monic"]


# ---------- integer gcd -------------------------------------------------------------


@pytest.mark.parametrize("strategy", INTEGER_STRATEGIES, ids=lambda s: s.value)
@pytest.mark.parametrize("a, b, expected", GCD_CASES, ids=GCD_IDS)
def test_integer_gcd(strategy, a, b, expected):
    eng = gcd_engine(ZZ, strategy)
    assert eng.gcd(a, b) == expected
    assert eng.gcd(b, a) == expected


@pytest.mark.parametrize("strategy", INTEGER_STRATEGIES, ids=lambda s: s.value)
def test_gcd_with_zero(strategy):
    eng = gcd_engine(ZZ, strategy)
    S = 3 * x**2 + 1
    assert eng.gcd(R.zero, S) == S
    assert eng.gcd(S, R.zero) == S


def test_modular_gcd_falls_back_when_prime_budget_is_spent():
    APPLY({"FACTORING": {"GCD_PRIMES": 1}})
    eng = gcd_engine(ZZ, GcdStrategy.MODULAR)
    a, b, expected = GCD_CASES[2]
    assert eng.gcd(a, b) == expected


def test_gcd_ring_mismatch():
    with pytest.raises(InvalidArgument):
        gcd_engine(ZZ).gcd(x + 1, y + 1)


# ---------- content / primitive part / lcm ------------------------------------------


def test_content_and_primitive_part():
    eng = gcd_engine(ZZ)
    assert eng.content(6 * x**2 + 4) == 2
    assert eng.content(-6 * x**2 - 4) == 2
    assert eng.content(R.zero) == 0
    assert eng.primitive_part(6 * x**2 + 4) == 3 * x**2 + 2
    assert eng.primitive_part(-6 * x**2 - 4) == -3 * x**2 - 2


def test_content_over_field_is_leading_coefficient():
    eng = gcd_engine(GF(7))
    assert eng.content(3 * y + 1) == 3
    assert eng.primitive_part(3 * y + 1) == y + 5


def test_lcm_and_coprime():
    eng = gcd_engine(ZZ)
    assert eng.lcm(x**2 - 1, x**2 - 2 * x + 1) == (x - 1) ** 2 * (x + 1)
    assert eng.lcm(R.zero, x) == R.zero
    assert eng.coprime(x**2 + 1, x - 1)
    assert not eng.coprime(x**2 - 1, x - 1)


# ---------- field gcd -----------------------------------------------------------------


@pytest.mark.parametrize("strategy", FIELD_STRATEGIES, ids=lambda s: s.value)
def test_field_gcd(strategy):
    eng = gcd_engine(GF(7), strategy)
    assert eng.gcd(y**2 - 1, y**2 - 2 * y + 1) == y - 1
    assert eng.gcd(3 * (y + 2) * (y**2 + 1), (y + 2) * (y - 3)) == y + 2


def test_egcd():
    eng = gcd_engine(GF(7), GcdStrategy.MONIC)
    a = (y + 1) * (y**2 + 3)
    b = (y + 1) * (y + 4)
    g, s, t = eng.egcd(a, b)
    assert g == y + 1
    assert s * a + t * b == g


def test_egcd_coprime_gives_one():
    eng = gcd_engine(GF(7), GcdStrategy.MONIC)
    g, s, t = eng.egcd(y + 1, y + 2)
    assert g == R7.one
    assert s * (y + 1) + t * (y + 2) == R7.one


# ---------- resultant / discriminant -------------------------------------------------


@pytest.mark.parametrize(
    "a, b, res",
    [
        (x**2 - 1, x - 2, 3),
        (x - 2, x**2 - 1, 3),
        (x**2 + 1, x**2 - 1, 4),
        (x**2 - 1, x - 1, 0),
        (x**2 + 1, 2 * x, 4),
        (x**3 + 1, R.constant(5), 125),
    ],
    ids=["linear", "swapped", "equal-degree", "common-root", "content", "constant"],
)
def test_resultant(a, b, res):
    assert gcd_engine(ZZ, GcdStrategy.SUBRESULTANT).resultant(a, b) == res


@pytest.mark.parametrize(
    "p, disc",
    [
        (x**2 - 3 * x + 2, 1),
        (x**2 + 1, -4),
        (x**3 - x, 4),
        (x**2 - 2 * x + 1, 0),
    ],
    ids=["split", "gaussian", "cubic", "double-root"],
)
def test_discriminant(p, disc):
    assert gcd_engine(ZZ, GcdStrategy.SUBRESULTANT).discriminant(p) == disc


# ---------- factory ------------------------------------------------------------------


def test_factory_defaults():
    assert gcd_engine(ZZ).strategy is GcdStrategy.MODULAR
    assert gcd_engine(GF(7)).strategy is GcdStrategy.MONIC
    assert gcd_engine(ModularRing(9)).strategy is GcdStrategy.PRIMITIVE


@pytest.mark.parametrize(
    "domain, strategy",
    [
        (ZZ, GcdStrategy.MONIC),
        (ZZ, GcdStrategy.MODEVAL),
        (GF(7), GcdStrategy.MODULAR),
        (ModularRing(9), GcdStrategy.MODEVAL),
    ],
    ids=["zz-monic", "zz-modeval", "gf-modular", "z9-modeval"],
)
def test_factory_rejects_unsupported_combinations(domain, strategy):
    with pytest.raises(DomainMismatch):
        gcd_engine(domain, strategy)
