# tests/test_modular.py
"""
Tests for factorization over GF(p): distinct-degree and equal-degree splitting.
"""

from __future__ import annotations

import random

import pytest

from polyfactor.domain import GF, ZZ
from polyfactor.errors import DomainMismatch, InvalidArgument, ResourceExhaustion
from polyfactor.modular import FactorModular
from polyfactor.poly import PolyRing
from polyfactor.runtime import APPLY


class ZeroRandom(random.Random):
    """Generator that only ever produces zero residues."""

    def randrange(self, *args, **kwargs):
        return 0


def _ring(p):
    R = PolyRing(GF(p))
    return R, R.gen


def _rebuild(factors, ring):
    out = ring.one
    for f, e in factors.items():
        out = out * f**e
    return out


# ---------- distinct degree -------------------------------------------------------


def test_distinct_degree_gf3():
    R, x = _ring(3)
    P = (x**2 + 1) * (x + 1) * (x + 2)
    ddf = FactorModular(GF(3)).distinct_degree_factors(P)
    assert ddf == {1: x**2 + 2, 2: x**2 + 1}


def test_distinct_degree_gf2_blocks():
    R, x = _ring(2)
    cubics = (x**3 + x + 1) * (x**3 + x**2 + 1)
    P = (x**2 + x + 1) * cubics
    ddf = FactorModular(GF(2)).distinct_degree_factors(P)
    assert ddf == {2: x**2 + x + 1, 3: cubics}


def test_distinct_degree_irreducible():
    R, x = _ring(5)
    assert FactorModular(GF(5)).distinct_degree_factors(x**2 + 2) == {2: x**2 + 2}


# ---------- equal degree ----------------------------------------------------------


def test_equal_degree_linear_gf5(rng):
    R, x = _ring(5)
    P = (x + 1) * (x + 2) * (x + 4)
    found = FactorModular(GF(5)).equal_degree_factors(P, 1, rng)
    assert sorted(found) == [x + 1, x + 2, x + 4]


def test_equal_degree_cubics_gf2(rng):
    R, x = _ring(2)
    P = (x**3 + x + 1) * (x**3 + x**2 + 1)
    found = FactorModular(GF(2)).equal_degree_factors(P, 3, rng)
    assert sorted(found) == [x**3 + x + 1, x**3 + x**2 + 1]


def test_equal_degree_rejects_wrong_block(rng):
    R, x = _ring(5)
    with pytest.raises(InvalidArgument):
        FactorModular(GF(5)).equal_degree_factors(x**3 + x + 1, 2, rng)


def test_split_gives_up_after_trial_budget():
    APPLY({"FACTORING": {"SPLIT_TRIALS": 3}})
    R, x = _ring(5)
    with pytest.raises(ResourceExhaustion):
        FactorModular(GF(5)).equal_degree_factors((x + 1) * (x + 2), 1, ZeroRandom())


# ---------- full factorization ----------------------------------------------------


def test_base_factors_squarefree_gf2(rng):
    R, x = _ring(2)
    P = (x**2 + x + 1) * (x**3 + x + 1) * (x**3 + x**2 + 1)
    got = FactorModular(GF(2)).base_factors_squarefree(P, rng)
    assert got == [x**2 + x + 1, x**3 + x + 1, x**3 + x**2 + 1]


def test_base_factors_squarefree_needs_monic(rng):
    R, x = _ring(5)
    with pytest.raises(InvalidArgument):
        FactorModular(GF(5)).base_factors_squarefree(2 * x**2 + 1, rng)


def test_base_factors_with_multiplicity_and_unit(rng):
    R, x = _ring(5)
    P = 3 * (x + 1) ** 2 * (x**2 + 2)
    got = FactorModular(GF(5)).base_factors(P, rng)
    assert got == {R.constant(3): 1, x + 1: 2, x**2 + 2: 1}
    assert list(got)[0] == R.constant(3)


def test_base_factors_inseparable(rng):
    R, x = _ring(3)
    P = (x**3 + 2 * x + 1) ** 3 * x
    got = FactorModular(GF(3)).base_factors(P, rng)
    assert got == {x: 1, x**3 + 2 * x + 1: 3}


def test_base_factors_constant_and_zero(rng):
    R, x = _ring(7)
    eng = FactorModular(GF(7))
    assert eng.base_factors(R.constant(4), rng) == {R.constant(4): 1}
    assert eng.base_factors(R.zero, rng) == {}


@pytest.mark.parametrize("p", [2, 3, 5, 7, 13, 101])
def test_random_products_rebuild(p):
    R, x = _ring(p)
    rng = random.Random(p)
    eng = FactorModular(GF(p))
    for _ in range(5):
        P = R.random(rng, 4) * R.random(rng, 3) * R.random(rng, 2)
        if P.is_constant:
            continue
        got = eng.base_factors(P, rng)
        assert _rebuild(got, R) == P
        for f in got:
            if not f.is_constant:
                assert f.is_monic
                assert eng.is_irreducible(f, rng)


def test_same_seed_same_answer():
    R, x = _ring(7)
    P = (x**2 + 1) * (x**2 + 2) * (x + 3) * (x + 5)
    eng = FactorModular(GF(7))
    assert eng.base_factors(P, random.Random(11)) == eng.base_factors(P, random.Random(11))


def test_wrong_ring_rejected(rng):
    R, x = _ring(5)
    with pytest.raises(InvalidArgument):
        FactorModular(GF(7)).base_factors(x + 1, rng)


def test_engine_needs_prime_field():
    with pytest.raises(DomainMismatch):
        FactorModular(ZZ)
