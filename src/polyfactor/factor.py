# src/polyfactor/factor.py
"""Engine selection and the public factorization entry points."""

from __future__ import annotations

import random
from collections.abc import Sequence
from functools import lru_cache

from polyfactor.base import FactorAbstract
from polyfactor.domain import ZZ, DomainKind, ModularRing
from polyfactor.errors import DomainMismatch
from polyfactor.integer import FactorInteger
from polyfactor.modular import FactorModular
from polyfactor.poly import Poly, PolyRing


@lru_cache(maxsize=None)
def factor_engine(domain) -> FactorAbstract:
    """FactorInteger over ZZ, FactorModular over a prime field."""
    if domain.kind is DomainKind.INTEGER:
        return FactorInteger()
    if domain.kind is DomainKind.MODULAR and domain.is_field:
        return FactorModular(domain)
    raise DomainMismatch(f"no factorization implementation for {domain!r}")


def base_factors(P: Poly, *, rng: random.Random | None = None) -> dict[Poly, int]:
    """Factor P into {irreducible factor: multiplicity}."""
    return factor_engine(P.domain).base_factors(P, rng)


def factor_list(P: Poly, *, rng: random.Random | None = None) -> list[Poly]:
    return factor_engine(P.domain).factor_list(P, rng)


def is_irreducible(P: Poly, *, rng: random.Random | None = None) -> bool:
    return factor_engine(P.domain).is_irreducible(P, rng)


def factor_coefficients(
    coeffs: Sequence[int],
    *,
    modulus: int | None = None,
    rng: random.Random | None = None,
) -> list[list[int]]:
    """
    Factor a polynomial given as ascending coefficients [a0, a1, ..., an].

    Returns one ascending coefficient list per factor, repeated by
    multiplicity, e.g. [-1, 0, 1] -> [[-1, 1], [1, 1]].
    """
    domain = ZZ if modulus is None else ModularRing(modulus)
    P = PolyRing(domain).from_coefficients(coeffs)
    return [f.to_coefficients() for f in factor_list(P, rng=rng)]
