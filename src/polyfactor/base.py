# src/polyfactor/base.py
"""
Shared driver for univariate factorization engines.

``FactorAbstract.base_factors`` strips the content (or the leading coefficient
over a field), runs the squarefree decomposition and hands every squarefree
component of degree >= 2 to ``base_factors_squarefree`` of the concrete engine.
"""

from __future__ import annotations

import logging
import random

from polyfactor.errors import InvalidArgument
from polyfactor.gcd import gcd_engine
from polyfactor.poly import Poly
from polyfactor.runtime import CFG
from polyfactor.squarefree import normalize_factorization, squarefree_engine

logger = logging.getLogger(__name__)


def default_rng() -> random.Random:
    """Fresh generator seeded from FACTORING.SEED (OS entropy when unset)."""
    return random.Random(CFG("FACTORING.SEED", None))


class FactorAbstract:
    def __init__(self, domain):
        self.domain = domain
        self.engine = gcd_engine(domain)
        self.sengine = squarefree_engine(domain)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.domain!r})"

    def _check(self, P: Poly) -> None:
        if P.domain != self.domain:
            raise InvalidArgument(f"{self!r} cannot factor over {P.ring!r}")

    def base_factors_squarefree(self, P: Poly, rng: random.Random) -> list[Poly]:
        """Irreducible factors of a squarefree P (primitive over ZZ, monic over a field)."""
        raise NotImplementedError

    def base_factors(self, P: Poly, rng: random.Random | None = None) -> dict[Poly, int]:
        """
        Complete factorization {factor: multiplicity}.

        The product of factor**multiplicity is P. Over ZZ the non-constant
        factors are primitive with positive leading coefficient and the
        content (with the sign) is a single constant entry; over a field the
        factors are monic and the constant entry is the leading coefficient.
        """
        self._check(P)
        if P.is_zero:
            return {}
        if P.is_constant:
            return {P: 1}
        if rng is None:
            rng = default_rng()
        dom = self.domain

        if dom.is_field:
            unit = P.lc
        else:
            unit = self.engine.content(P)
            if P.signum() < 0:
                unit = -unit
        if not dom.is_one(unit):
            P = P.divide_scalar(unit)

        found: dict[Poly, int] = {}
        for g, k in self.sengine.squarefree_factors(P).items():
            if g.is_constant:
                unit = dom.mul(unit, dom.pow(g.lc, k))
                continue
            if dom.is_field and not g.is_monic:
                unit = dom.mul(unit, dom.pow(g.lc, k))
                g = g.monic()
            parts = [g] if g.degree() <= 1 else self.base_factors_squarefree(g, rng)
            logger.debug("component of degree %d, multiplicity %d: %d factor(s)", g.degree(), k, len(parts))
            for h in parts:
                if h.is_constant:
                    unit = dom.mul(unit, dom.pow(h.lc, k))
                    continue
                found[h] = found.get(h, 0) + k

        ring = P.ring
        if not dom.is_field:
            if not dom.is_one(unit):
                found[ring.constant(unit)] = 1
            return normalize_factorization(found)
        result: dict[Poly, int] = {}
        if not dom.is_one(unit):
            result[ring.constant(unit)] = 1
        for h in sorted(found, key=Poly.sort_key):
            result[h] = found[h]
        return result

    def factor_list(self, P: Poly, rng: random.Random | None = None) -> list[Poly]:
        """Factors repeated by multiplicity, constant entry included."""
        out: list[Poly] = []
        for f, e in self.base_factors(P, rng).items():
            out.extend([f] * e)
        return out

    def is_irreducible(self, P: Poly, rng: random.Random | None = None) -> bool:
        """True when P has exactly one non-constant factor, of multiplicity 1."""
        if P.is_constant:
            return False
        nonconst = [(f, e) for f, e in self.base_factors(P, rng).items() if not f.is_constant]
        return len(nonconst) == 1 and nonconst[0][1] == 1
