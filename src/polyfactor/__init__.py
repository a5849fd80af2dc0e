from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("polyfactor")
except PackageNotFoundError:
    __version__ = "0+unknown"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API re-exports
from .config import has_profile, load_settings
from .domain import GF, ZZ, DomainKind, ModularRing
from .errors import DomainMismatch, InvalidArgument, LiftVerificationFailure, PolyFactorError, ResourceExhaustion
from .factor import base_factors, factor_coefficients, factor_engine, factor_list, is_irreducible
from .gcd import GcdStrategy, gcd_engine
from .poly import Poly, PolyRing
from .runtime import APPLY, CFG, LIMIT
from .squarefree import squarefree_engine
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "GF",
    "ZZ",
    "DomainKind",
    "DomainMismatch",
    "GcdStrategy",
    "InvalidArgument",
    "LIMIT",
    "LiftVerificationFailure",
    "ModularRing",
    "Poly",
    "PolyFactorError",
    "PolyRing",
    "ResourceExhaustion",
    "__version__",
    "base_factors",
    "factor_coefficients",
    "factor_engine",
    "factor_list",
    "gcd_engine",
    "has_profile",
    "is_irreducible",
    "load_settings",
    "squarefree_engine",
    "workspace_dir"
]
