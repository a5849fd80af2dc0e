# src/polyfactor/errors.py
from __future__ import annotations


class PolyFactorError(Exception):
    """Base class for every error raised by polyfactor."""


class InvalidArgument(PolyFactorError, ValueError):
    """Zero divisor, missing value, or mismatched ring passed where a valid one is required."""


class DomainMismatch(PolyFactorError, ArithmeticError):
    """Operation needs a structure the coefficient domain does not have (e.g. a field)."""


class ResourceExhaustion(PolyFactorError, RuntimeError):
    """A bounded search (candidate primes, splitting trials) ran out without success."""


class LiftVerificationFailure(PolyFactorError, ArithmeticError):
    """A Hensel or Bezout lift does not reproduce the identity it was built for."""


class UserInputError(Exception):
    pass
