# runtime.py
"""
Per-context factoring limits.

A ``Runtime`` holds the settings of the active profile. It lives in a
ContextVar, so threads and asyncio tasks each see their own copy. Code reads
values with ``CFG("SECTION.KEY", default)`` or, for the integer limits in
``DEFAULTS``, with ``LIMIT("FACTORING.KEY")``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from dataclasses import asdict as _asdict
from dataclasses import dataclass, field
from importlib.util import find_spec
from typing import Any

logger = logging.getLogger(__name__)

# Built-in values used when the active profile does not set a key.
DEFAULTS: dict[str, dict[str, Any]] = {
    "FACTORING": {
        "MODULAR_TRIALS": 5,
        "PRIME_POOL": 30,
        "SPLIT_TRIALS": 256,
        "GCD_PRIMES": 64,
    },
    "BEHAVIOUR": {
        "DEBUG": False,
    },
}

_MISSING = object()


def _lookup(tree: dict[str, Any], key: str) -> Any:
    cur: Any = tree
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return _MISSING
        cur = cur[part]
    return cur


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False  # DEBUG level on the package logger

    def apply(self, settings: Any) -> None:
        """Replace the active settings with a Settings object, a dict or an UPPERCASE namespace."""
        self.profile_name = getattr(settings, "name", None) or "default"

        if hasattr(settings, "as_dict") and callable(settings.as_dict):
            cfg = settings.as_dict()
        elif isinstance(settings, dict):
            cfg = settings
        else:
            cfg = {k: getattr(settings, k) for k in dir(settings) if k.isupper()}
        if hasattr(cfg, "__dataclass_fields__"):
            cfg = _asdict(cfg)
        self.settings = dict(cfg)

        dbg = self.get("BEHAVIOUR.DEBUG")
        if isinstance(dbg, bool):
            self.debug = dbg
        logging.getLogger("polyfactor").setLevel(logging.DEBUG if self.debug else logging.NOTSET)
        logger.debug("profile %r applied", self.profile_name)

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup such as 'FACTORING.PRIME_POOL'; ``default`` when unset."""
        if not key:
            return default
        value = _lookup(self.settings, key)
        return default if value is _MISSING else value

    def limit(self, key: str) -> int:
        """Positive integer setting, falling back to DEFAULTS."""
        value = _lookup(self.settings, key)
        if value is _MISSING:
            value = _lookup(DEFAULTS, key)
            if value is _MISSING:
                raise KeyError(key)
        return int(value)


# --- Context management ---

_current_runtime: ContextVar[Runtime | None] = ContextVar("polyfactor_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def APPLY(settings: Any) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


def LIMIT(key: str) -> int:
    return current().limit(key)


# ---- Dependency check --------------------------------------------------------

def ensure_runtime_deps(strict: bool = True) -> bool:
    """
    Check that sympy and gmpy2 are importable without importing them.
    Logs the missing ones; returns False for a miss only when strict.
    """
    missing = [name for name in ("sympy", "gmpy2") if find_spec(name) is None]
    if missing:
        logger.error("missing dependencies: %s (install with: pip install %s)", ", ".join(missing), " ".join(missing))
        return not strict
    return True
