# tests/conftest.py
from __future__ import annotations

import logging
import random

import pytest

from polyfactor import runtime


@pytest.fixture(autouse=True)
def fresh_runtime():
    """Every test starts from an empty runtime (defaults only)."""
    token = runtime._current_runtime.set(runtime.Runtime())
    yield runtime.current()
    runtime._current_runtime.reset(token)
    logging.getLogger("polyfactor").setLevel(logging.NOTSET)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20240917)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Point POLYFACTOR_HOME at an empty temporary directory."""
    monkeypatch.setenv("POLYFACTOR_HOME", str(tmp_path))
    return tmp_path
