# tests/test_config.py
"""
Tests for profiles, the per-context runtime and the workspace.
"""

from __future__ import annotations

import logging

import pytest

from polyfactor.config import (
    has_profile,
    list_all_profiles,
    list_profiles_with_descriptions,
    load_settings,
)
from polyfactor.errors import UserInputError
from polyfactor.runtime import APPLY, CFG, LIMIT, current, ensure_runtime_deps
from polyfactor.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

# ---------- helpers -----------------------------------------------------------


def _write_profile(ws, name: str, body: str):
    pdir = ws / "profiles"
    pdir.mkdir(parents=True, exist_ok=True)
    path = pdir / f"{name}.toml"
    path.write_text(body, encoding="utf-8")
    return path


# ---------- workspace -----------------------------------------------------------


def test_workspace_follows_env(workspace):
    assert workspace_dir() == workspace.resolve()


def test_seed_copies_packaged_profiles(workspace):
    root, copied = seed_workspace()
    assert copied["profiles"] >= 2
    assert (root / "profiles" / "default.toml").is_file()
    # second pass is copy-if-missing
    _, seeded, again = ensure_workspace_seeded()
    assert not seeded
    assert again["profiles"] == 0


def test_seed_overwrite_restores_edits(workspace):
    seed_workspace()
    path = workspace / "profiles" / "default.toml"
    path.write_text("[FACTORING]\nPRIME_POOL = 3\n", encoding="utf-8")
    seed_workspace(overwrite=True)
    assert "PRIME_POOL = 30" in path.read_text(encoding="utf-8")


# ---------- loading -------------------------------------------------------------


def test_packaged_default(workspace):
    s = load_settings()
    assert s.name == "default"
    assert s.as_dict()["FACTORING"]["MODULAR_TRIALS"] == 5
    assert s.as_dict()["FACTORING"]["PRIME_POOL"] == 30
    assert "SEED" not in s.as_dict()["FACTORING"]
    assert "_PROFILE_" not in s.as_dict()


def test_workspace_copy_wins(workspace):
    _write_profile(workspace, "default", '[_PROFILE_]\ndescription = "local"\n\n[FACTORING]\nPRIME_POOL = 4\n')
    s = load_settings("default")
    assert s.as_dict()["FACTORING"]["PRIME_POOL"] == 4
    assert s.description == "local"
    assert s._source.parent == workspace.resolve() / "profiles"


def test_custom_profile_without_metadata(workspace):
    _write_profile(workspace, "fast", "[FACTORING]\nMODULAR_TRIALS = 2\nSEED = 9\n")
    s = load_settings("fast")
    assert s.name == "fast"
    assert s.description == "(no description)"
    assert has_profile("fast")


def test_missing_profile(workspace):
    assert not has_profile("nope")
    with pytest.raises(FileNotFoundError):
        load_settings("nope")


def test_broken_toml(workspace):
    _write_profile(workspace, "broken", "[FACTORING\nPRIME_POOL = 3\n")
    with pytest.raises(UserInputError, match="broken.toml"):
        load_settings("broken")


@pytest.mark.parametrize(
    "body",
    [
        "[FACTORING]\nPRIME_POOL = 0\n",
        '[FACTORING]\nSPLIT_TRIALS = "many"\n',
        "[FACTORING]\nGCD_PRIMES = true\n",
        "[FACTORING]\nSEED = 1.5\n",
        '[BEHAVIOUR]\nDEBUG = "yes"\n',
        'FACTORING = "flat"\n',
    ],
    ids=["zero-pool", "string-trials", "bool-primes", "float-seed", "string-debug", "not-a-table"],
)
def test_invalid_values(workspace, body):
    _write_profile(workspace, "bad", body)
    with pytest.raises(UserInputError):
        load_settings("bad")


def test_listing(workspace):
    _write_profile(workspace, "broken", "[oops\n")
    names = list_all_profiles()
    assert {"default", "thorough", "broken"} <= set(names)
    described = dict(list_profiles_with_descriptions())
    assert described["broken"] == "(no description)"
    assert described["thorough"].startswith("More modular trials")


# ---------- runtime --------------------------------------------------------------


def test_apply_profile(workspace):
    APPLY(load_settings("thorough"))
    rt = current()
    assert rt.profile_name == "thorough"
    assert CFG("FACTORING.PRIME_POOL") == 60
    assert CFG("FACTORING.SEED") == 1
    assert rt.debug
    assert logging.getLogger("polyfactor").level == logging.DEBUG


def test_cfg_defaults():
    assert CFG("FACTORING.PRIME_POOL", 30) == 30
    assert CFG("NO.SUCH.KEY") is None
    assert CFG("") is None
    APPLY({"FACTORING": {"PRIME_POOL": 7}})
    assert CFG("FACTORING.PRIME_POOL", 30) == 7
    assert CFG("FACTORING") == {"PRIME_POOL": 7}


def test_limits_fall_back_to_defaults():
    assert LIMIT("FACTORING.SPLIT_TRIALS") == 256
    assert LIMIT("FACTORING.MODULAR_TRIALS") == 5
    APPLY({"FACTORING": {"SPLIT_TRIALS": 8}})
    assert LIMIT("FACTORING.SPLIT_TRIALS") == 8
    assert LIMIT("FACTORING.GCD_PRIMES") == 64
    with pytest.raises(KeyError):
        LIMIT("FACTORING.NO_SUCH_LIMIT")


def test_debug_off_resets_logger():
    APPLY({"BEHAVIOUR": {"DEBUG": True}})
    APPLY({"BEHAVIOUR": {"DEBUG": False}})
    assert logging.getLogger("polyfactor").level == logging.NOTSET


def test_runtime_deps_present():
    assert ensure_runtime_deps()


def test_runtime_deps_missing(monkeypatch, caplog):
    monkeypatch.setattr("polyfactor.runtime.find_spec", lambda name: None)
    assert not ensure_runtime_deps(strict=True)
    assert ensure_runtime_deps(strict=False)
    assert "sympy" in caplog.text
