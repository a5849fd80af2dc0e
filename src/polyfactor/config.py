from __future__ import annotations

import tomllib as toml
from dataclasses import dataclass
from importlib.resources import files as pkg_files
from pathlib import Path
from typing import Any

from polyfactor.errors import UserInputError
from polyfactor.runtime import DEFAULTS
from polyfactor.workspace import ensure_workspace_seeded, workspace_dir

# integer limits a profile may override
_INT_KEYS = tuple(DEFAULTS["FACTORING"])


@dataclass
class Settings:
    """
    A loaded profile: its settings tables (``as_dict()`` is what ``APPLY``
    consumes), the name from [_PROFILE_] or the file stem, a one-line
    description and the file it came from.
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


def _packaged_profile(name: str) -> Path | None:
    ref = pkg_files("polyfactor") / "profiles" / f"{name}.toml"
    return Path(str(ref)) if ref.is_file() else None


# --- I/O -------------------------------------------------------------------


def _load_toml(path: Path) -> dict[str, Any]:
    """Parse a profile; unreadable or malformed files become UserInputError."""
    try:
        return toml.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise UserInputError(f"cannot read profile {path.name}: {e.strerror or e}.") from None
    except toml.TOMLDecodeError as e:
        # lineno/colno exist on Python 3.14+
        lineno = getattr(e, "lineno", None)
        loc = f" (line {lineno})" if lineno is not None else ""
        msg = getattr(e, "msg", str(e))
        raise UserInputError(f"profile {path.name} is not valid TOML: {msg}{loc}.") from None


# --- Metadata handling -----------------------------------------------------


_NO_DESCRIPTION = "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """Separate the [_PROFILE_] table; returns (settings, name, one-line description)."""
    settings = dict(raw)
    meta = settings.pop("_PROFILE_", None) or {}
    name = str(meta.get("name") or fallback_name)
    description = " ".join(str(meta.get("description") or "").split()) or _NO_DESCRIPTION
    return settings, name, description


def _validate(data: dict[str, Any], path: Path) -> None:
    fac = data.get("FACTORING", {}) or {}
    if not isinstance(fac, dict):
        raise UserInputError(f"{path.name}: [FACTORING] must be a table.")
    for key in _INT_KEYS:
        if key in fac and (not isinstance(fac[key], int) or isinstance(fac[key], bool) or fac[key] < 1):
            raise UserInputError(f"{path.name}: FACTORING.{key} must be a positive integer.")
    seed = fac.get("SEED")
    if seed is not None and not isinstance(seed, int | str):
        raise UserInputError(f"{path.name}: FACTORING.SEED must be an integer or a string.")
    beh = data.get("BEHAVIOUR", {}) or {}
    if "DEBUG" in beh and not isinstance(beh["DEBUG"], bool):
        raise UserInputError(f"{path.name}: BEHAVIOUR.DEBUG must be true or false.")


# --- Public API ------------------------------------------------------------


def list_all_profiles() -> list[str]:
    """Profile names (file stems) in the workspace, seeding it first."""
    ensure_workspace_seeded()
    pdir = _profiles_dir()
    return sorted(p.stem for p in pdir.glob("*.toml")) if pdir.is_dir() else []


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """[(name, description), ...] sorted by name; unreadable profiles keep their file stem."""
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            _, nm, desc = _split_profile_data(_load_toml(p), p.stem)
        except UserInputError:
            nm, desc = p.stem, _NO_DESCRIPTION
        items.append((nm, desc))
    return sorted(items, key=lambda t: t[0].lower())


def _resolve(name: str) -> Path | None:
    path = _profile_path(name)
    return path if path.exists() else _packaged_profile(name)


def has_profile(name: str) -> bool:
    return _resolve(name) is not None


def load_settings(name: str | None = None) -> Settings:
    """
    Load a profile by name (default 'default'): the workspace copy when
    present, else the one shipped with the package. The [_PROFILE_] table is
    split off and the FACTORING / BEHAVIOUR values are type checked.
    """
    name = name or "default"
    path = _resolve(name)
    if path is None:
        raise FileNotFoundError(f"Profile '{name}' not found at {_profile_path(name)}")

    data, resolved_name, description = _split_profile_data(_load_toml(path), path.stem)
    _validate(data, path)
    return Settings(data=data, name=resolved_name, description=description, _source=path)
