"""
User workspace: a directory holding editable copies of the packaged profiles.

Located at $POLYFACTOR_HOME, or ~/.polyfactor when the variable is unset.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

logger = logging.getLogger(__name__)

SUBDIRS = ("profiles",)


def workspace_dir() -> Path:
    env = os.environ.get("POLYFACTOR_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return (Path.home() / ".polyfactor").resolve()


def _profile_files(src: Path) -> Iterator[Path]:
    """TOML files under src, skipping hidden, backup and cache entries."""
    if not src.is_dir():
        return
    for p in sorted(src.rglob("*.toml")):
        if "__pycache__" in p.parts or p.name.startswith(".") or p.name.endswith("~"):
            continue
        if p.is_file():
            yield p


def _copy_tree(src: Path, dst: Path, *, overwrite: bool) -> int:
    count = 0
    for p in _profile_files(src):
        target = dst / p.relative_to(src)
        if target.exists() and not overwrite:
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(p, target)
        count += 1
    return count


def seed_workspace(*, overwrite: bool = False) -> tuple[Path, dict[str, int]]:
    """
    Copy the packaged profiles into the workspace. Existing files are kept
    unless overwrite is set. Returns the workspace path and the number of
    files copied per subdirectory.
    """
    root = workspace_dir()
    copied: dict[str, int] = {}
    for sub in SUBDIRS:
        dst = root / sub
        dst.mkdir(parents=True, exist_ok=True)
        with as_file(pkg_files("polyfactor") / sub) as packaged:
            copied[sub] = _copy_tree(Path(packaged), dst, overwrite=overwrite)
    if any(copied.values()):
        logger.debug("seeded workspace %s: %s", root, copied)
    return root, copied


def ensure_workspace_seeded() -> tuple[Path, bool, dict[str, int]]:
    """Copy-if-missing seeding; the flag tells whether anything was copied."""
    root, copied = seed_workspace(overwrite=False)
    return root, any(copied.values()), copied
