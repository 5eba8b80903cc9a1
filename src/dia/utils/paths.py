"""Path helpers shared by tree construction and execution."""

from __future__ import annotations

import os
from pathlib import Path


def join_path(base: Path, relative: str) -> Path:
    """Join and normalize a relative location onto ``base``."""
    return Path(os.path.normpath(os.path.join(base, relative)))


def relative_path(root: Path, path: Path) -> str:
    """Path of ``path`` relative to ``root``; empty string for the root itself."""
    rel = os.path.relpath(path, root)
    return "" if rel == "." else rel
