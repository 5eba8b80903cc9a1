from __future__ import annotations

from pathlib import Path

MIN_ALIASED_LENGTH = 7
CURRENT_DIR_ALIAS = "."
ALIAS_LENGTH = 3


def get_alias(name: str) -> str:
    """Short alias for a project name, e.g. ``hello_myname_is`` -> ``hmi``."""
    if "-" in name:
        return split_alias(name, "-")
    if "_" in name:
        return split_alias(name, "_")
    return name[:ALIAS_LENGTH]


def split_alias(name: str, sep: str) -> str:
    """Leading characters of ``name`` followed by the initial of each later segment."""
    segments = [s for s in name.split(sep) if s]
    keep = max(0, ALIAS_LENGTH - (len(segments) - 1))
    return name[:keep] + "".join(s[0] for s in segments[1:])


def project_aliases(name: str, path: Path, current_path: Path) -> list[str]:
    """Aliases a project is reachable under besides its own name."""
    aliases: list[str] = []
    if len(name) >= MIN_ALIASED_LENGTH:
        aliases.append(get_alias(name))
    if path == current_path:
        aliases.append(CURRENT_DIR_ALIAS)
    return aliases
