"""Git-backed discovery of the repository root and its directories."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from dia.errors import GitError, NoRepositoryError
from dia.ui import debug
from dia.utils.paths import join_path

IGNORED_DIRS: tuple[str, ...] = ("src", "node_modules")
CHANGED_DIFF_FILTER = "ACMRTUXB"


@dataclass(frozen=True)
class GitResult:
    """Result envelope for a git invocation."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str


def run_git(args: list[str], *, cwd: Path, check: bool = True) -> GitResult:
    """Run a git command and return its structured result."""
    argv = ["git", *args]
    completed = subprocess.run(argv, cwd=cwd, capture_output=True, text=True, check=False)
    result = GitResult(
        argv=tuple(argv),
        cwd=cwd,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
    if check and result.returncode != 0:
        raise GitError(result.argv, cwd, result.returncode, result.stderr)
    return result


def find_git_root(start: Path) -> Path:
    """Nearest directory at or above ``start`` containing ``.git``.

    Raises:
        NoRepositoryError: If the filesystem root is reached first
    """
    current = start.resolve()
    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            raise NoRepositoryError(f"No git repo found from {start}")
        current = parent


def parse_untracked(status_output: str) -> list[str]:
    """Untracked entries from ``git status --short`` output."""
    entries: list[str] = []
    for line in status_output.splitlines():
        if not line.startswith("??"):
            continue
        entry = line[3:].strip()
        if entry.startswith('"') and entry.endswith('"'):
            entry = entry[1:-1]
        entries.append(entry.rstrip("/"))
    return entries


def list_project_dirs(root_path: Path) -> list[str]:
    """Candidate project directories below ``root_path``, relative to it.

    Combines tracked directories, directories touched by the last commit and
    untracked entries. A repository without commits has no tracked
    directories. Changed and untracked entries that look like files are
    dropped; tracked entries are directories already.
    """
    tracked = run_git(["ls-tree", "-d", "-r", "--name-only", "HEAD"], cwd=root_path, check=False)
    if tracked.returncode != 0:
        debug(f"git listing: no tracked directories under {root_path}")
    changed = run_git(
        [
            "diff",
            "--name-only",
            "--relative",
            f"--diff-filter={CHANGED_DIFF_FILTER}",
            "HEAD~1",
        ],
        cwd=root_path,
        check=False,
    )
    status = run_git(["status", "--short", "--", "."], cwd=root_path, check=False)

    others = [*changed.stdout.splitlines(), *parse_untracked(status.stdout)]
    dirs = [*tracked.stdout.splitlines(), *(c for c in others if "." not in c)]
    debug(f"git listing: {len(dirs)} directories under {root_path}")
    return list(dict.fromkeys(dirs))


def filter_listing(paths: Iterable[str], root_path: Path) -> list[str]:
    """Drop empty, ignored, root-equal and out-of-root entries."""
    kept: list[str] = []
    for entry in paths:
        if not entry:
            continue
        if any(segment in IGNORED_DIRS for segment in entry.split("/")):
            continue
        resolved = join_path(root_path, entry)
        if resolved == root_path or root_path not in resolved.parents:
            continue
        kept.append(entry.strip("/"))
    return kept
