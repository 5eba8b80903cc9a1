"""Error taxonomy for dia."""

from __future__ import annotations

from pathlib import Path


class DiaError(RuntimeError):
    """Base class for errors reported by dia."""


class ConfigValidationError(DiaError):
    """Raised when a per-directory configuration cannot be parsed or validated."""

    def __init__(self, path: Path, errors: list[str]):
        detail = "\n".join(f"  - {msg}" for msg in errors)
        super().__init__(f"Invalid dia config at {path}:\n{detail}")
        self.path = path
        self.errors = errors


class MissingToolError(DiaError):
    """Raised when pane mode is requested but tmux/xpanes are not installed."""


class EmptyFanoutError(DiaError):
    """Raised when no project in the tree exposes the requested command."""

    def __init__(self, command: str):
        super().__init__(f"No projects with command {command} found")
        self.command = command


class NoRepositoryError(DiaError):
    """Raised when no git repository encloses the invocation directory."""


class GitError(DiaError):
    """Raised when a git invocation fails in check mode."""

    def __init__(self, argv: tuple[str, ...], cwd: Path, returncode: int, stderr: str):
        rendered = " ".join(argv)
        super().__init__(f"command failed ({returncode}) in {cwd}: {rendered}\n{stderr.strip()}")
        self.argv = argv
        self.cwd = cwd
        self.returncode = returncode
        self.stderr = stderr
