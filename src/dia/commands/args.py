"""Raw argument forwarding and human-readable command rendering."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from dia.commands.types import (
    ChunkedCommand,
    CommandSpec,
    LiteralCommand,
    ParallelCommand,
    SequenceCommand,
    TemplatedCommand,
)


def resolve_args(root_path: Path, args: Sequence[str]) -> list[str]:
    """Pass-through arguments with relative paths anchored at ``root_path``.

    Keeps them pointing at the same file once the command runs in its own
    project directory. Quoted arguments, flags and absolute paths are kept.
    """
    return [_resolve_arg(root_path, arg) for arg in args]


def _resolve_arg(root_path: Path, arg: str) -> str:
    if arg.startswith(('"', "'", "-", "/")) or "/" not in arg:
        return arg
    return os.path.join(root_path, arg)


def show_command(spec: CommandSpec) -> str:
    """Render a command spec for the banner printed before it runs."""
    if isinstance(spec, LiteralCommand):
        return spec.command
    if isinstance(spec, ChunkedCommand):
        return spec.joined()
    if isinstance(spec, SequenceCommand):
        return " | ".join(spec.commands)
    if isinstance(spec, ParallelCommand):
        before = f"{spec.before} > " if spec.before else ""
        after = f" > {spec.after}" if spec.after else ""
        return f"{before}{' & '.join(spec.items)}{after}"
    if isinstance(spec, TemplatedCommand):
        args = "".join(f" <{a.name}:{a.type}>" for a in spec.args)
        opts = "".join(f" --{o.name}:{o.type}" for o in spec.options)
        return f"{spec.command}{args}{opts}"
    raise TypeError(f"Unknown command spec: {spec!r}")
