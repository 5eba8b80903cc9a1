"""Execution of resolved commands as bash invocations."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dia.commands.args import show_command
from dia.commands.template import render_template
from dia.commands.types import (
    ChunkedCommand,
    CommandAndPath,
    LiteralCommand,
    ParallelCommand,
    SequenceCommand,
    TemplatedCommand,
)
from dia.errors import MissingToolError
from dia.exec.guard import SpawnGuard
from dia.ui import print_command
from dia.utils.paths import relative_path

SHELL = "bash"
PANE_TOOLS: tuple[str, ...] = ("tmux", "xpanes")


@dataclass(frozen=True)
class Invocation:
    """A concrete bash script and the directory it runs in."""

    script: str
    cwd: Path


def build_invocation(
    command_and_path: CommandAndPath,
    args: Sequence[str] = (),
    params: Mapping[str, Any] | None = None,
) -> Invocation:
    """Turn a resolved command into the script handed to bash.

    Literal, chunked and piped commands get ``args`` appended. Templated
    commands take their values from ``params`` instead. Parallel groups run
    backgrounded and are waited on, or in multiplexer panes.

    Raises:
        MissingToolError: If pane mode is requested without tmux/xpanes
    """
    spec = command_and_path.command
    cwd = command_and_path.path

    if isinstance(spec, LiteralCommand):
        return Invocation(_with_args(spec.command, args), cwd)
    if isinstance(spec, ChunkedCommand):
        return Invocation(_with_args(spec.joined(), args), cwd)
    if isinstance(spec, SequenceCommand):
        return Invocation(_with_args(" | ".join(spec.commands), args), cwd)
    if isinstance(spec, TemplatedCommand):
        rendered = render_template(spec, params or {}, cwd)
        return Invocation(rendered.command, rendered.cwd)
    if isinstance(spec, ParallelCommand):
        if spec.panes:
            ensure_pane_tools()
            return Invocation(pane_script(spec), cwd)
        return Invocation(parallel_script(spec), cwd)
    raise TypeError(f"Unknown command spec: {spec!r}")


def _with_args(command: str, args: Sequence[str]) -> str:
    if not args:
        return command
    return f"{command} {shlex.join(args)}"


def parallel_script(spec: ParallelCommand) -> str:
    """Background every item and wait for all, or run them one by one."""
    if spec.sequence:
        group = "{ " + "; ".join(spec.items) + "; }"
    else:
        group = "{ " + " & ".join(spec.items) + " & wait; }"
    parts = [p for p in (spec.before, group, spec.after) if p]
    return " && ".join(parts)


def pane_script(spec: ParallelCommand) -> str:
    """Open one xpanes pane per item, inside the current tmux session if any."""
    flags = []
    if spec.close_on_done:
        flags.append("-s")
    if not spec.sync:
        flags.append("-d")
    items = " ".join(shlex.quote(item) for item in spec.items)
    xpanes = " ".join(["xpanes", *flags, "-e", items])
    xpanes_here = " ".join(["xpanes", "-x", *flags, "-e", items])
    script = f'if [ "$TMUX" ]; then {xpanes_here}; else {xpanes}; fi'
    if spec.before:
        script = f"{spec.before} && {{ {script}; }}"
    if spec.after:
        script = f"{script} && {spec.after}"
    return script


def ensure_pane_tools() -> None:
    missing = [tool for tool in PANE_TOOLS if shutil.which(tool) is None]
    if missing:
        raise MissingToolError(
            f"{' and '.join(missing)} not installed. Please install to run parallel commands in panes"
        )


def spawn(invocation: Invocation) -> int:
    """Run the invocation with inherited stdio and return its exit code."""
    process = subprocess.Popen([SHELL, "-c", invocation.script], cwd=invocation.cwd)
    with SpawnGuard(process) as guard:
        return guard.wait()


def run_command(
    git_root: Path,
    command_and_path: CommandAndPath,
    args: Sequence[str] = (),
    params: Mapping[str, Any] | None = None,
) -> int:
    """Print, build and run a resolved command.

    Returns:
        The exit code of the spawned bash process

    Raises:
        MissingToolError: Before anything is spawned
    """
    rel = relative_path(git_root, command_and_path.path)
    print_command(rel, _display(show_command(command_and_path.command), args))
    invocation = build_invocation(command_and_path, args, params)
    if isinstance(command_and_path.command, TemplatedCommand):
        print_command(rel, invocation.script)
    return spawn(invocation)


def _display(rendered: str, args: Sequence[str]) -> str:
    return " ".join([rendered, *args]) if args else rendered
