"""Broadcast a command name across every project that exposes it."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from pathlib import Path

from dia.commands.resolver import resolve_commands
from dia.commands.types import (
    CommandAndPath,
    CommandSpec,
    LiteralCommand,
    ParallelCommand,
    TemplatedCommand,
)
from dia.errors import EmptyFanoutError
from dia.exec.runner import run_command
from dia.project.tree import Project
from dia.utils.paths import join_path, relative_path


def create_command(
    git_root: Path,
    project_path: Path,
    entry: CommandAndPath,
    command: str,
    args: Sequence[str],
    tool_name: str,
) -> str:
    """Re-invocation of ``tool_name`` that runs ``command`` in one project.

    The project segment includes the command's own working-directory
    override, either a templated ``path`` or a ``--cwd`` inside a literal.
    """
    override = _cwd_override(entry.command)
    target = join_path(project_path, override) if override else project_path
    rel = relative_path(git_root, target)
    return " ".join(part for part in [tool_name, rel, command, shlex.join(args)] if part)


def _cwd_override(spec: CommandSpec) -> str | None:
    if isinstance(spec, TemplatedCommand):
        return spec.path
    if isinstance(spec, LiteralCommand):
        tokens = spec.command.split(" ")
        for idx, token in enumerate(tokens):
            if token.startswith("--cwd="):
                return token.split("=", 1)[1]
            if token == "--cwd" and idx + 1 < len(tokens):
                return tokens[idx + 1]
    return None


def collect_invocations(
    git_root: Path,
    project: Project,
    command: str,
    args: Sequence[str],
    tool_name: str,
) -> list[str]:
    """Pre-order search for projects declaring ``command``.

    A project that declares the command contributes one re-invocation and
    its subtree is not searched further. The result is deduplicated and
    keeps discovery order.
    """
    entry = _lookup(project.commands, command)
    if entry is not None:
        return [create_command(git_root, project.path, entry, command, args, tool_name)]

    invocations: list[str] = []
    for child in project.children:
        invocations.extend(collect_invocations(git_root, child, command, args, tool_name))
    return list(dict.fromkeys(invocations))


def _lookup(commands: dict[str, CommandAndPath], command: str) -> CommandAndPath | None:
    if command in commands:
        return commands[command]
    resolved = resolve_commands(commands)
    if command in resolved:
        return commands[resolved[command][0]]
    return None


def run_in_projects(
    git_root: Path,
    project: Project,
    command: str,
    args: Sequence[str],
    tool_name: str,
    *,
    panes: bool = False,
    sequence: bool = False,
) -> int:
    """Run ``command`` in every exposing project as one parallel group.

    Raises:
        EmptyFanoutError: If no project exposes the command
        MissingToolError: If panes are requested without tmux/xpanes
    """
    invocations = collect_invocations(git_root, project, command, args, tool_name)
    if not invocations:
        raise EmptyFanoutError(command)

    if panes:
        group = ParallelCommand(
            items=tuple(invocations),
            close_on_done=True,
            sync=False,
            panes=True,
            sequence=sequence,
        )
    else:
        group = ParallelCommand(items=tuple(invocations), sequence=sequence)

    return run_command(git_root, CommandAndPath(command=group, path=git_root))

