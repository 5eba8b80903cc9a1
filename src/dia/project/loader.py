"""Invocation context and full project tree assembly."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from dia import DEFAULT_CONFIG_NAME, TOOL_NAME
from dia.config import get_config_name
from dia.git.listing import filter_listing, find_git_root, list_project_dirs
from dia.project.exports import merge_exports
from dia.project.tree import (
    Project,
    build_project_tree,
    enable_tree,
    files_to_record,
    iter_projects,
)
from dia.ui import debug

CWD_OPTION = "--cwd"


@dataclass(frozen=True)
class Context:
    """Everything one invocation knows about where it runs."""

    git_root: Path
    root_path: Path
    curr_path: Path
    args: list[str] = field(default_factory=list)
    config_name: str = DEFAULT_CONFIG_NAME
    tool_name: str = TOOL_NAME

    @property
    def at_git_root(self) -> bool:
        return self.root_path == self.git_root


def build_context(args: Sequence[str], curr_path: Path) -> Context:
    """Work out git root, invocation root and remaining arguments.

    The invocation root is, in priority order, the ``--cwd`` option, a
    leading path-looking argument (contains ``/`` or is ``.``) that exists,
    or the git root. Whichever selected it is removed from the arguments.

    Raises:
        NoRepositoryError: If ``curr_path`` is not inside a git repository
    """
    git_root = find_git_root(curr_path)
    remaining = list(args)

    cwd_value, remaining = _pop_cwd_option(remaining)
    if cwd_value is not None:
        root_path = (curr_path / cwd_value).resolve()
    else:
        root_path = git_root
        first = next((a for a in remaining if not a.startswith("-")), None)
        if first is not None and ("/" in first or first == ".") and (curr_path / first).exists():
            root_path = (curr_path / first).resolve()
            remaining.remove(first)

    return Context(
        git_root=git_root,
        root_path=root_path,
        curr_path=curr_path.resolve(),
        args=remaining,
        config_name=get_config_name(),
    )


def _pop_cwd_option(args: list[str]) -> tuple[str | None, list[str]]:
    for idx, arg in enumerate(args):
        if arg == CWD_OPTION and idx + 1 < len(args):
            return args[idx + 1], args[:idx] + args[idx + 2 :]
        if arg.startswith(f"{CWD_OPTION}="):
            return arg.split("=", 1)[1], args[:idx] + args[idx + 1 :]
    return None, args


def load_project(context: Context) -> Project:
    """Build the enabled, export-merged project tree for an invocation."""
    dirs = filter_listing(list_project_dirs(context.root_path), context.root_path)
    tree = build_project_tree(
        context.curr_path,
        context.root_path.name,
        context.root_path,
        files_to_record(dirs),
        context.config_name,
    )
    project = merge_exports(enable_tree(tree))
    enabled = [p for p in iter_projects(project) if p.enabled]
    debug(f"project tree: {len(enabled)} enabled projects under {context.root_path}")
    return project
