"""Synthesis of cross-project commands from ``exports`` declarations."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from dia.commands.types import CommandAndPath
from dia.project.tree import Project
from dia.utils.paths import join_path

ROOT_EXPORT = "."


def merge_exports(tree: Project) -> Project:
    """Expose the commands of exported projects on the declaring node.

    Children are merged first, so a child's own exports are visible through
    the commands of its parent. Synthesized entries are applied after the
    node's own commands and replace them on key collision.
    """
    children = tuple(merge_exports(child) for child in tree.children)
    merged = replace(tree, children=children)

    exported: dict[str, CommandAndPath] = {}
    for export_name, targets in tree.exports.items():
        relatives = [targets] if isinstance(targets, str) else targets
        projects = [
            prj
            for prj in (find_project(merged, join_path(tree.path, rel)) for rel in relatives)
            if prj is not None
        ]
        exported.update(merge_commands(export_name, projects))

    if not exported:
        return merged
    return replace(merged, commands={**tree.commands, **exported})


def merge_commands(prefix: str, projects: list[Project]) -> dict[str, CommandAndPath]:
    """Re-key every command of ``projects`` under ``<prefix>:``.

    Projects later in the list overwrite earlier ones for the same key.
    """
    key_prefix = "" if prefix == ROOT_EXPORT else f"{prefix}:"
    commands: dict[str, CommandAndPath] = {}
    for prj in projects:
        for key, cmd in prj.commands.items():
            commands[f"{key_prefix}{key}"] = CommandAndPath(command=cmd.command, path=prj.path)
    return commands


def find_project(tree: Project, abs_path: Path) -> Project | None:
    """Depth-first search for the node located exactly at ``abs_path``.

    Only subtrees whose own path contains ``abs_path`` are descended.
    """
    if tree.path == abs_path:
        return tree
    if tree.path not in abs_path.parents:
        return None
    for child in tree.children:
        found = find_project(child, abs_path)
        if found is not None:
            return found
    return None
