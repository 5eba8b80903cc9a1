"""Project tree construction from a git directory listing and dia configs."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path

from dia.commands.types import CommandAndPath
from dia.config import DirConfig, parse_config_dir
from dia.ui import report_error
from dia.utils.paths import join_path

FileListing = dict[str, list[str]]


@dataclass(frozen=True)
class Project:
    """A directory-scoped node of the project hierarchy.

    Nodes are never mutated after construction; whole-tree passes such as
    `enable_tree` and `merge_exports` return new trees.
    """

    path: Path
    name: str
    enabled: bool = False
    commands: dict[str, CommandAndPath] = field(default_factory=dict)
    exports: dict[str, str | list[str]] = field(default_factory=dict)
    children: tuple["Project", ...] = ()


def files_to_record(paths: Iterable[str]) -> FileListing:
    """Bucket relative paths by their first segment.

    Each bucket holds the remaining path with that segment stripped, so the
    listing can be descended one level per recursion.
    """
    record: FileListing = {}
    for entry in paths:
        top, _, rest = entry.partition("/")
        bucket = record.setdefault(top, [])
        if rest:
            bucket.append(rest)
    return record


def files_in_dir(listing: FileListing, dir_name: str) -> FileListing:
    """Descend the listing into ``dir_name``."""
    return files_to_record(listing.get(os.path.basename(dir_name), []))


def build_project_tree(
    current_path: Path,
    project_name: str,
    project_path: Path,
    listing: FileListing,
    config_name: str,
) -> Project:
    """Build the project node for ``project_path`` and all its descendants.

    Sub-projects come from two sources: every top-level directory of the
    listing, then every entry of the directory's ``projects`` config. Config
    entries are applied last and replace listing entries with the same name.
    A config entry pointing at the node itself, at one of its ancestors or
    at a node already being built higher up is reported and skipped.

    Args:
        current_path: Directory the tool was invoked from
        project_name: Name of the node being built
        project_path: Absolute directory of the node
        listing: Directory listing relative to ``project_path``
        config_name: File name of the per-directory config

    Returns:
        The node with ``enabled`` left False; see `enable_tree`
    """
    return _build(current_path, project_name, project_path, listing, config_name, frozenset())


def _build(
    current_path: Path,
    project_name: str,
    project_path: Path,
    listing: FileListing,
    config_name: str,
    building: frozenset[Path],
) -> Project:
    config = parse_config_dir(project_path, config_name)
    building = building | {project_path}

    locations: dict[str, Path | list[Path]] = {
        name: join_path(project_path, name) for name in listing
    }
    for name, relative in config.projects.items():
        if isinstance(relative, list):
            locations[name] = [join_path(project_path, r) for r in relative]
        else:
            locations[name] = join_path(project_path, relative)

    children: list[Project] = []
    for name, location in locations.items():
        inner = files_in_dir(listing, name)
        targets = location if isinstance(location, list) else [location]
        for target in targets:
            if target in building or target in project_path.parents:
                report_error(f"Skipping project {name} in {project_path}: {target} leads back into the tree")
                continue
            children.append(_build(current_path, name, target, inner, config_name, building))

    return _make_node(project_path, project_name, config, tuple(children))


def _make_node(path: Path, name: str, config: DirConfig, children: tuple[Project, ...]) -> Project:
    return Project(
        path=path,
        name=name,
        enabled=False,
        commands={
            key: CommandAndPath(command=spec, path=path) for key, spec in config.commands.items()
        },
        exports=dict(config.exports),
        children=children,
    )


def enable_tree(tree: Project) -> Project:
    """Mark every node that has commands or an enabled descendant."""
    children = tuple(enable_tree(child) for child in tree.children)
    enabled = bool(tree.commands) or any(child.enabled for child in children)
    return replace(tree, enabled=enabled, children=children)


def iter_projects(tree: Project) -> Iterable[Project]:
    """Yield the nodes of the tree in pre-order."""
    yield tree
    for child in tree.children:
        yield from iter_projects(child)
