"""Tests for broadcasting a command across the project tree."""

from __future__ import annotations

from pathlib import Path

import pytest

from dia import fanout
from dia.commands.types import CommandAndPath, LiteralCommand, ParallelCommand, TemplatedCommand
from dia.errors import EmptyFanoutError
from dia.fanout import collect_invocations, create_command, run_in_projects
from dia.project.tree import Project


def _cmd(path: Path, command: str = "pytest") -> CommandAndPath:
    return CommandAndPath(command=LiteralCommand(command), path=path)


def _tree(root: Path, g_commands: dict) -> Project:
    h = Project(path=root / "g" / "h", name="h", commands={"test": _cmd(root / "g" / "h")})
    g = Project(path=root / "g", name="g", commands=g_commands, children=(h,))
    other = Project(path=root / "o", name="o", commands={"test": _cmd(root / "o")})
    return Project(path=root, name="root", children=(g, other))


def test_declaring_ancestor_shadows_descendants(tmp_path: Path) -> None:
    tree = _tree(tmp_path, {"test": _cmd(tmp_path / "g")})

    assert collect_invocations(tmp_path, tree, "test", [], "dia") == ["dia g test", "dia o test"]


def test_descendants_found_when_ancestor_lacks_command(tmp_path: Path) -> None:
    tree = _tree(tmp_path, {})

    assert collect_invocations(tmp_path, tree, "test", [], "dia") == ["dia g/h test", "dia o test"]


def test_invocations_are_deduplicated(tmp_path: Path) -> None:
    twin = Project(path=tmp_path / "a", name="a", commands={"test": _cmd(tmp_path / "a")})
    tree = Project(path=tmp_path, name="root", children=(twin, twin))

    assert collect_invocations(tmp_path, tree, "test", ["-k", "x y"], "dia") == [
        "dia a test -k 'x y'"
    ]


def test_create_command_honors_working_directory_overrides(tmp_path: Path) -> None:
    templated = CommandAndPath(TemplatedCommand(command="x", path="sub"), tmp_path / "a")
    literal = CommandAndPath(LiteralCommand("make --cwd ../b all"), tmp_path / "a")
    literal_eq = CommandAndPath(LiteralCommand("make --cwd=c"), tmp_path / "a")

    assert create_command(tmp_path, tmp_path / "a", templated, "test", [], "dia") == "dia a/sub test"
    assert create_command(tmp_path, tmp_path / "a", literal, "test", [], "dia") == "dia b test"
    assert create_command(tmp_path, tmp_path / "a", literal_eq, "test", [], "dia") == "dia a/c test"
    assert create_command(tmp_path, tmp_path, _cmd(tmp_path), "test", [], "dia") == "dia test"


def test_head_match_uses_invoked_name(tmp_path: Path) -> None:
    svc = Project(
        path=tmp_path / "svc",
        name="svc",
        commands={"deploy target": _cmd(tmp_path / "svc", "ship ${target}")},
    )
    tree = Project(path=tmp_path, name="root", children=(svc,))

    assert collect_invocations(tmp_path, tree, "deploy", ["prod"], "dia") == ["dia svc deploy prod"]


def test_empty_fanout_raises(tmp_path: Path) -> None:
    with pytest.raises(EmptyFanoutError, match="No projects with command lint found"):
        run_in_projects(tmp_path, _tree(tmp_path, {}), "lint", [], "dia")


@pytest.mark.parametrize(
    ("panes", "sequence", "expected"),
    [
        (False, False, ParallelCommand(("dia g/h test", "dia o test"))),
        (False, True, ParallelCommand(("dia g/h test", "dia o test"), sequence=True)),
        (
            True,
            False,
            ParallelCommand(("dia g/h test", "dia o test"), close_on_done=True, panes=True),
        ),
    ],
)
def test_run_in_projects_builds_group(tmp_path: Path, monkeypatch, panes, sequence, expected) -> None:
    calls = []

    def _fake_run(git_root, command_and_path, args=(), params=None):
        calls.append((git_root, command_and_path))
        return 0

    monkeypatch.setattr(fanout, "run_command", _fake_run)

    code = run_in_projects(
        tmp_path, _tree(tmp_path, {}), "test", [], "dia", panes=panes, sequence=sequence
    )

    assert code == 0
    assert calls == [(tmp_path, CommandAndPath(expected, tmp_path))]
