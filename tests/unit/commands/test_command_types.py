"""Tests for command spec parsing, rendering and argument forwarding."""

from __future__ import annotations

from pathlib import Path

import pytest

from dia.commands.args import resolve_args, show_command
from dia.commands.types import (
    ArgSpec,
    ChunkedCommand,
    LiteralCommand,
    OptionSpec,
    ParallelCommand,
    SequenceCommand,
    TemplatedCommand,
    VarSpec,
    parse_command,
)


def test_parse_command_variants() -> None:
    assert parse_command("make") == LiteralCommand("make")
    assert parse_command(["cat log", "grep x"]) == SequenceCommand(("cat log", "grep x"))
    assert parse_command({"chunks": ["a", "b"], "noSpaces": True}) == ChunkedCommand(("a", "b"), True)
    assert parse_command({"parallel": ["a", "b"], "panes": True, "closeOnDone": True}) == ParallelCommand(
        items=("a", "b"), panes=True, close_on_done=True
    )


def test_parse_templated_command() -> None:
    spec = parse_command(
        {
            "command": "echo ${greeting} ${name}",
            "path": "sub",
            "vars": [{"name": "greeting", "value": "hi"}],
            "args": [{"name": "name", "type": "string", "required": True}],
            "options": [{"name": "loud", "type": "boolean", "alias": "l"}],
        }
    )

    assert spec == TemplatedCommand(
        command="echo ${greeting} ${name}",
        path="sub",
        vars=(VarSpec("greeting", "hi"),),
        args=(ArgSpec("name", "string", True),),
        options=(OptionSpec("loud", "boolean", "l"),),
    )


def test_parse_command_rejects_unknown_shapes() -> None:
    with pytest.raises(ValueError, match="Unrecognized command entry"):
        parse_command({"nope": 1})


def test_resolve_args_anchors_relative_paths() -> None:
    args = resolve_args(Path("/repo"), ["src/a.py", "-x", "--out=a/b", "/abs/p", "plain", "'q/x'"])

    assert args == ["/repo/src/a.py", "-x", "--out=a/b", "/abs/p", "plain", "'q/x'"]


def test_show_command_renders_each_variant() -> None:
    assert show_command(LiteralCommand("make")) == "make"
    assert show_command(ChunkedCommand(("a", "b"))) == "a b"
    assert show_command(SequenceCommand(("a", "b"))) == "a | b"
    assert show_command(ParallelCommand(("a", "b"), before="prep", after="done")) == "prep > a & b > done"
    assert (
        show_command(
            TemplatedCommand(
                command="ship",
                args=(ArgSpec("target"),),
                options=(OptionSpec("env", "array"),),
            )
        )
        == "ship <target:string> --env:array"
    )
