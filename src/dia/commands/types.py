"""Command spec variants for dia configuration entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Union

ValueType = Literal["boolean", "number", "string", "array"]


@dataclass(frozen=True)
class LiteralCommand:
    """A plain shell command string."""

    command: str


@dataclass(frozen=True)
class SequenceCommand:
    """Commands piped into each other."""

    commands: tuple[str, ...]


@dataclass(frozen=True)
class ParallelCommand:
    """Commands run concurrently, backgrounded or in multiplexer panes."""

    items: tuple[str, ...]
    before: str | None = None
    after: str | None = None
    close_on_done: bool = False
    sync: bool = False
    panes: bool = False
    sequence: bool = False


@dataclass(frozen=True)
class ChunkedCommand:
    """A command assembled from chunks, joined with or without spaces."""

    chunks: tuple[str, ...]
    no_spaces: bool = False

    def joined(self) -> str:
        return ("" if self.no_spaces else " ").join(self.chunks)


@dataclass(frozen=True)
class VarSpec:
    name: str
    value: str


@dataclass(frozen=True)
class ArgSpec:
    name: str
    type: ValueType = "string"
    required: bool = False


@dataclass(frozen=True)
class OptionSpec:
    name: str
    type: ValueType = "string"
    alias: str | None = None
    required: bool = False


@dataclass(frozen=True)
class TemplatedCommand:
    """A parameterized command string with `${...}` placeholders."""

    command: str
    path: str | None = None
    vars: tuple[VarSpec, ...] = ()
    args: tuple[ArgSpec, ...] = ()
    options: tuple[OptionSpec, ...] = ()


CommandSpec = Union[
    LiteralCommand,
    SequenceCommand,
    ParallelCommand,
    ChunkedCommand,
    TemplatedCommand,
]


@dataclass(frozen=True)
class CommandAndPath:
    """A command spec paired with the absolute directory it runs in."""

    command: CommandSpec
    path: Path


@dataclass(frozen=True)
class CommandGrammar:
    """Structured grammar decomposed from a multi-token command key."""

    head: str
    args: tuple[ArgSpec, ...] = field(default_factory=tuple)
    options: tuple[OptionSpec, ...] = field(default_factory=tuple)


def parse_command(raw: Any) -> CommandSpec:
    """Convert a validated config entry into its command variant.

    Args:
        raw: A string, list of strings, or mapping taken from the
            ``commands`` section of a dia config

    Returns:
        The matching command variant

    Raises:
        ValueError: If the entry has none of the known shapes
    """
    if isinstance(raw, str):
        return LiteralCommand(raw)

    if isinstance(raw, list):
        return SequenceCommand(tuple(raw))

    if isinstance(raw, dict):
        if "parallel" in raw:
            return ParallelCommand(
                items=tuple(raw["parallel"]),
                before=raw.get("before"),
                after=raw.get("after"),
                close_on_done=bool(raw.get("closeOnDone", False)),
                sync=bool(raw.get("sync", False)),
                panes=bool(raw.get("panes", False)),
                sequence=bool(raw.get("sequence", False)),
            )
        if "chunks" in raw:
            return ChunkedCommand(
                chunks=tuple(raw["chunks"]),
                no_spaces=bool(raw.get("noSpaces", False)),
            )
        if "command" in raw:
            return TemplatedCommand(
                command=raw["command"],
                path=raw.get("path"),
                vars=tuple(VarSpec(name=v["name"], value=v["value"]) for v in raw.get("vars", [])),
                args=tuple(
                    ArgSpec(
                        name=a["name"],
                        type=a.get("type", "string"),
                        required=bool(a.get("required", False)),
                    )
                    for a in raw.get("args", [])
                ),
                options=tuple(
                    OptionSpec(
                        name=o["name"],
                        type=o.get("type", "string"),
                        alias=o.get("alias"),
                        required=bool(o.get("required", False)),
                    )
                    for o in raw.get("options", [])
                ),
            )

    raise ValueError(f"Unrecognized command entry: {raw!r}")
