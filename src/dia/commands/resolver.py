"""Resolution of command keys into structured command specs.

A command key may carry its own grammar, for example::

    "deploy [--env,-e] --region target [files]"

The first token is the command name; every following token declares an
argument or option:

- ``[--name]`` / ``[--name,-alias]``: repeatable option
- ``--name`` / ``--name,-alias``: single-valued option
- ``[name]``: variadic positional
- anything else: single positional
"""

from __future__ import annotations

import re
from pathlib import Path

from dia.commands.types import (
    ArgSpec,
    ChunkedCommand,
    CommandAndPath,
    CommandGrammar,
    LiteralCommand,
    OptionSpec,
    TemplatedCommand,
)

VARIADIC_OPTION_RE = re.compile(r"^\[--([^,\]]+)(?:,-([^\]]+))?\]$")
OPTION_RE = re.compile(r"^--([^,]+)(?:,-(.+))?$")
VARIADIC_ARG_RE = re.compile(r"^\[(.+)\]$")


def decompose_key(key: str) -> CommandGrammar:
    """Split a command key into its head and declared args/options."""
    head, *tokens = key.split()
    args: list[ArgSpec] = []
    options: list[OptionSpec] = []

    for token in tokens:
        variadic_option = VARIADIC_OPTION_RE.match(token)
        option = OPTION_RE.match(token)
        variadic_arg = VARIADIC_ARG_RE.match(token)

        if variadic_option:
            options.append(
                OptionSpec(name=variadic_option.group(1), alias=variadic_option.group(2), type="array")
            )
        elif option:
            options.append(OptionSpec(name=option.group(1), alias=option.group(2), type="string"))
        elif variadic_arg:
            args.append(ArgSpec(name=variadic_arg.group(1), type="array"))
        else:
            args.append(ArgSpec(name=token, type="string", required=True))

    return CommandGrammar(head=head, args=tuple(args), options=tuple(options))


def resolve_entry(key: str, entry: CommandAndPath) -> tuple[str, CommandAndPath]:
    """Normalize one command map entry into the name it is invoked by.

    Chunked commands are joined into literals. A literal registered under a
    multi-token key becomes a templated command keyed by the key's head.
    """
    spec = entry.command
    if isinstance(spec, ChunkedCommand):
        spec = LiteralCommand(spec.joined())

    if isinstance(spec, LiteralCommand) and len(key.split()) > 1:
        grammar = decompose_key(key)
        templated = TemplatedCommand(
            command=spec.command,
            args=grammar.args,
            options=grammar.options,
        )
        return grammar.head, CommandAndPath(command=templated, path=entry.path)

    return key, CommandAndPath(command=spec, path=entry.path)


def resolve_commands(commands: dict[str, CommandAndPath]) -> dict[str, tuple[str, CommandAndPath]]:
    """Resolve a whole command map, sorted by key.

    Returns:
        Mapping of invocation name to (original key, resolved command)
    """
    resolved: dict[str, tuple[str, CommandAndPath]] = {}
    for key in sorted(commands):
        name, entry = resolve_entry(key, commands[key])
        resolved[name] = (key, entry)
    return resolved


def resolve_command(
    name: str,
    commands: dict[str, CommandAndPath],
    project_path: Path,
) -> CommandAndPath:
    """Look up the command invoked as ``name`` in a project's command map.

    A verbatim key match wins; otherwise entries are matched by the head of
    their key grammar. Unknown names are forwarded as an opaque literal run
    in ``project_path``.
    """
    if name in commands:
        return resolve_entry(name, commands[name])[1]

    resolved = resolve_commands(commands)
    if name in resolved:
        return resolved[name][1]

    return CommandAndPath(command=LiteralCommand(name), path=project_path)
