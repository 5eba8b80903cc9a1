"""Placeholder substitution for templated commands.

Placeholders use the ``${name}`` form and are resolved in a single pass,
so substituted text is never scanned again. For a placeholder body the
plan is, in priority order:

1. a declared var of that name (first declaration wins)
2. a declared arg of that name
3. a renamed option pattern ``${<flag> <prefix><option>}``, rendered as one
   ``<flag> <prefix><value>`` fragment per bound value
4. a plain ``${<option>}``, unless the template also carries a renamed
   pattern for the same option

Anything else is left untouched for the shell. Unbound args and options
substitute as empty strings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dia.commands.types import OptionSpec, TemplatedCommand
from dia.utils.paths import join_path

PLACEHOLDER_RE = re.compile(r"\$\{([^}]*)\}")


@dataclass(frozen=True)
class RenderedCommand:
    command: str
    cwd: Path


def render_template(
    spec: TemplatedCommand,
    params: Mapping[str, Any],
    project_path: Path,
) -> RenderedCommand:
    """Substitute vars, args and options into ``spec.command``.

    Args:
        spec: The templated command
        params: Bound argument/option values keyed by declared name
        project_path: Directory of the owning project

    Returns:
        The substituted command and the directory to run it in
    """
    return RenderedCommand(
        command=substitute(spec, params),
        cwd=join_path(project_path, spec.path) if spec.path else project_path,
    )


def substitute(spec: TemplatedCommand, params: Mapping[str, Any]) -> str:
    template = spec.command

    vars_: dict[str, str] = {}
    for var in spec.vars:
        vars_.setdefault(var.name, var.value)
    arg_names = {arg.name for arg in spec.args}
    renamed = [(option, _renamed_pattern(option)) for option in spec.options]
    renamed_in_use = {
        option.name
        for option, pattern in renamed
        if any(pattern.fullmatch(body) for body in PLACEHOLDER_RE.findall(template))
    }
    plain_options = {o.name: o for o in spec.options if o.name not in renamed_in_use}

    def _replace(match: re.Match[str]) -> str:
        body = match.group(1)
        if body in vars_:
            return vars_[body]
        if body in arg_names:
            return " ".join(_values(params.get(body)))
        for option, pattern in renamed:
            renamed_match = pattern.fullmatch(body)
            if renamed_match:
                flag, prefix = renamed_match.group(1), renamed_match.group(2)
                return " ".join(f"{flag} {prefix}{v}" for v in _values(params.get(option.name)))
        if body in plain_options:
            return " ".join(_values(params.get(body)))
        return match.group(0)

    return PLACEHOLDER_RE.sub(_replace, template)


def _renamed_pattern(option: OptionSpec) -> re.Pattern[str]:
    return re.compile(rf"(--?\S+) (.*){re.escape(option.name)}")


def _values(value: Any) -> list[str]:
    if value is None or value is False:
        return []
    if isinstance(value, (list, tuple)):
        return [_stringify(v) for v in value]
    return [_stringify(value)]


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
