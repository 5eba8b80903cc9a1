"""dia command-line front end.

The static surface (``tree``, ``all``) is a Typer app. Project groups and
their commands are generated from the discovered project tree as click
objects and mounted next to it.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import click
import typer
from rich.tree import Tree

from dia import __version__
from dia.commands.args import resolve_args, show_command
from dia.commands.resolver import resolve_command, resolve_commands
from dia.commands.types import ArgSpec, CommandAndPath, OptionSpec, TemplatedCommand
from dia.errors import DiaError, EmptyFanoutError
from dia.exec.runner import run_command
from dia.fanout import run_in_projects
from dia.project.alias import CURRENT_DIR_ALIAS, project_aliases
from dia.project.loader import Context, build_context, load_project
from dia.project.tree import Project
from dia.ui import console, report_error
from dia.utils.paths import relative_path

APP_HELP = (
    "Run project commands across a monorepo. "
    "Pass --cwd DIR or a leading path (e.g. ./services) to start from a sub-tree."
)
PASSTHROUGH_SETTINGS: dict[str, Any] = {
    "ignore_unknown_options": True,
    "allow_extra_args": True,
    "help_option_names": ["--help"],
}
CLICK_TYPES: dict[str, click.ParamType] = {
    "string": click.STRING,
    "number": click.FLOAT,
    "boolean": click.BOOL,
    "array": click.STRING,
}

cli = typer.Typer(
    name="dia",
    help=APP_HELP,
    no_args_is_help=True,
    add_completion=False,
)


@dataclass(frozen=True)
class DiaState:
    """Invocation context and project tree shared with every command."""

    context: Context
    project: Project


def _state(ctx: click.Context) -> DiaState:
    state = ctx.find_object(DiaState)
    if state is None:
        raise click.UsageError("dia was started without a project tree")
    return state


@cli.command(name="tree")
def tree_cmd(ctx: typer.Context) -> None:
    """Show enabled projects with their aliases and commands."""
    state = _state(ctx)
    console.print(render_tree(state.context, state.project))


@cli.command(name="all", context_settings=PASSTHROUGH_SETTINGS)
def all_cmd(
    ctx: typer.Context,
    command: str = typer.Argument(..., help="Command to run in all projects"),
    panes: bool = typer.Option(
        False,
        "--panes",
        "-p",
        help="Run command in all projects with split panes",
    ),
    sequence: bool = typer.Option(
        False,
        "--sequence",
        "-s",
        help="Run command in all projects in sequence",
    ),
) -> None:
    """Run command in all projects that have it."""
    state = _state(ctx)
    args = resolve_args(state.context.git_root, ctx.args)

    try:
        code = run_in_projects(
            state.context.git_root,
            replace(state.project, commands={}),
            command,
            args,
            state.context.tool_name,
            panes=panes,
            sequence=sequence,
        )
    except EmptyFanoutError as exc:
        parent = ctx.parent or ctx
        typer.echo(parent.get_help())
        report_error(str(exc))
        raise typer.Exit(0) from exc
    except DiaError as exc:
        report_error(str(exc))
        raise typer.Exit(1) from exc

    raise typer.Exit(code)


class ProjectGroup(click.Group):
    """Click group whose sub-projects are also reachable through aliases."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.aliases: dict[str, str] = {}

    def add_project(self, group: click.Group, aliases: list[str]) -> None:
        self.add_command(group)
        for alias in aliases:
            self.aliases.setdefault(alias, group.name or "")

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is None and cmd_name in self.aliases:
            command = super().get_command(ctx, self.aliases[cmd_name])
        return command


def build_cli(context: Context, project: Project) -> ProjectGroup:
    """Assemble the full command tree for one invocation."""
    state = DiaState(context=context, project=project)
    top = ProjectGroup(
        name=context.tool_name,
        help=APP_HELP,
        no_args_is_help=True,
        context_settings={"obj": state},
    )

    static = typer.main.get_command(cli)
    if isinstance(static, click.Group):
        for name, command in static.commands.items():
            if name == "all" and not context.at_git_root:
                continue
            top.add_command(command, name)

    apply_tree(state, project, top, is_root=True)
    click.version_option(__version__, prog_name=context.tool_name)(top)
    return top


def apply_tree(
    state: DiaState,
    project: Project,
    group: ProjectGroup,
    *,
    is_root: bool = False,
    name: str | None = None,
) -> None:
    """Mount an enabled project, its sub-projects and commands onto ``group``.

    The root project is not a group of its own: its children and commands
    are mounted on ``group`` directly. Sibling projects sharing a name (one
    project declared at several locations) are mounted as
    ``<name>:<location>`` instead, with the location relative to the parent.
    """
    if not project.enabled:
        return

    if is_root:
        target = group
    else:
        rel = relative_path(state.context.git_root, project.path) or "."
        target = ProjectGroup(name=name or project.name, help=f"Project {rel}", no_args_is_help=True)

    shared = _shared_names(project.children)
    for child in project.children:
        child_name = None
        if child.name in shared:
            child_name = f"{child.name}:{os.path.relpath(child.path, project.path)}"
        apply_tree(state, child, target, name=child_name)
    apply_commands(state, project, target)

    if not is_root:
        aliases = project_aliases(project.name, project.path, state.context.curr_path)
        if name:
            aliases = [a for a in aliases if a == CURRENT_DIR_ALIAS]
        group.add_project(target, aliases)


def _shared_names(children: tuple[Project, ...]) -> set[str]:
    names = [child.name for child in children if child.enabled]
    return {n for n in names if names.count(n) > 1}


def apply_commands(state: DiaState, project: Project, group: click.Group) -> None:
    for name, (_, entry) in resolve_commands(project.commands).items():
        group.add_command(make_command(state, name, entry))
    group.add_command(make_run_command(state, project))


def make_command(state: DiaState, name: str, entry: CommandAndPath) -> click.Command:
    """Click command for one resolved project command."""
    spec = entry.command
    help_text = show_command(spec)

    if isinstance(spec, TemplatedCommand):

        def templated(**kwargs: Any) -> None:
            bound = {a.name: kwargs.get(_dest(a.name)) for a in spec.args}
            bound.update({o.name: kwargs.get(_dest(o.name)) for o in spec.options})
            _execute(state, entry, [], bound)

        params: list[click.Parameter] = [_argument(a) for a in spec.args]
        params.extend(_option(o) for o in spec.options)
        return click.Command(name, params=params, callback=templated, help=help_text)

    def passthrough(args: tuple[str, ...]) -> None:
        _execute(state, entry, resolve_args(state.context.root_path, args), None)

    return click.Command(
        name,
        params=[click.Argument(["args"], nargs=-1, type=click.UNPROCESSED)],
        callback=passthrough,
        help=help_text,
        context_settings=PASSTHROUGH_SETTINGS,
    )


def make_run_command(state: DiaState, project: Project) -> click.Command:
    """``run [shell...]``: run a named command or any shell command in the project."""

    def run(shell: tuple[str, ...]) -> None:
        if not shell:
            return
        entry = resolve_command(shell[0], project.commands, project.path)
        _execute(state, entry, resolve_args(state.context.root_path, shell[1:]), None)

    return click.Command(
        "run",
        params=[click.Argument(["shell"], nargs=-1, type=click.UNPROCESSED)],
        callback=run,
        help="Run a shell command in this project",
        context_settings=PASSTHROUGH_SETTINGS,
    )


def _execute(
    state: DiaState,
    entry: CommandAndPath,
    args: list[str],
    params: dict[str, Any] | None,
) -> None:
    try:
        code = run_command(state.context.git_root, entry, args, params)
    except DiaError as exc:
        report_error(str(exc))
        raise typer.Exit(1) from exc
    raise typer.Exit(code)


def _dest(name: str) -> str:
    dest = re.sub(r"\W", "_", name).lower()
    return f"_{dest}" if dest[:1].isdigit() else dest


def _argument(arg: ArgSpec) -> click.Argument:
    return click.Argument(
        [_dest(arg.name)],
        nargs=-1 if arg.type == "array" else 1,
        required=arg.required,
        type=CLICK_TYPES.get(arg.type, click.STRING),
        metavar=arg.name.upper(),
    )


def _option(option: OptionSpec) -> click.Option:
    decls = [f"--{option.name}"]
    if option.alias:
        decls.append(f"-{option.alias}" if len(option.alias) == 1 else f"--{option.alias}")
    decls.append(_dest(option.name))

    if option.type == "boolean":
        return click.Option(decls, is_flag=True, required=option.required)
    if option.type == "array":
        return click.Option(decls, multiple=True, required=option.required)
    return click.Option(decls, type=CLICK_TYPES.get(option.type, click.STRING), required=option.required)


def render_tree(context: Context, project: Project) -> Tree:
    """Rich tree of enabled projects, aliases and command names."""
    tree = Tree(f"[bold]{project.name}[/bold] [dim]{project.path}[/dim]")
    _render_node(tree, context, project)
    return tree


def _render_node(node: Tree, context: Context, project: Project) -> None:
    for name in resolve_commands(project.commands):
        node.add(f"[green]{name}[/green]")
    for child in project.children:
        if not child.enabled:
            continue
        aliases = project_aliases(child.name, child.path, context.curr_path)
        label = f"[cyan]{child.name}[/cyan]"
        if aliases:
            label += f" [dim]({', '.join(aliases)})[/dim]"
        _render_node(node.add(label), context, child)


def main(argv: list[str] | None = None) -> None:
    """Console entry point."""
    args = sys.argv[1:] if argv is None else argv
    try:
        context = build_context(args, Path.cwd())
        project = load_project(context)
    except DiaError as exc:
        report_error(str(exc))
        raise SystemExit(1) from exc

    build_cli(context, project).main(args=context.args, prog_name=context.tool_name)


if __name__ == "__main__":
    main()
