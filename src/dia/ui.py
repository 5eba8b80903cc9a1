from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text

console = Console()
err_console = Console(stderr=True)


def verbose_enabled() -> bool:
    return os.getenv("DIA_VERBOSE", "0") == "1"


def color_enabled() -> bool:
    return os.getenv("DIA_COLOR", "1") == "1"


def report_error(msg: str) -> None:
    """Write a reported error to stderr, padded with blank lines."""
    err_console.print()
    err_console.print(Text(msg, style="red" if color_enabled() else ""))
    err_console.print()


def debug(msg: str) -> None:
    if not verbose_enabled():
        return
    err_console.print(Text(msg, style="dim"))


def print_command(rel_path: str, rendered: str) -> None:
    """Print the `<project>: <command>` banner shown before each spawn."""
    line = Text()
    line.append(f"{rel_path}:", style="cyan" if color_enabled() else "")
    line.append(" ")
    line.append(rendered, style="green" if color_enabled() else "")
    console.print(line, soft_wrap=True, highlight=False)
