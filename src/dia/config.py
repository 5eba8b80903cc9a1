"""Per-directory dia configuration loader.

Resolution order for a directory:
1. ``<dir>/<config_name>`` (JSON, or YAML when the name ends in .yaml/.yml)
2. ``<dir>/package.json`` scripts, with an injected ``install`` command
3. An empty configuration

Invalid files are reported and treated as empty so that tree construction
can continue.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dia import DEFAULT_CONFIG_NAME
from dia.commands.types import CommandSpec, parse_command
from dia.errors import ConfigValidationError
from dia.schemas.validator import validate_data
from dia.ui import debug, report_error

PACKAGE_FILE = "package.json"
DEFAULT_INSTALL_COMMAND = "npm i"
YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class DirConfig:
    """Resolved configuration for a single directory."""

    projects: dict[str, str | list[str]] = field(default_factory=dict)
    exports: dict[str, str | list[str]] = field(default_factory=dict)
    commands: dict[str, CommandSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DirConfig":
        """Build a DirConfig from an already validated mapping."""
        return cls(
            projects=dict(data.get("projects", {})),
            exports=dict(data.get("exports", {})),
            commands={k: parse_command(v) for k, v in data.get("commands", {}).items()},
        )


def get_config_name() -> str:
    return os.getenv("DIA_CONFIG_NAME", DEFAULT_CONFIG_NAME)


def parse_config_dir(dir_path: Path, config_name: str) -> DirConfig:
    """Resolve the configuration declared in ``dir_path``.

    Never raises for malformed files: a ConfigValidationError is reported on
    the error channel and an empty configuration is returned instead.
    """
    config_file = dir_path / config_name
    if config_file.is_file():
        try:
            return parse_config(config_file, _load_file(config_file))
        except ConfigValidationError as exc:
            report_error(str(exc))
            return DirConfig()

    package_file = dir_path / PACKAGE_FILE
    if package_file.is_file():
        try:
            data = json.loads(package_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            report_error(f"Failed to parse: {package_file} {exc}")
            return DirConfig()
        scripts = data.get("scripts") if isinstance(data, dict) else None
        if scripts:
            try:
                return parse_config(
                    package_file,
                    {"commands": {"install": DEFAULT_INSTALL_COMMAND, **scripts}},
                )
            except ConfigValidationError as exc:
                report_error(str(exc))
                return DirConfig()

    return DirConfig()


def parse_config(path: Path, data: Any) -> DirConfig:
    """Validate raw config data and convert it to a DirConfig.

    Raises:
        ConfigValidationError: If the data does not match the config schema
    """
    valid, errors = validate_data(data)
    if not valid:
        raise ConfigValidationError(path, errors)
    debug(f"config: {path}")
    return DirConfig.from_dict(data)


def _load_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in YAML_SUFFIXES:
            return yaml.safe_load(text) or {}
        return json.loads(text)
    except OSError as exc:
        raise ConfigValidationError(path, [f"unreadable: {exc}"]) from exc
    except json.JSONDecodeError as exc:
        raise ConfigValidationError(path, [f"malformed JSON: {exc}"]) from exc
    except yaml.YAMLError as exc:
        raise ConfigValidationError(path, [f"malformed YAML: {exc}"]) from exc
