"""Tests for per-directory configuration resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dia.commands.types import LiteralCommand, ParallelCommand, SequenceCommand
from dia.config import DirConfig, get_config_name, parse_config, parse_config_dir
from dia.errors import ConfigValidationError


def test_reads_config_file(tmp_path: Path, write_config) -> None:
    write_config(
        tmp_path,
        {
            "projects": {"web": "apps/web"},
            "exports": {"svc": ["web"]},
            "commands": {"build": "make", "ci": ["lint", "test"], "dev": {"parallel": ["a", "b"]}},
        },
    )

    config = parse_config_dir(tmp_path, "dia.json")

    assert config.projects == {"web": "apps/web"}
    assert config.exports == {"svc": ["web"]}
    assert config.commands == {
        "build": LiteralCommand("make"),
        "ci": SequenceCommand(("lint", "test")),
        "dev": ParallelCommand(("a", "b")),
    }


def test_reads_yaml_config(tmp_path: Path) -> None:
    (tmp_path / "dia.yaml").write_text("commands:\n  test: pytest -q\n", encoding="utf-8")

    config = parse_config_dir(tmp_path, "dia.yaml")

    assert config.commands == {"test": LiteralCommand("pytest -q")}


def test_package_json_scripts_get_install(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "x", "scripts": {"test": "jest"}}), encoding="utf-8"
    )

    config = parse_config_dir(tmp_path, "dia.json")

    assert list(config.commands) == ["install", "test"]
    assert config.commands["install"] == LiteralCommand("npm i")


def test_package_json_script_overrides_install(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"scripts": {"install": "pnpm install"}}), encoding="utf-8"
    )

    config = parse_config_dir(tmp_path, "dia.json")

    assert config.commands == {"install": LiteralCommand("pnpm install")}


def test_package_json_without_scripts_is_empty(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text('{"name": "x"}', encoding="utf-8")

    assert parse_config_dir(tmp_path, "dia.json") == DirConfig()


def test_config_file_takes_precedence_over_package_json(tmp_path: Path, write_config) -> None:
    write_config(tmp_path, {"commands": {"build": "make"}})
    (tmp_path / "package.json").write_text('{"scripts": {"test": "jest"}}', encoding="utf-8")

    config = parse_config_dir(tmp_path, "dia.json")

    assert list(config.commands) == ["build"]


def test_missing_files_yield_empty_config(tmp_path: Path) -> None:
    config = parse_config_dir(tmp_path, "dia.json")

    assert config == DirConfig()


@pytest.mark.parametrize(
    "content",
    [
        '{"commands": {"x": 1}}',
        '{"projects": {"a": 3}}',
        '[1, 2]',
        "{not json",
    ],
)
def test_invalid_config_is_reported_and_empty(tmp_path: Path, capsys, content: str) -> None:
    (tmp_path / "dia.json").write_text(content, encoding="utf-8")

    config = parse_config_dir(tmp_path, "dia.json")

    assert config == DirConfig()
    assert "Invalid dia config" in capsys.readouterr().err


def test_parse_config_raises_with_schema_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        parse_config(tmp_path / "dia.json", {"commands": {"dev": {"parallel": "a"}}})

    assert excinfo.value.path == tmp_path / "dia.json"
    assert excinfo.value.errors


def test_config_name_can_be_overridden(monkeypatch) -> None:
    monkeypatch.delenv("DIA_CONFIG_NAME", raising=False)
    assert get_config_name() == "dia.json"

    monkeypatch.setenv("DIA_CONFIG_NAME", "workspace.yml")
    assert get_config_name() == "workspace.yml"
