"""Pytest configuration and fixtures for dia tests."""
import json
from pathlib import Path

import pytest


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)

    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))

    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'dia' (the package) not 'src/dia' (filesystem path).",
            returncode=1
        )


@pytest.fixture
def write_config():
    """Write a dia.json (or any named config) into a directory, creating it."""

    def _write(directory: Path, data: dict, name: str = "dia.json") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
