"""Schema validation for dia configuration files using package data."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files
from typing import Any

from jsonschema.validators import Draft202012Validator

CONFIG_SCHEMA_NAME = "dia_config"


@lru_cache(maxsize=None)
def get_schema(schema_name: str) -> dict[str, Any]:
    """Load a schema shipped in the ``dia.schemas`` package.

    Raises:
        KeyError: If the schema is not part of the package data
    """
    resource = files("dia.schemas") / f"{schema_name}.schema.json"
    if not resource.is_file():
        raise KeyError(f"Schema not found in package data: {schema_name}")
    return json.loads(resource.read_text(encoding="utf-8"))


def validate_data(data: Any, schema_name: str = CONFIG_SCHEMA_NAME) -> tuple[bool, list[str]]:
    """Validate data against a packaged schema.

    Returns:
        Tuple of (is_valid, error_messages)
    """
    validator = Draft202012Validator(get_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])

    if errors:
        return False, [
            f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
            for e in errors
        ]

    return True, []
