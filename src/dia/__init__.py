"""dia - monorepo task orchestration."""

__version__ = "0.4.0"

TOOL_NAME = "dia"
DEFAULT_CONFIG_NAME = "dia.json"
