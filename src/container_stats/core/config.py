"""Configuration loading utilities.

Supports YAML and JSON configuration files with schema validation. Values given
on the command line override the file's values before validation, so a file
may omit required fields the command line provides.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from container_stats.core.schemas import CollectorConfig


def read_config_file(path: Path | str) -> dict[str, Any]:
    """Read a YAML or JSON configuration file without validating it.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or the top level is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return data


def load_config(
    path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
) -> CollectorConfig:
    """Load and validate a collector configuration.

    Args:
        path: Optional path to YAML or JSON configuration file
        overrides: Values taking precedence over the file; None values are ignored

    Returns:
        Validated CollectorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    data = read_config_file(path) if path is not None else {}
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return CollectorConfig.model_validate(data)
