# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen
ElmBenchConfig.

The loading pipeline is linear:
  1. Read the file
  2. Parse it as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Return the frozen config object

Any failure stops right there with a clear error. There are no fallbacks:
a config that can't be trusted shouldn't drive a benchmark run.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from elmbench.config.exceptions import ConfigLoadError, ConfigValidationError
from elmbench.config.schema import ElmBenchConfig


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    An empty file is treated as an empty mapping, so a blank config is the
    same as no config.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_config(config_path: Optional[Path] = None) -> ElmBenchConfig:
    """
    Load and validate a config file into an ElmBenchConfig.

    With no path, the all-defaults config is returned.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (wrong types, unknown keys).
    """
    if config_path is None:
        return ElmBenchConfig()

    raw_data = _read_yaml_file(config_path)

    try:
        return ElmBenchConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err
