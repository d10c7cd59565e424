"""Load run configuration from YAML files."""

from pathlib import Path
from typing import Any

import yaml

from boostsec.classtest.models.runner_config import RunnerConfig


def load_runner_config(config_file: Path) -> RunnerConfig:
    """Load runner configuration from a YAML file.

    Relative ``root`` values are resolved against the directory holding the
    configuration file.

    Args:
        config_file: Path to the YAML configuration file

    Returns:
        Parsed runner configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML is invalid or doesn't match schema

    """
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    try:
        with config_file.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_file}: {e}") from e

    if data is None:
        raise ValueError(f"Empty config file: {config_file}")

    try:
        config = RunnerConfig.model_validate(data)
    except Exception as e:
        raise ValueError(f"Invalid runner config schema in {config_file}: {e}") from e

    if not config.root.is_absolute():
        config = config.model_copy(update={"root": config_file.parent / config.root})
    return config


def merge_overrides(config: RunnerConfig, **overrides: Any) -> RunnerConfig:
    """Return ``config`` with every override that is not None or empty applied."""
    updates = {
        key: value for key, value in overrides.items() if value not in (None, [], ())
    }
    if not updates:
        return config
    return RunnerConfig.model_validate({**config.model_dump(), **updates})
