"""
Configuration loader for YAML files.

Loads and validates configuration from YAML files into Pydantic models.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import CrawlConfig

DEFAULT_CONFIG_PATH = Path("configs/crawl.yaml")

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or validation error."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary.

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}", path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}", path=path)
    return data


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(data, str):
        return _ENV_PATTERN.sub(
            lambda m: os.environ.get(m.group(1), m.group(2) or ""),
            data,
        )
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


def load_crawl_config(
    path: Path | str | None = None,
    expand_env: bool = True,
) -> CrawlConfig:
    """Load crawl configuration from a YAML file.

    A missing file at the default location yields the built-in defaults;
    an explicitly given path must exist.

    Args:
        path: Path to crawl.yaml (default: configs/crawl.yaml)
        expand_env: Whether to expand environment variables

    Returns:
        Validated CrawlConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return CrawlConfig()
        path = DEFAULT_CONFIG_PATH
    path = Path(path)

    data = _load_yaml_file(path)

    if expand_env:
        data = _expand_env_vars(data)

    try:
        return CrawlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid crawl configuration in {path}",
            path=path,
            details=str(e),
        ) from e


def apply_overrides(config: CrawlConfig, **overrides: Any) -> CrawlConfig:
    """Return a copy of the config with CLI overrides applied.

    Recognized keys: start_url, output_path, headless, navigation_timeout_ms,
    max_pages, max_items, concurrency. None values are ignored.

    Raises:
        ConfigError: If an override fails validation
    """
    data = config.model_dump()
    mapping = {
        "start_url": ("start_url",),
        "max_pages": ("max_pages",),
        "max_items": ("max_items",),
        "output_path": ("output", "path"),
        "headless": ("browser", "headless"),
        "navigation_timeout_ms": ("browser", "navigation_timeout_ms"),
        "concurrency": ("enrichment", "concurrency"),
    }

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in mapping:
            raise ConfigError(f"Unknown override: {key}")
        target = data
        *parents, leaf = mapping[key]
        for part in parents:
            target = target[part]
        target[leaf] = value

    try:
        return CrawlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError("Invalid command line override", details=str(e)) from e


def validate_config_file(path: Path | str) -> list[str]:
    """Validate a configuration file without building the crawl.

    Returns:
        List of validation error messages (empty if valid)
    """
    path = Path(path)
    errors: list[str] = []

    try:
        data = _expand_env_vars(_load_yaml_file(path))
    except ConfigError as e:
        errors.append(str(e))
        return errors

    try:
        CrawlConfig.model_validate(data)
    except ValidationError as e:
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

    return errors
