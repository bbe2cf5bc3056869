"""Configuration load/store.

This module reads the kicker configuration file and writes the default
configuration when bootstrapping. The file format is determined by
extension: ``.toml`` (the default), ``.yaml``/``.yml`` or ``.json``.
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
import yaml
from pydantic import ValidationError

from kicker.errors import ConfigMalformedError, ConfigMissingError
from kicker.packages.defaults import default_config
from kicker.packages.schema import KickerConfig

logger = logging.getLogger(__name__)

TOML_SUFFIXES = (".toml",)
YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def _parse_document(path: Path, text: str) -> Any:
    suffix = path.suffix.lower()
    if suffix in TOML_SUFFIXES:
        return tomllib.loads(text)
    if suffix in YAML_SUFFIXES:
        return yaml.safe_load(text)
    if suffix in JSON_SUFFIXES:
        return json.loads(text)
    raise ValueError(
        f"Unsupported file extension '{suffix}'. Use .toml, .yaml, .yml, or .json"
    )


def parse_config_data(data: dict[str, Any]) -> KickerConfig:
    """Parse and validate configuration data using the schema.

    Every package's revision is checked as well, so a URL without a
    revision fragment is rejected at load time.

    Args:
        data: Dictionary containing configuration data.

    Returns:
        Validated KickerConfig instance.

    Raises:
        pydantic.ValidationError: If data does not match schema.
        InvalidRevisionError: If a package URL has no revision fragment.
    """
    config = KickerConfig.model_validate(data)
    for package in config.packages:
        _ = package.revision
    return config


def load_config(path: Path) -> KickerConfig:
    """Load and validate the configuration file.

    Args:
        path: Path to the configuration file.

    Returns:
        Validated KickerConfig instance.

    Raises:
        ConfigMissingError: If the file does not exist.
        ConfigMalformedError: If the file cannot be read, parsed or validated.
        InvalidRevisionError: If a package URL has no revision fragment.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigMissingError(path) from e
    except UnicodeDecodeError as e:
        raise ConfigMalformedError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigMalformedError(f"Cannot read {path}: {e}") from e

    try:
        data = _parse_document(path, text)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigMalformedError(f"Parse error in {path}: {e}") from e
    except ValueError as e:
        raise ConfigMalformedError(str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigMalformedError(
            f"Expected a mapping in {path}, got {type(data).__name__}"
        )

    try:
        config = parse_config_data(data)
    except ValidationError as e:
        raise ConfigMalformedError(f"Validation error in {path}: {e}") from e

    logger.info(
        "Loaded configuration from %s (%d packages, %d images)",
        path,
        len(config.packages),
        len(config.images),
    )
    return config


def config_to_dict(config: KickerConfig) -> dict[str, Any]:
    """Convert a configuration to a plain dict using the on-disk keys."""
    return config.model_dump(mode="json", by_alias=True, exclude_none=True)


def config_to_toml_string(config: KickerConfig) -> str:
    """Convert a configuration to a TOML string.

    Args:
        config: Configuration to convert.

    Returns:
        TOML string representation.
    """
    return tomli_w.dumps(config_to_dict(config))


def export_config(config: KickerConfig, path: Path) -> None:
    """Write a configuration to a file (TOML, YAML or JSON by extension).

    Args:
        config: Configuration to write.
        path: Output file path.

    Raises:
        ValueError: If file extension is not supported.
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()
    if suffix in TOML_SUFFIXES:
        content = tomli_w.dumps(data)
    elif suffix in YAML_SUFFIXES:
        content = yaml.dump(
            data, default_flow_style=False, allow_unicode=True, sort_keys=False
        )
    elif suffix in JSON_SUFFIXES:
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    else:
        raise ValueError(
            f"Unsupported file extension '{suffix}'. Use .toml, .yaml, .yml, or .json"
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_default_config(path: Path, overwrite: bool = False) -> KickerConfig:
    """Write the default configuration to a file.

    Args:
        path: Output file path.
        overwrite: Replace an existing file.

    Returns:
        The configuration that was written.

    Raises:
        FileExistsError: If the file exists and overwrite is False.
    """
    if path.exists() and not overwrite:
        raise FileExistsError(f"Configuration file already exists: {path}")

    config = default_config()
    export_config(config, path)
    logger.info("Wrote default configuration to %s", path)
    return config


__all__ = [
    "config_to_dict",
    "config_to_toml_string",
    "export_config",
    "load_config",
    "parse_config_data",
    "write_default_config",
]
