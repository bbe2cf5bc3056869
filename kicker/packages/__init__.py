"""Package and image declarations.

This module handles:
- Configuration schema validation (Pydantic)
- The default configuration
- Loading and writing the configuration file
"""

from kicker.packages.defaults import default_config
from kicker.packages.io import load_config, write_default_config
from kicker.packages.schema import ImageSpec, KickerConfig, PackageSpec, SystemSettings

__all__ = [
    "ImageSpec",
    "KickerConfig",
    "PackageSpec",
    "SystemSettings",
    "default_config",
    "load_config",
    "write_default_config",
]
