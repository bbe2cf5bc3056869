"""Build orchestration module.

This module handles:
- Build strategy variants (native, make + packaging, container make,
  dependency copy)
- The registry of known packages
- Dispatching builds over the configured packages
"""

from kicker.builds.service import build_package, build_packages
from kicker.builds.strategies import DEFAULT_REGISTRY, resolve_strategy

__all__ = ["DEFAULT_REGISTRY", "build_package", "build_packages", "resolve_strategy"]
