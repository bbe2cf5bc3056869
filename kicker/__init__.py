"""Kicker - prepare a multi-repository workspace for deployment.

This package synchronizes a set of source repositories to pinned revisions,
builds each one with its package-specific procedure, and stages the build
outputs into a deterministic workspace directory layout.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
