"""Workspace assembly module.

This module handles:
- Artifact specifications and collection
- The workspace directory layout and package families
- Assembling the workspace from build outputs and static files
"""

from kicker.workspace.artifacts import ArtifactSpec, collect_artifacts
from kicker.workspace.layout import PackageFamily, WorkspaceLayout
from kicker.workspace.service import prepare_workspace

__all__ = [
    "ArtifactSpec",
    "PackageFamily",
    "WorkspaceLayout",
    "collect_artifacts",
    "prepare_workspace",
]
