"""Workspace assembly.

Assembles the workspace in a fixed order:
1. Create the directory skeleton
2. Stage static files (private key) and run the init script once
3. Copy pre-built binaries into ``bin/``
4. Collect each package family's scripts

Every copy overwrites its destination, so re-running with unchanged
inputs leaves an identical tree.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from kicker.runner import CommandRunner
from kicker.workspace.artifacts import collect_artifacts, copy_artifact
from kicker.workspace.layout import (
    DEFAULT_BINARIES,
    DEFAULT_FAMILIES,
    PRIVATE_KEY_FILE,
    PackageFamily,
    WorkspaceLayout,
)

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceResult:
    """Result of assembling the workspace.

    Attributes:
        workspace_dir: Root of the assembled workspace.
        staged: Every file written into the workspace, in order.
    """

    workspace_dir: Path
    staged: list[Path] = field(default_factory=list)


def create_workspace_folders(layout: WorkspaceLayout) -> list[Path]:
    """Create the workspace directory skeleton."""
    dirs = layout.skeleton()
    for path in dirs:
        path.mkdir(parents=True, exist_ok=True)
    return dirs


def provide_basic_files(
    layout: WorkspaceLayout, runner: CommandRunner | None = None
) -> list[Path]:
    """Stage the private key and run the environment init script.

    Raises:
        ArtifactMissingError: If the private key is missing.
        CommandFailedError: If the init script fails.
    """
    if runner is None:
        runner = CommandRunner()

    staged = [
        copy_artifact(
            PRIVATE_KEY_FILE,
            layout.basic_files_dir / PRIVATE_KEY_FILE,
            layout.deploy_dir / PRIVATE_KEY_FILE,
        )
    ]
    logger.info("Running init script %s", layout.init_script)
    runner.run_shell(
        f"sh {shlex.quote(str(layout.init_script))}", cwd=layout.project_root
    )
    return staged


def provide_binaries(
    layout: WorkspaceLayout, binaries: Mapping[str, str] = DEFAULT_BINARIES
) -> list[Path]:
    """Copy pre-built binaries flat into ``bin/``.

    Args:
        layout: Workspace layout.
        binaries: Binary name to path relative to the packages root.

    Raises:
        ArtifactMissingError: If a binary is missing.
    """
    staged = []
    for name in sorted(binaries):
        source = layout.packages_dir.joinpath(*PurePosixPath(binaries[name]).parts)
        staged.append(copy_artifact(name, source, layout.bin_dir / name))
    return staged


def provide_family(layout: WorkspaceLayout, family: PackageFamily) -> list[Path]:
    """Collect a family's release scripts and backend set.

    Raises:
        ArtifactMissingError: If a script is missing.
    """
    logger.info("Collecting %s scripts", family.name)
    staged = collect_artifacts(
        layout.packages_dir, layout.release_scripts_dir, family.release
    )
    backend_dir = family.backend_dir(layout)
    if backend_dir is not None:
        staged.extend(collect_artifacts(layout.packages_dir, backend_dir, family.backend))
    return staged


def prepare_workspace(
    layout: WorkspaceLayout,
    runner: CommandRunner | None = None,
    families: Iterable[PackageFamily] = DEFAULT_FAMILIES,
    binaries: Mapping[str, str] = DEFAULT_BINARIES,
) -> WorkspaceResult:
    """Assemble the workspace.

    Args:
        layout: Workspace layout.
        runner: Command runner (default: a new CommandRunner).
        families: Package families to collect, in order.
        binaries: Pre-built binaries to copy into ``bin/``.

    Returns:
        WorkspaceResult listing every staged file.

    Raises:
        ArtifactMissingError: If any expected file is missing.
        CommandFailedError: If the init script fails.
    """
    logger.info("Preparing workspace in %s", layout.workspace_dir)
    result = WorkspaceResult(workspace_dir=layout.workspace_dir)

    create_workspace_folders(layout)
    result.staged.extend(provide_basic_files(layout, runner))
    result.staged.extend(provide_binaries(layout, binaries))
    for family in families:
        result.staged.extend(provide_family(layout, family))

    logger.info("Workspace ready: %d files staged", len(result.staged))
    return result


__all__ = [
    "WorkspaceResult",
    "create_workspace_folders",
    "prepare_workspace",
    "provide_basic_files",
    "provide_binaries",
    "provide_family",
]
