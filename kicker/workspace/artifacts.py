"""Artifact specifications and collection.

This module handles:
- Describing build outputs by their path relative to the packages root
- Computing where each output lands in the workspace
- Copying outputs into the workspace, creating directories as needed

The first segment of an artifact's source path names the owning package and
the last is the file name; the destination is
``<target root>/<package>/<file name>``.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from kicker.errors import ArtifactMissingError

logger = logging.getLogger(__name__)

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


@dataclass(frozen=True)
class ArtifactSpec:
    """A build output to stage into the workspace.

    Attributes:
        source: Path relative to the packages root, starting with the
            owning package's directory (e.g. ``clerkb/build/debug/poa``).
        always_success: Marks the always-success script.
    """

    source: PurePosixPath
    always_success: bool = False

    def __post_init__(self) -> None:
        """Normalize and validate the source path."""
        source = PurePosixPath(self.source)
        object.__setattr__(self, "source", source)
        if source.is_absolute():
            raise ValueError(f"artifact source must be relative, got '{source}'")
        if ".." in source.parts:
            raise ValueError(f"artifact source must not contain '..', got '{source}'")
        if len(source.parts) < 2:
            raise ValueError(
                f"artifact source must be <package>/.../<file>, got '{source}'"
            )

    @property
    def package(self) -> str:
        """Name of the owning package."""
        return self.source.parts[0]

    @property
    def file_name(self) -> str:
        """File name of the artifact."""
        return self.source.name

    def source_path(self, repo_root: Path) -> Path:
        """Location of the build output under ``repo_root``."""
        return repo_root.joinpath(*self.source.parts)

    def target_path(self, target_root: Path) -> Path:
        """Destination of the artifact under ``target_root``."""
        return target_root / self.package / self.file_name


def artifact_specs(sources: Mapping[str, str]) -> dict[str, ArtifactSpec]:
    """Build ArtifactSpecs from a name to relative source path mapping."""
    return {name: ArtifactSpec(PurePosixPath(src)) for name, src in sources.items()}


def compute_file_hash(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def copy_artifact(name: str, source: Path, dest: Path) -> Path:
    """Copy one file, creating parent directories and overwriting ``dest``.

    Content and permission bits are copied.

    Raises:
        ArtifactMissingError: If ``source`` is not a file.
    """
    if not source.is_file():
        raise ArtifactMissingError(name, source)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Copy %s to %s", source, dest)
    shutil.copy(source, dest)
    return dest


def collect_artifacts(
    repo_root: Path,
    target_root: Path,
    artifacts: Mapping[str, ArtifactSpec],
) -> list[Path]:
    """Copy every artifact from ``repo_root`` into ``target_root``.

    Artifacts are processed in name order.

    Args:
        repo_root: Root the artifact sources are relative to.
        target_root: Destination root directory.
        artifacts: Logical name to ArtifactSpec mapping.

    Returns:
        Destination paths, in processing order.

    Raises:
        ArtifactMissingError: At the first missing source file.
    """
    collected: list[Path] = []
    for name in sorted(artifacts):
        spec = artifacts[name]
        collected.append(
            copy_artifact(name, spec.source_path(repo_root), spec.target_path(target_root))
        )
    logger.info("Collected %d artifacts into %s", len(collected), target_root)
    return collected


def snapshot_tree(root: Path) -> dict[str, str]:
    """Map every file under ``root`` to its SHA-256 digest.

    Keys are POSIX paths relative to ``root``. Used to compare workspaces
    between runs.
    """
    if not root.exists():
        return {}
    return {
        path.relative_to(root).as_posix(): compute_file_hash(path)
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


__all__ = [
    "HASH_CHUNK_SIZE",
    "ArtifactSpec",
    "artifact_specs",
    "collect_artifacts",
    "compute_file_hash",
    "copy_artifact",
    "snapshot_tree",
]
