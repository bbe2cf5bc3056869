"""Repository synchronization.

Makes the working copy of each package match its pinned revision:
- An existing working copy is fetched and checked out in place
- A missing, corrupt or un-checkoutable working copy is removed and
  cloned afresh, then checked out
- A failure after the fresh clone is fatal

Repeated calls with the same inputs converge to the same revision.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from kicker.errors import CommandFailedError, KickerError, SyncFailedError
from kicker.packages.schema import KickerConfig, PackageSpec
from kicker.repos.git import checkout, clone, current_commit
from kicker.runner import CommandRunner
from kicker.types import BatchMode, PackageResult, PhaseReport, StepStatus

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """What sync had to do to reach the pinned revision."""

    UPDATED = "updated"
    CLONED = "cloned"
    RECLONED = "recloned"


@dataclass
class SyncResult:
    """Result of syncing one package.

    Attributes:
        package: Package name.
        revision: Pinned revision that was checked out.
        repo_dir: Working copy directory.
        action: How the working copy was brought to the revision.
        commit: Commit SHA of HEAD after sync, if it could be read.
    """

    package: str
    revision: str
    repo_dir: Path
    action: SyncAction
    commit: str | None = None


def _is_working_copy(path: Path) -> bool:
    # A directory without its own .git would let git act on an enclosing repo
    return path.is_dir() and (path / ".git").exists()


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def sync_package(
    packages_root: Path,
    package: PackageSpec,
    recursive: bool = True,
    runner: CommandRunner | None = None,
    force_fresh: bool = False,
) -> SyncResult:
    """Bring a package's working copy to its pinned revision.

    Args:
        packages_root: Directory holding all package working copies.
        package: Package to sync.
        recursive: Clone sub-repositories along with the package.
        runner: Command runner (default: a new CommandRunner).
        force_fresh: Discard an existing working copy instead of updating it.

    Returns:
        SyncResult describing what was done.

    Raises:
        InvalidRevisionError: If the package URL has no revision; raised
            before anything is touched.
        SyncFailedError: If clone or checkout fails after re-initialization.
    """
    revision = package.revision
    url = package.clone_url
    if runner is None:
        runner = CommandRunner()

    target_dir = packages_root / package.name
    existed = target_dir.exists() or target_dir.is_symlink()

    if existed and not force_fresh:
        if _is_working_copy(target_dir):
            try:
                checkout(target_dir, revision, runner)
                return SyncResult(
                    package=package.name,
                    revision=revision,
                    repo_dir=target_dir,
                    action=SyncAction.UPDATED,
                    commit=current_commit(target_dir, runner),
                )
            except CommandFailedError as e:
                logger.warning("Checkout of %s failed: %s", package.name, e)
        logger.info("Re-initializing working copy %s", target_dir)

    try:
        if existed:
            _remove(target_dir)
        target_dir.mkdir(parents=True)
        clone(url, target_dir, recursive=recursive, runner=runner)
        checkout(target_dir, revision, runner)
    except (CommandFailedError, OSError) as e:
        raise SyncFailedError(package.name, str(e)) from e

    return SyncResult(
        package=package.name,
        revision=revision,
        repo_dir=target_dir,
        action=SyncAction.RECLONED if existed else SyncAction.CLONED,
        commit=current_commit(target_dir, runner),
    )


def sync_packages(
    config: KickerConfig,
    packages_root: Path,
    runner: CommandRunner | None = None,
    recursive: bool = True,
    mode: BatchMode = BatchMode.FAIL_FAST,
) -> PhaseReport:
    """Sync every build-enabled package in declared order.

    Args:
        config: Loaded configuration.
        packages_root: Directory holding all package working copies.
        runner: Command runner (default: a new CommandRunner).
        recursive: Clone sub-repositories along with each package.
        mode: FAIL_FAST re-raises the first error; BEST_EFFORT records it
            and continues with the next package.

    Returns:
        PhaseReport with one result per declared package.

    Raises:
        KickerError: The first failure, in FAIL_FAST mode.
    """
    if runner is None:
        runner = CommandRunner()

    logger.info("Preparing %d packages in %s", len(config.packages), packages_root)
    report = PhaseReport(phase="sync", mode=mode)

    for package in config.packages:
        if not package.build_enabled:
            report.results.append(
                PackageResult(package=package.name, status=StepStatus.SKIPPED)
            )
            continue

        try:
            result = sync_package(
                packages_root,
                package,
                recursive=recursive,
                runner=runner,
                force_fresh=config.system.always_fetch_new_package,
            )
        except KickerError as e:
            logger.error("Sync of %s failed: %s", package.name, e)
            if mode == BatchMode.FAIL_FAST:
                raise
            report.results.append(
                PackageResult(
                    package=package.name,
                    status=StepStatus.FAILED,
                    error=str(e),
                    error_code=e.code,
                )
            )
            continue

        logger.info(
            "Synced %s at %s (%s)", package.name, result.revision, result.action.value
        )
        report.results.append(
            PackageResult(
                package=package.name,
                status=StepStatus.SUCCEEDED,
                detail=f"{result.action.value} at {result.revision}",
            )
        )

    return report


__all__ = [
    "SyncAction",
    "SyncResult",
    "sync_package",
    "sync_packages",
]
