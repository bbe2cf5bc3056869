"""Build service module.

This module provides the high-level build API:
- build_package(): Build one package with its registered strategy
- build_packages(): Build every enabled package in declared order

An unregistered package is reported as such and is not an error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from kicker.builds.strategies import (
    DEFAULT_REGISTRY,
    BuildContext,
    BuildStrategy,
    resolve_strategy,
)
from kicker.errors import KickerError
from kicker.packages.schema import KickerConfig, PackageSpec
from kicker.runner import CommandRunner
from kicker.types import BatchMode, PackageResult, PhaseReport, StepStatus

logger = logging.getLogger(__name__)


def build_package(
    packages_root: Path,
    package: PackageSpec,
    config: KickerConfig,
    runner: CommandRunner | None = None,
    registry: Mapping[str, BuildStrategy] = DEFAULT_REGISTRY,
) -> PackageResult:
    """Build a single package.

    Args:
        packages_root: Directory holding all package working copies.
        package: Package to build.
        config: Loaded configuration.
        runner: Command runner (default: a new CommandRunner).
        registry: Package name to strategy mapping.

    Returns:
        PackageResult with status succeeded, skipped or unregistered.

    Raises:
        KickerError: If the strategy hits a fatal condition.
    """
    if not package.build_enabled:
        return PackageResult(package=package.name, status=StepStatus.SKIPPED)

    strategy = resolve_strategy(package, registry)
    if strategy is None:
        logger.info("No build strategy registered for %s, skipping", package.name)
        return PackageResult(package=package.name, status=StepStatus.UNREGISTERED)

    if runner is None:
        runner = CommandRunner()

    logger.info("Building %s (%s)", package.name, strategy.kind.value)
    ctx = BuildContext(
        package=package,
        repo_dir=packages_root / package.name,
        config=config,
        runner=runner,
    )
    detail = strategy.build(ctx)
    logger.info("Built %s: %s", package.name, detail)
    return PackageResult(package=package.name, status=StepStatus.SUCCEEDED, detail=detail)


def build_packages(
    config: KickerConfig,
    packages_root: Path,
    runner: CommandRunner | None = None,
    registry: Mapping[str, BuildStrategy] = DEFAULT_REGISTRY,
    mode: BatchMode = BatchMode.FAIL_FAST,
) -> PhaseReport:
    """Build every package in declared order.

    Args:
        config: Loaded configuration.
        packages_root: Directory holding all package working copies.
        runner: Command runner (default: a new CommandRunner).
        registry: Package name to strategy mapping.
        mode: FAIL_FAST re-raises the first error; BEST_EFFORT records it
            and continues with the next package.

    Returns:
        PhaseReport with one result per declared package.

    Raises:
        KickerError: The first failure, in FAIL_FAST mode.
    """
    if runner is None:
        runner = CommandRunner()

    report = PhaseReport(phase="build", mode=mode)
    for package in config.packages:
        try:
            result = build_package(
                packages_root, package, config, runner=runner, registry=registry
            )
        except KickerError as e:
            logger.error("Build of %s failed: %s", package.name, e)
            if mode == BatchMode.FAIL_FAST:
                raise
            result = PackageResult(
                package=package.name,
                status=StepStatus.FAILED,
                error=str(e),
                error_code=e.code,
            )
        report.results.append(result)

    return report


__all__ = ["build_package", "build_packages"]
