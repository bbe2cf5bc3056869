"""Shared type definitions for kicker.

This module contains enums and result models shared across subpackages to
avoid circular imports.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StepStatus(str, Enum):
    """Outcome of one package within a phase."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    UNREGISTERED = "unregistered"
    FAILED = "failed"


class BatchMode(str, Enum):
    """How a phase reacts to a failing package."""

    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"


class StrategyKind(str, Enum):
    """Closed set of build strategy variants."""

    NATIVE = "native"
    MAKE_THEN_PACKAGE = "make-then-package"
    CONTAINER_MAKE = "container-make"
    DEPENDENCY_COPY = "dependency-copy"


class PackageResult(BaseModel):
    """Result of syncing or building a single package.

    Attributes:
        package: Package name.
        status: Outcome of the step.
        detail: Short human-readable detail (action taken, strategy used).
        error: Error message if the step failed.
        error_code: Stable error code if the step failed.
    """

    model_config = ConfigDict(extra="forbid")

    package: str
    status: StepStatus
    detail: str | None = None
    error: str | None = None
    error_code: str | None = None


class PhaseReport(BaseModel):
    """Aggregate result of a phase over all declared packages.

    Attributes:
        phase: Phase name (sync, build).
        mode: Batch mode the phase ran with.
        results: Per-package results in declared order.
    """

    model_config = ConfigDict(extra="forbid")

    phase: str
    mode: BatchMode
    results: list[PackageResult] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        """Number of failed packages."""
        return sum(1 for r in self.results if r.status == StepStatus.FAILED)

    @property
    def succeeded(self) -> int:
        """Number of packages processed successfully."""
        return sum(1 for r in self.results if r.status == StepStatus.SUCCEEDED)

    @property
    def ok(self) -> bool:
        """True if no package failed."""
        return self.failed == 0


__all__ = [
    "BatchMode",
    "PackageResult",
    "PhaseReport",
    "StepStatus",
    "StrategyKind",
]
