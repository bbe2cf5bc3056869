"""Error definitions for kicker.

Every error carries a stable ``code`` string so the CLI (and any other
caller) can report failures without matching on message text.
"""

from __future__ import annotations

from pathlib import Path

# Error code constants
CONFIG_MISSING = "config_missing"
CONFIG_MALFORMED = "config_malformed"
INVALID_REVISION = "invalid_revision"
IMAGE_NOT_FOUND = "image_not_found"
SYNC_FAILED = "sync_failed"
COMMAND_FAILED = "command_failed"
EXECUTION_ERROR = "execution_error"
ARTIFACT_MISSING = "artifact_missing"
NOT_IMPLEMENTED = "not_implemented"


class KickerError(Exception):
    """Base class for all kicker errors."""

    def __init__(self, message: str, code: str = "kicker_error") -> None:
        """Initialize KickerError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class ConfigMissingError(KickerError):
    """Raised when the configuration file does not exist."""

    def __init__(self, path: Path, code: str = CONFIG_MISSING) -> None:
        super().__init__(f"Configuration file not found: {path}", code=code)
        self.path = path


class ConfigMalformedError(KickerError):
    """Raised when the configuration file cannot be parsed or validated."""

    def __init__(self, message: str, code: str = CONFIG_MALFORMED) -> None:
        super().__init__(message, code=code)


class InvalidRevisionError(KickerError):
    """Raised when a repository URL carries no revision fragment."""

    def __init__(self, url: str, code: str = INVALID_REVISION) -> None:
        super().__init__(
            f"Repository URL has no branch, tag or commit fragment: {url}",
            code=code,
        )
        self.url = url


class ImageNotFoundError(KickerError):
    """Raised when a container image id is not declared in the configuration."""

    def __init__(self, image_id: str, code: str = IMAGE_NOT_FOUND) -> None:
        super().__init__(f"Image not declared in configuration: {image_id}", code=code)
        self.image_id = image_id


class SyncFailedError(KickerError):
    """Raised when clone or checkout fails after the re-init attempt."""

    def __init__(self, package: str, message: str, code: str = SYNC_FAILED) -> None:
        super().__init__(f"Failed to sync {package}: {message}", code=code)
        self.package = package


class CommandFailedError(KickerError):
    """Raised when an external tool exits non-zero or cannot be started."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        command: str | None = None,
        code: str = COMMAND_FAILED,
    ) -> None:
        """Initialize CommandFailedError.

        Args:
            message: Error description.
            exit_code: Process exit code, None if the process never ran.
            command: The command line that was executed.
            code: Error code for structured error handling.
        """
        super().__init__(message, code=code)
        self.exit_code = exit_code
        self.command = command


class ArtifactMissingError(KickerError):
    """Raised when an expected build output is absent."""

    def __init__(self, name: str, path: Path, code: str = ARTIFACT_MISSING) -> None:
        super().__init__(f"Artifact '{name}' not found at {path}", code=code)
        self.name = name
        self.path = path


class NotImplementedStrategyError(KickerError):
    """Raised when a build strategy path has no implementation yet."""

    def __init__(self, message: str, code: str = NOT_IMPLEMENTED) -> None:
        super().__init__(message, code=code)


__all__ = [
    "ARTIFACT_MISSING",
    "COMMAND_FAILED",
    "CONFIG_MALFORMED",
    "CONFIG_MISSING",
    "EXECUTION_ERROR",
    "IMAGE_NOT_FOUND",
    "INVALID_REVISION",
    "NOT_IMPLEMENTED",
    "SYNC_FAILED",
    "ArtifactMissingError",
    "CommandFailedError",
    "ConfigMalformedError",
    "ConfigMissingError",
    "ImageNotFoundError",
    "InvalidRevisionError",
    "KickerError",
    "NotImplementedStrategyError",
    "SyncFailedError",
]
