"""Git command composition and checkout.

Commands are composed as argument lists and executed through a
CommandRunner; ``-C <dir>`` scopes each command to its working copy.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kicker.runner import CommandRunner

logger = logging.getLogger(__name__)

GIT = "git"


def compose_clone_command(url: str, dest: Path, recursive: bool = True) -> list[str]:
    """Compose the ``git clone`` command.

    Args:
        url: Repository URL without a revision fragment.
        dest: Destination directory.
        recursive: Also clone sub-repositories.

    Returns:
        Command as list of strings.
    """
    cmd = [GIT, "clone", url, str(dest)]
    if recursive:
        cmd.append("--recursive")
    return cmd


def compose_checkout_commands(repo_dir: Path, revision: str) -> list[list[str]]:
    """Compose the fetch, checkout and submodule update commands.

    Args:
        repo_dir: Working copy directory.
        revision: Commit, tag or branch to check out.

    Returns:
        Commands in the order they must run.
    """
    repo = str(repo_dir)
    return [
        [GIT, "-C", repo, "fetch"],
        [GIT, "-C", repo, "checkout", revision],
        [GIT, "-C", repo, "submodule", "update", "--recursive"],
    ]


def clone(
    url: str, dest: Path, recursive: bool = True, runner: CommandRunner | None = None
) -> None:
    """Clone a repository into ``dest``.

    Raises:
        CommandFailedError: If git fails.
    """
    if runner is None:
        runner = CommandRunner()
    logger.info("Cloning %s into %s", url, dest)
    runner.check(compose_clone_command(url, dest, recursive))


def checkout(
    repo_dir: Path, revision: str, runner: CommandRunner | None = None
) -> None:
    """Fetch remote refs, check out ``revision`` and update submodules.

    Raises:
        CommandFailedError: At the first command that fails.
    """
    if runner is None:
        runner = CommandRunner()
    for cmd in compose_checkout_commands(repo_dir, revision):
        runner.check(cmd)
    logger.info("Checked out %s in %s", revision, repo_dir)


def current_commit(repo_dir: Path, runner: CommandRunner | None = None) -> str | None:
    """Return the commit SHA of HEAD, or None if it cannot be read."""
    if runner is None:
        runner = CommandRunner()
    result = runner.run([GIT, "-C", str(repo_dir), "rev-parse", "HEAD"], capture_output=True)
    if not result.success:
        return None
    return result.stdout.strip() or None


__all__ = [
    "checkout",
    "clone",
    "compose_checkout_commands",
    "compose_clone_command",
    "current_commit",
]
