"""Shared fixtures for kicker tests."""

import os
import shlex
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from kicker.runner import CommandResult, CommandRunner

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class FakeRunner(CommandRunner):
    """CommandRunner that records commands instead of executing them.

    Args:
        failures: Token pattern to failure count. A command fails when it
            contains every token of a pattern; the count is decremented on
            each failure, -1 means fail forever.
        outputs: Token pattern to captured stdout.
        on_call: Hook invoked with (args, cwd) for every command.
    """

    def __init__(
        self,
        failures: dict[tuple[str, ...], int] | None = None,
        outputs: dict[tuple[str, ...], str] | None = None,
        on_call: Callable[[list[str], Path | None], None] | None = None,
    ) -> None:
        self.failures = dict(failures or {})
        self.outputs = dict(outputs or {})
        self.on_call = on_call
        self.calls: list[list[str]] = []
        self.cwds: list[Path | None] = []

    def run(self, cmd, cwd=None, capture_output=False, env_override=None):
        args = [str(a) for a in cmd]
        self.calls.append(args)
        self.cwds.append(cwd)
        if self.on_call is not None:
            self.on_call(args, cwd)

        stdout = ""
        for pattern, text in self.outputs.items():
            if all(tok in args for tok in pattern):
                stdout = text

        for pattern, remaining in self.failures.items():
            if remaining != 0 and all(tok in args for tok in pattern):
                if remaining > 0:
                    self.failures[pattern] = remaining - 1
                return CommandResult(command=shlex.join(args), exit_code=1, stdout=stdout)

        return CommandResult(command=shlex.join(args), exit_code=0, stdout=stdout)

    def commands_with(self, *tokens: str) -> list[list[str]]:
        """Return recorded commands containing all ``tokens``."""
        return [c for c in self.calls if all(tok in c for tok in tokens)]


def fake_clone(args: list[str], cwd: Path | None) -> None:
    """on_call hook making ``git clone`` produce a .git directory."""
    if args[:2] == ["git", "clone"]:
        (Path(args[3]) / ".git").mkdir(parents=True, exist_ok=True)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A runner where every command succeeds and clones create .git."""
    return FakeRunner(on_call=fake_clone)


_GIT_ENV = {
    "GIT_AUTHOR_NAME": "Kicker Test",
    "GIT_AUTHOR_EMAIL": "kicker@example.com",
    "GIT_COMMITTER_NAME": "Kicker Test",
    "GIT_COMMITTER_EMAIL": "kicker@example.com",
}


def git(*args: str, cwd: Path) -> str:
    """Run git for test setup and return its stdout."""
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
        env={**os.environ, **_GIT_ENV},
    )
    return result.stdout.strip()


@pytest.fixture
def origin_repo(tmp_path) -> Path:
    """A local repository with tags v1.0 and v2.0 of a VERSION file."""
    origin = tmp_path / "origin" / "demo"
    origin.mkdir(parents=True)
    git("init", "-q", cwd=origin)
    for version in ("1.0", "2.0"):
        (origin / "VERSION").write_text(f"{version}\n")
        git("add", "VERSION", cwd=origin)
        git("commit", "-q", "-m", f"release {version}", cwd=origin)
        git("tag", f"v{version}", cwd=origin)
    return origin
