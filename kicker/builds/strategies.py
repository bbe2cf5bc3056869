"""Build strategies and the package registry.

Each strategy is a frozen dataclass describing one fixed build procedure.
Strategies only compose and invoke external tools (cargo, make, capsule,
yarn, docker) and inspect their exit status.

The registry maps known package names to strategies. A package may also
name a strategy kind explicitly in its configuration, which wins over the
registry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from kicker.errors import CommandFailedError, NotImplementedStrategyError
from kicker.packages.schema import ImageSpec, KickerConfig, PackageSpec
from kicker.runner import CommandRunner
from kicker.types import StrategyKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildContext:
    """Everything a strategy needs to build one package.

    Attributes:
        package: Package being built.
        repo_dir: The package's working copy.
        config: Loaded configuration (system flags, images).
        runner: Command runner.
    """

    package: PackageSpec
    repo_dir: Path
    config: KickerConfig
    runner: CommandRunner


def compose_make_command(directory: Path, target: str | None = None) -> list[str]:
    """Compose a ``make -C <dir> [target]`` command."""
    cmd = ["make", "-C", str(directory)]
    if target:
        cmd.append(target)
    return cmd


def compose_yarn_install_command(repo_dir: Path) -> list[str]:
    """Compose the dependency install command."""
    return ["yarn", "--cwd", str(repo_dir)]


def compose_verify_tree_command(repo_dir: Path) -> list[str]:
    """Compose the command checking installed dependencies match the manifest."""
    return ["yarn", "--cwd", str(repo_dir), "check", "--verify-tree"]


def compose_dependency_copy_command(
    repo_dir: Path, package_name: str, image: ImageSpec
) -> list[str]:
    """Compose the command copying a pre-built dependency tree from an image.

    A disposable container mounts the working copy at /app and copies the
    image's node_modules for this package into it.

    Args:
        repo_dir: The package's working copy.
        package_name: Package name (directory inside the image).
        image: Image holding pre-built dependencies.

    Returns:
        Command as list of strings.
    """
    return [
        "docker",
        "run",
        "--rm",
        "-v",
        f"{repo_dir.resolve()}:/app",
        image.reference,
        "/bin/bash",
        "-c",
        f"cp -r ./{package_name}/node_modules ./app/",
    ]


class BuildStrategy:
    """Base class of build strategy variants."""

    kind: ClassVar[StrategyKind]

    def build(self, ctx: BuildContext) -> str:
        """Build the package.

        Returns:
            Short description of what was done.

        Raises:
            KickerError: On any fatal condition.
        """
        raise NotImplementedError


@dataclass(frozen=True)
class NativeToggle(BuildStrategy):
    """Native build on the host, or a container build when requested."""

    kind: ClassVar[StrategyKind] = StrategyKind.NATIVE

    command: tuple[str, ...] = ("cargo", "build")

    def build(self, ctx: BuildContext) -> str:
        if ctx.config.system.build_over_docker:
            raise NotImplementedStrategyError(
                f"Building {ctx.package.name} in a container is not implemented"
            )
        ctx.runner.check(list(self.command), cwd=ctx.repo_dir)
        return "native build"


@dataclass(frozen=True)
class MakeThenPackage(BuildStrategy):
    """``make`` in a subdirectory, then a packaging tool in the repo root."""

    kind: ClassVar[StrategyKind] = StrategyKind.MAKE_THEN_PACKAGE

    make_subdir: str = "c"
    package_command: tuple[str, ...] = ("capsule", "build", "--release", "--debug-output")

    def build(self, ctx: BuildContext) -> str:
        ctx.runner.check(compose_make_command(ctx.repo_dir / self.make_subdir))
        ctx.runner.check(list(self.package_command), cwd=ctx.repo_dir)
        return f"make {self.make_subdir} + {self.package_command[0]}"


@dataclass(frozen=True)
class ContainerMake(BuildStrategy):
    """A single make target that builds everything inside a container."""

    kind: ClassVar[StrategyKind] = StrategyKind.CONTAINER_MAKE

    target: str = "all-via-docker"
    install_first: bool = False

    def build(self, ctx: BuildContext) -> str:
        if self.install_first:
            ctx.runner.check(compose_yarn_install_command(ctx.repo_dir))
        ctx.runner.check(compose_make_command(ctx.repo_dir, self.target))
        return f"make {self.target}"


@dataclass(frozen=True)
class DependencyCopy(BuildStrategy):
    """Verify installed dependencies, copying them from an image on mismatch.

    A verification mismatch is expected and never fails the build; only
    the copy out of the image can.
    """

    kind: ClassVar[StrategyKind] = StrategyKind.DEPENDENCY_COPY

    image_id: str = "docker_js_prebuild_image"

    def build(self, ctx: BuildContext) -> str:
        try:
            verified = ctx.runner.run(compose_verify_tree_command(ctx.repo_dir)).success
        except CommandFailedError as e:
            logger.info("Cannot verify dependencies of %s: %s", ctx.package.name, e)
            verified = False

        if verified:
            return "dependencies up to date"

        image = ctx.config.get_image(self.image_id)
        logger.info(
            "Dependencies of %s do not match, copying them from %s",
            ctx.package.name,
            image.reference,
        )
        ctx.runner.check(
            compose_dependency_copy_command(ctx.repo_dir, ctx.package.name, image)
        )
        return f"dependencies copied from {image.reference}"


STRATEGIES_BY_KIND: Mapping[StrategyKind, BuildStrategy] = {
    StrategyKind.NATIVE: NativeToggle(),
    StrategyKind.MAKE_THEN_PACKAGE: MakeThenPackage(),
    StrategyKind.CONTAINER_MAKE: ContainerMake(),
    StrategyKind.DEPENDENCY_COPY: DependencyCopy(),
}

DEFAULT_REGISTRY: Mapping[str, BuildStrategy] = {
    "godwoken": NativeToggle(),
    "godwoken-scripts": MakeThenPackage(),
    "godwoken-polyjuice": ContainerMake(),
    "godwoken-polyman": DependencyCopy(),
    "godwoken-web3": DependencyCopy(),
    "clerkb": ContainerMake(install_first=True),
}


def resolve_strategy(
    package: PackageSpec,
    registry: Mapping[str, BuildStrategy] = DEFAULT_REGISTRY,
) -> BuildStrategy | None:
    """Select the strategy for a package.

    Args:
        package: Package to build.
        registry: Package name to strategy mapping.

    Returns:
        The strategy, or None if the package is not registered.
    """
    if package.build_strategy is not None:
        return STRATEGIES_BY_KIND[package.build_strategy]
    return registry.get(package.name)


__all__ = [
    "DEFAULT_REGISTRY",
    "STRATEGIES_BY_KIND",
    "BuildContext",
    "BuildStrategy",
    "ContainerMake",
    "DependencyCopy",
    "MakeThenPackage",
    "NativeToggle",
    "compose_dependency_copy_command",
    "compose_make_command",
    "compose_verify_tree_command",
    "compose_yarn_install_command",
    "resolve_strategy",
]
