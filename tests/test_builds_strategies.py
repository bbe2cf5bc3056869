"""Tests for builds/strategies.py module."""

from pathlib import Path

import pytest

from conftest import FakeRunner
from kicker.builds.strategies import (
    DEFAULT_REGISTRY,
    STRATEGIES_BY_KIND,
    BuildContext,
    ContainerMake,
    DependencyCopy,
    MakeThenPackage,
    NativeToggle,
    compose_dependency_copy_command,
    compose_make_command,
    resolve_strategy,
)
from kicker.errors import (
    CommandFailedError,
    ImageNotFoundError,
    NotImplementedStrategyError,
)
from kicker.packages.defaults import default_config
from kicker.packages.schema import ImageSpec, KickerConfig, PackageSpec, SystemSettings
from kicker.types import StrategyKind

JS_IMAGE = ImageSpec(
    id="docker_js_prebuild_image",
    image_name="nervos/godwoken-js-prebuilds",
    image_tag="v0.6.0-rc2",
)


def _ctx(
    tmp_path: Path,
    runner: FakeRunner,
    name: str = "demo",
    system: SystemSettings | None = None,
    images: tuple[ImageSpec, ...] = (JS_IMAGE,),
) -> BuildContext:
    package = PackageSpec(
        name=name, source_location="https://example.com/d.git#v1", build_enabled=True
    )
    config = KickerConfig(
        packages=(package,), images=images, system=system or SystemSettings()
    )
    return BuildContext(
        package=package, repo_dir=tmp_path / name, config=config, runner=runner
    )


class TestComposeCommands:
    """Tests for command composition helpers."""

    def test_make(self):
        """Should compose make -C with an optional target."""
        assert compose_make_command(Path("/r")) == ["make", "-C", "/r"]
        assert compose_make_command(Path("/r"), "all-via-docker") == [
            "make",
            "-C",
            "/r",
            "all-via-docker",
        ]

    def test_dependency_copy(self, tmp_path):
        """Should mount the working copy at /app and copy node_modules."""
        repo = tmp_path / "godwoken-web3"
        cmd = compose_dependency_copy_command(repo, "godwoken-web3", JS_IMAGE)
        assert cmd[:5] == ["docker", "run", "--rm", "-v", f"{repo.resolve()}:/app"]
        assert cmd[5] == "nervos/godwoken-js-prebuilds:v0.6.0-rc2"
        assert cmd[-1] == "cp -r ./godwoken-web3/node_modules ./app/"


class TestNativeToggle:
    """Tests for the native strategy."""

    def test_native_build(self, tmp_path):
        """Should run the build tool in the working copy."""
        runner = FakeRunner()
        detail = NativeToggle().build(_ctx(tmp_path, runner, "godwoken"))

        assert runner.calls == [["cargo", "build"]]
        assert runner.cwds == [tmp_path / "godwoken"]
        assert detail == "native build"

    def test_container_build_not_implemented(self, tmp_path):
        """Container builds are reported as not implemented."""
        runner = FakeRunner()
        ctx = _ctx(tmp_path, runner, system=SystemSettings(build_over_docker=True))

        with pytest.raises(NotImplementedStrategyError) as exc_info:
            NativeToggle().build(ctx)

        assert exc_info.value.code == "not_implemented"
        assert runner.calls == []

    def test_failure_propagates(self, tmp_path):
        """A failing build tool is fatal."""
        runner = FakeRunner(failures={("cargo",): -1})
        with pytest.raises(CommandFailedError):
            NativeToggle().build(_ctx(tmp_path, runner))


class TestMakeThenPackage:
    """Tests for the make-then-package strategy."""

    def test_sequence(self, tmp_path):
        """Should make the C subdirectory, then package from the root."""
        runner = FakeRunner()
        repo = tmp_path / "godwoken-scripts"

        MakeThenPackage().build(_ctx(tmp_path, runner, "godwoken-scripts"))

        assert runner.calls == [
            ["make", "-C", str(repo / "c")],
            ["capsule", "build", "--release", "--debug-output"],
        ]
        assert runner.cwds[1] == repo

    def test_make_failure_aborts(self, tmp_path):
        """The packaging step is not run when make fails."""
        runner = FakeRunner(failures={("make",): -1})

        with pytest.raises(CommandFailedError):
            MakeThenPackage().build(_ctx(tmp_path, runner))

        assert runner.commands_with("capsule") == []


class TestContainerMake:
    """Tests for the container-make strategy."""

    def test_single_target(self, tmp_path):
        """Should run one make target."""
        runner = FakeRunner()
        ContainerMake().build(_ctx(tmp_path, runner, "godwoken-polyjuice"))
        assert runner.calls == [
            ["make", "-C", str(tmp_path / "godwoken-polyjuice"), "all-via-docker"]
        ]

    def test_install_first(self, tmp_path):
        """Should install dependencies before make when configured."""
        runner = FakeRunner()
        ContainerMake(install_first=True).build(_ctx(tmp_path, runner, "clerkb"))
        assert runner.calls == [
            ["yarn", "--cwd", str(tmp_path / "clerkb")],
            ["make", "-C", str(tmp_path / "clerkb"), "all-via-docker"],
        ]

    def test_install_failure_aborts(self, tmp_path):
        """make is not run when the install fails."""
        runner = FakeRunner(failures={("yarn",): -1})
        with pytest.raises(CommandFailedError):
            ContainerMake(install_first=True).build(_ctx(tmp_path, runner))
        assert runner.commands_with("make") == []


class TestDependencyCopy:
    """Tests for the dependency-copy strategy."""

    def test_verified(self, tmp_path):
        """Nothing is copied when dependencies match."""
        runner = FakeRunner()
        detail = DependencyCopy().build(_ctx(tmp_path, runner, "godwoken-web3"))

        assert runner.calls == [
            ["yarn", "--cwd", str(tmp_path / "godwoken-web3"), "check", "--verify-tree"]
        ]
        assert detail == "dependencies up to date"

    def test_mismatch_copies_from_image(self, tmp_path):
        """A verification mismatch copies dependencies from the image."""
        runner = FakeRunner(failures={("--verify-tree",): -1})

        detail = DependencyCopy().build(_ctx(tmp_path, runner, "godwoken-web3"))

        copy = runner.commands_with("docker", "run")
        assert len(copy) == 1
        assert "nervos/godwoken-js-prebuilds:v0.6.0-rc2" in copy[0]
        assert "nervos/godwoken-js-prebuilds:v0.6.0-rc2" in detail

    def test_image_selected_by_id(self, tmp_path):
        """The image is looked up by id regardless of declaration order."""
        runner = FakeRunner(failures={("--verify-tree",): -1})
        other = ImageSpec(id="docker_prebuild_image", image_name="other", image_tag="x")

        DependencyCopy().build(_ctx(tmp_path, runner, images=(other, JS_IMAGE)))

        assert JS_IMAGE.reference in runner.commands_with("docker", "run")[0]

    def test_missing_image(self, tmp_path):
        """A mismatch with no declared image is fatal."""
        runner = FakeRunner(failures={("--verify-tree",): -1})
        with pytest.raises(ImageNotFoundError):
            DependencyCopy().build(_ctx(tmp_path, runner, images=()))

    def test_copy_failure(self, tmp_path):
        """A failing copy is fatal."""
        runner = FakeRunner(failures={("--verify-tree",): -1, ("docker",): -1})
        with pytest.raises(CommandFailedError):
            DependencyCopy().build(_ctx(tmp_path, runner))

    def test_verify_tool_missing(self, tmp_path):
        """A verify tool that cannot start counts as a mismatch."""

        class NoYarn(FakeRunner):
            def run(self, cmd, cwd=None, capture_output=False, env_override=None):
                if cmd[0] == "yarn":
                    raise CommandFailedError("no yarn", code="execution_error")
                return super().run(cmd, cwd, capture_output, env_override)

        runner = NoYarn()
        DependencyCopy().build(_ctx(tmp_path, runner))
        assert runner.commands_with("docker", "run")


class TestResolveStrategy:
    """Tests for registry lookup."""

    def test_default_registry_covers_defaults(self):
        """Every default package has a registered strategy."""
        for package in default_config().packages:
            assert resolve_strategy(package) is not None

    def test_registry_kinds(self):
        """Known packages map to their strategy kinds."""
        kinds = {name: s.kind for name, s in DEFAULT_REGISTRY.items()}
        assert kinds == {
            "godwoken": StrategyKind.NATIVE,
            "godwoken-scripts": StrategyKind.MAKE_THEN_PACKAGE,
            "godwoken-polyjuice": StrategyKind.CONTAINER_MAKE,
            "godwoken-polyman": StrategyKind.DEPENDENCY_COPY,
            "godwoken-web3": StrategyKind.DEPENDENCY_COPY,
            "clerkb": StrategyKind.CONTAINER_MAKE,
        }

    def test_unregistered(self):
        """Unknown packages have no strategy."""
        package = PackageSpec(name="other", source_location="https://e/o.git#v1")
        assert resolve_strategy(package) is None

    def test_explicit_kind_wins(self):
        """An explicit strategy kind overrides the registry."""
        package = PackageSpec(
            name="godwoken",
            source_location="https://e/g.git#v1",
            build_strategy=StrategyKind.CONTAINER_MAKE,
        )
        assert resolve_strategy(package) is STRATEGIES_BY_KIND[StrategyKind.CONTAINER_MAKE]
