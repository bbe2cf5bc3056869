"""Workspace layout and the package families staged into it."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from kicker.workspace.artifacts import ArtifactSpec, artifact_specs

if TYPE_CHECKING:
    from kicker.config import Settings


@dataclass(frozen=True)
class WorkspaceLayout:
    """Where inputs are read from and where the workspace is assembled.

    Attributes:
        project_root: Directory relative paths are resolved against.
        workspace_dir: Root of the assembled workspace.
        packages_dir: Root of the package working copies.
        basic_files_dir: Directory holding static files (private key).
        init_script: Environment initialization script.
    """

    project_root: Path
    workspace_dir: Path
    packages_dir: Path
    basic_files_dir: Path
    init_script: Path

    @classmethod
    def from_settings(
        cls, settings: Settings, project_root: Path | None = None
    ) -> WorkspaceLayout:
        """Build a layout from settings, anchoring relative paths at project_root."""
        root = project_root if project_root is not None else Path.cwd()
        return cls(
            project_root=root,
            workspace_dir=root / settings.workspace_dir,
            packages_dir=root / settings.packages_dir,
            basic_files_dir=root / settings.basic_files_dir,
            init_script=root / settings.init_script,
        )

    @property
    def bin_dir(self) -> Path:
        return self.workspace_dir / "bin"

    @property
    def deploy_dir(self) -> Path:
        return self.workspace_dir / "deploy"

    @property
    def backend_dir(self) -> Path:
        return self.deploy_dir / "backend"

    @property
    def polyjuice_backend_dir(self) -> Path:
        return self.deploy_dir / "polyjuice-backend"

    @property
    def release_scripts_dir(self) -> Path:
        return self.workspace_dir / "scripts" / "release"

    def skeleton(self) -> list[Path]:
        """Directories every workspace has."""
        return [
            self.bin_dir,
            self.backend_dir,
            self.polyjuice_backend_dir,
            self.release_scripts_dir,
        ]


@dataclass(frozen=True)
class PackageFamily:
    """Artifacts one package contributes to the workspace.

    Attributes:
        name: Family name (the owning package).
        release: Artifacts staged into the shared release scripts directory.
        backend: Artifacts staged into the family's backend directory.
        backend_subdir: Backend directory name under ``deploy/``.
    """

    name: str
    release: Mapping[str, ArtifactSpec]
    backend: Mapping[str, ArtifactSpec] = field(default_factory=dict)
    backend_subdir: str | None = None

    def backend_dir(self, layout: WorkspaceLayout) -> Path | None:
        """Backend destination root, or None if the family has no backend set."""
        if not self.backend or self.backend_subdir is None:
            return None
        return layout.deploy_dir / self.backend_subdir


_GODWOKEN_GENERATORS = {
    "l2_sudt_generator": "godwoken-scripts/c/build/sudt-generator",
    "l2_sudt_validator": "godwoken-scripts/c/build/sudt-validator",
    "meta_contract_generator": "godwoken-scripts/c/build/meta-contract-generator",
    "meta_contract_validator": "godwoken-scripts/c/build/meta-contract-validator",
}

GODWOKEN_SCRIPTS = PackageFamily(
    name="godwoken-scripts",
    release={
        **artifact_specs(
            {
                "custodian_lock": "godwoken-scripts/build/release/custodian-lock",
                "deposit_lock": "godwoken-scripts/build/release/deposit-lock",
                "withdrawal_lock": "godwoken-scripts/build/release/withdrawal-lock",
                "challenge_lock": "godwoken-scripts/build/release/challenge-lock",
                "stake_lock": "godwoken-scripts/build/release/stake-lock",
                "tron_account_lock": "godwoken-scripts/build/release/tron-account-lock",
                "state_validator": "godwoken-scripts/build/release/state-validator",
                "eth_account_lock": "godwoken-scripts/build/release/eth-account-lock",
            }
        ),
        "always_success": ArtifactSpec(
            "godwoken-scripts/build/release/always-success", always_success=True
        ),
        **artifact_specs(_GODWOKEN_GENERATORS),
    },
    backend=artifact_specs(_GODWOKEN_GENERATORS),
    backend_subdir="backend",
)

_POLYJUICE_SCRIPTS = {
    "polyjuice_generator": "godwoken-polyjuice/build/generator",
    "polyjuice_validator": "godwoken-polyjuice/build/validator",
}

GODWOKEN_POLYJUICE = PackageFamily(
    name="godwoken-polyjuice",
    release=artifact_specs(_POLYJUICE_SCRIPTS),
    backend=artifact_specs(_POLYJUICE_SCRIPTS),
    backend_subdir="polyjuice-backend",
)

CLERKB = PackageFamily(
    name="clerkb",
    release=artifact_specs(
        {
            "poa": "clerkb/build/debug/poa",
            "state": "clerkb/build/debug/state",
        }
    ),
)

DEFAULT_FAMILIES = (GODWOKEN_SCRIPTS, GODWOKEN_POLYJUICE, CLERKB)

# Pre-built binaries copied flat into workspace/bin, relative to the packages root
DEFAULT_BINARIES = {
    "godwoken": "godwoken/target/debug/godwoken",
    "gw-tools": "godwoken/target/debug/gw-tools",
}

PRIVATE_KEY_FILE = "private_key"


__all__ = [
    "CLERKB",
    "DEFAULT_BINARIES",
    "DEFAULT_FAMILIES",
    "GODWOKEN_POLYJUICE",
    "GODWOKEN_SCRIPTS",
    "PRIVATE_KEY_FILE",
    "PackageFamily",
    "WorkspaceLayout",
]
