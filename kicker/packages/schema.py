"""Pydantic models for the kicker configuration file.

The configuration declares the packages to fetch and build, the container
images build strategies may use, and a few global flags. Models are frozen:
a configuration is loaded once and never mutated during a run.

Field names follow the concepts used throughout the code; the on-disk keys
are the ones of the existing ``kicker-config.toml`` files (``repo_name``,
``repo_url``, ``build_mode``, ``packages_info``, ``images_info``). Files
written by earlier tools spell the build switch ``build_godwoken_over_docker``;
see SystemSettings.
"""

import re
from typing import Annotated, Any
from urllib.parse import urldefrag, urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kicker.errors import ImageNotFoundError, InvalidRevisionError
from kicker.types import StrategyKind

# Package names become directory names under the packages root
PACKAGE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.\-]+$")

# Key older configuration files use for the host/container build switch
LEGACY_BUILD_KEY = "build_godwoken_over_docker"


class PackageSpec(BaseModel):
    """A source repository to fetch and optionally build.

    Attributes:
        name: Unique package name, also its directory under the packages root.
        source_location: Repository URL whose fragment pins a commit, tag
            or branch (e.g. ``https://host/repo.git#v1.0``).
        build_enabled: Sync and build this package.
        build_strategy: Explicit build strategy, overriding the registry.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: Annotated[
        str,
        Field(alias="repo_name", min_length=1, max_length=255, description="Package name"),
    ]
    source_location: Annotated[
        str, Field(alias="repo_url", min_length=1, description="Repository URL#revision")
    ]
    build_enabled: bool = Field(
        default=False, alias="build_mode", description="Sync and build this package"
    )
    build_strategy: StrategyKind | None = Field(
        default=None, description="Explicit build strategy"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is usable as a single directory name."""
        if not PACKAGE_NAME_PATTERN.match(v) or v in (".", ".."):
            raise ValueError(
                f"name must match pattern {PACKAGE_NAME_PATTERN.pattern}, got '{v}'"
            )
        return v

    @field_validator("source_location")
    @classmethod
    def validate_source_location(cls, v: str) -> str:
        """Validate source_location is an absolute URL."""
        parts = urlsplit(v)
        if not parts.scheme or not (parts.netloc or parts.path):
            raise ValueError(f"source_location must be an absolute URL, got '{v}'")
        return v

    @property
    def revision(self) -> str:
        """The pinned commit, tag or branch.

        Raises:
            InvalidRevisionError: If the URL has no fragment.
        """
        fragment = urldefrag(self.source_location).fragment
        if not fragment:
            raise InvalidRevisionError(self.source_location)
        return fragment

    @property
    def clone_url(self) -> str:
        """The repository URL with the revision fragment removed."""
        return urldefrag(self.source_location).url


class ImageSpec(BaseModel):
    """A container image referenced by build strategies.

    Attributes:
        id: Unique key build strategies look the image up by.
        image_name: Image repository name.
        image_tag: Image tag.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Annotated[str, Field(min_length=1, description="Image key")]
    image_name: Annotated[str, Field(min_length=1, description="Image repository")]
    image_tag: Annotated[str, Field(min_length=1, description="Image tag")]

    @property
    def reference(self) -> str:
        """``name:tag`` reference usable with a container runtime."""
        return f"{self.image_name}:{self.image_tag}"


class SystemSettings(BaseModel):
    """Global policy flags.

    Attributes:
        always_fetch_new_package: Discard existing working copies and clone
            afresh on every sync.
        build_over_docker: Build natively-buildable packages in a container
            instead of on the host.

    Older configuration files carry ``build_godwoken_over_docker`` instead,
    where ``true`` selects the host build. It is read with that meaning and
    never written back.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    always_fetch_new_package: bool = False
    build_over_docker: bool = False

    @model_validator(mode="before")
    @classmethod
    def translate_legacy_keys(cls, data: Any) -> Any:
        """Map ``build_godwoken_over_docker`` onto ``build_over_docker``."""
        if not isinstance(data, dict) or LEGACY_BUILD_KEY not in data:
            return data
        if "build_over_docker" in data:
            raise ValueError(
                f"use either build_over_docker or {LEGACY_BUILD_KEY}, not both"
            )
        data = dict(data)
        legacy = data.pop(LEGACY_BUILD_KEY)
        if not isinstance(legacy, bool):
            raise ValueError(f"{LEGACY_BUILD_KEY} must be a boolean, got {legacy!r}")
        data["build_over_docker"] = not legacy
        return data


class KickerConfig(BaseModel):
    """Top-level configuration.

    Attributes:
        packages: Packages in the order they are synced and built.
        images: Container images, looked up by id.
        system: Global policy flags.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    packages: tuple[PackageSpec, ...] = Field(default=(), alias="packages_info")
    images: tuple[ImageSpec, ...] = Field(default=(), alias="images_info")
    system: SystemSettings = Field(default_factory=SystemSettings)

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "KickerConfig":
        """Validate package names and image ids are unique."""
        for label, keys in (
            ("package name", [p.name for p in self.packages]),
            ("image id", [i.id for i in self.images]),
        ):
            seen: set[str] = set()
            for key in keys:
                if key in seen:
                    raise ValueError(f"duplicate {label}: '{key}'")
                seen.add(key)
        return self

    def get_package(self, name: str) -> PackageSpec | None:
        """Return the package with the given name, or None."""
        for package in self.packages:
            if package.name == name:
                return package
        return None

    def get_image(self, image_id: str) -> ImageSpec:
        """Return the image with the given id.

        Raises:
            ImageNotFoundError: If no image has this id.
        """
        for image in self.images:
            if image.id == image_id:
                return image
        raise ImageNotFoundError(image_id)


__all__ = [
    "LEGACY_BUILD_KEY",
    "PACKAGE_NAME_PATTERN",
    "ImageSpec",
    "KickerConfig",
    "PackageSpec",
    "SystemSettings",
]
