"""Default configuration written when bootstrapping a new checkout."""

from kicker.packages.schema import ImageSpec, KickerConfig, PackageSpec, SystemSettings

DEFAULT_BUILD_MODE = False

DEFAULT_PACKAGES = [
    ("godwoken", "https://github.com/nervosnetwork/godwoken.git#v0.6.0-rc4"),
    (
        "godwoken-polyman",
        "https://github.com/RetricSu/godwoken-polyman.git#v0.6.0-rc2",
    ),
    (
        "godwoken-web3",
        "https://github.com/nervosnetwork/godwoken-web3.git#v0.5.0-rc2",
    ),
    (
        "godwoken-scripts",
        "https://github.com/nervosnetwork/godwoken-scripts.git#v0.8.0-rc2",
    ),
    (
        "godwoken-polyjuice",
        "https://github.com/nervosnetwork/godwoken-polyjuice.git#v0.8.2-rc1",
    ),
    ("clerkb", "https://github.com/nervosnetwork/clerkb.git#v0.4.0"),
]

DEFAULT_IMAGES = [
    ("docker_prebuild_image", "nervos/godwoken-prebuilds", "v0.6.0-rc2"),
    ("docker_manual_build_image", "retricsu/godwoken-manual-build", "latest"),
    ("docker_js_prebuild_image", "nervos/godwoken-js-prebuilds", "v0.6.0-rc2"),
]


def default_config() -> KickerConfig:
    """Build the default configuration.

    Returns:
        KickerConfig with six pinned packages, three images and all
        system flags off.
    """
    return KickerConfig(
        packages=tuple(
            PackageSpec(name=name, source_location=url, build_enabled=DEFAULT_BUILD_MODE)
            for name, url in DEFAULT_PACKAGES
        ),
        images=tuple(
            ImageSpec(id=image_id, image_name=name, image_tag=tag)
            for image_id, name, tag in DEFAULT_IMAGES
        ),
        system=SystemSettings(),
    )


__all__ = ["DEFAULT_IMAGES", "DEFAULT_PACKAGES", "default_config"]
