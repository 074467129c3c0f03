"""
CI Skip List

Packages that cannot be installed on a hosted CI runner are listed here
with the reason. They are reported as untested instead of being attempted.

Lookup keys are package IDs, except for Chocolatey where the package name
is used (choco packages have no separate ID).
"""

from typing import Iterable, Optional

from pkgscout.schema import (
    InstallerType,
    InstallStatus,
    PackageDefinition,
    PackageResult,
)


# Package identity -> reason it is not installed in CI.
CI_SKIP_LIST: dict[str, str] = {
    # Require virtualization or kernel features unavailable on CI runners
    "Docker.DockerDesktop": "Requires Hyper-V/WSL2 virtualization",
    "Microsoft.WSL": "Requires a reboot to enable Windows features",
    "Canonical.Ubuntu.2204": "Requires WSL to be enabled",
    "docker-desktop": "Requires Hyper-V/WSL2 virtualization",
    "wsl2": "Requires a reboot to enable Windows features",

    # Hardware-specific drivers and utilities
    "Nvidia.GeForceExperience": "Requires NVIDIA hardware",
    "nvidia-display-driver": "Requires NVIDIA hardware",
    "Logitech.GHUB": "Requires attached Logitech devices",

    # Interactive or licensed installers
    "Microsoft.VisualStudio.2022.Enterprise": "Licensed; installer exceeds CI timeout",
    "Microsoft.Office": "Requires an activated license",
    "9NBLGGH4NNS1": "Microsoft Store requires a signed-in account",
}


def get_skip_reason(
    package: PackageDefinition,
    skip_list: Optional[dict[str, str]] = None,
) -> Optional[str]:
    """
    Look up why a package is not installed in CI.

    Args:
        package: The discovered package
        skip_list: Mapping to consult (defaults to CI_SKIP_LIST)

    Returns:
        The reason, or None if the package should be installed
    """
    skip_list = CI_SKIP_LIST if skip_list is None else skip_list

    if package.installer_type == InstallerType.CHOCO:
        return skip_list.get(package.name)
    return skip_list.get(package.package_id)


def apply_skip_list(
    packages: Iterable[PackageDefinition],
    skip_list: Optional[dict[str, str]] = None,
) -> list[PackageResult]:
    """
    Wrap packages in results, marking skip-listed ones as untested.

    Args:
        packages: Discovered packages, in catalog order
        skip_list: Mapping to consult (defaults to CI_SKIP_LIST)

    Returns:
        One PackageResult per package, in the same order
    """
    results = []
    for package in packages:
        reason = get_skip_reason(package, skip_list)
        if reason is None:
            results.append(PackageResult(package=package))
        else:
            results.append(
                PackageResult(
                    package=package,
                    status=InstallStatus.UNTESTED,
                    message=reason,
                )
            )
    return results
