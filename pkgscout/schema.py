"""
PkgScout Package Schema

This module defines the data structures shared by every stage of the
pipeline. Extractors produce PackageDefinition records, the catalog
concatenates them, and the skip-list, planner and reporter consume them.

Design Principles:
    1. Installer types are a closed enumeration, never free-form strings
    2. Source tracking: every package records the script it came from
    3. Records are immutable once emitted by the engine
    4. Human-readable when serialized

Lifecycle:
    All records are created fresh per discovery run from read-only script
    text. Nothing persists beyond the run; durable storage is the job of
    whatever consumes the JSON report.
"""

from dataclasses import dataclass
from enum import Enum


class InstallerType(Enum):
    """
    The mechanism responsible for installing a discovered package.

    Values match the strings used in reports and deduplication keys.
    """
    WINGET = "winget"               # winget install --id Publisher.Product
    WINGET_STORE = "winget-store"   # winget install ... --source msstore
    CHOCO = "choco"                 # choco install <pkg>
    SCOOP = "scoop"                 # scoop install <pkg>
    PS_MODULE = "ps-module"         # Install-Module <name>
    SIDELOAD = "sideload"           # Add-AppxPackage of a downloaded bundle
    UNKNOWN = "unknown"             # No consuming installer could be found

    def __str__(self) -> str:
        return self.value


class InstallStatus(Enum):
    """
    Outcome of a package install, as reported by the invocation layer.

    Discovery itself only ever produces PENDING or UNTESTED (skip-listed).
    """
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    UNTESTED = "untested"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PackageDefinition:
    """
    A single "install this package with this installer" declaration.

    Attributes:
        name: Human label (defaults to package_id when no label exists)
        package_id: Install-time identity (winget ID, choco/scoop package,
            module name, or download URL for sideloaded apps)
        installer_type: The installer that consumes this package
        source_script: Name of the script the declaration was found in
        scope: Installer-specific scope (may be empty)
        additional_args: Opaque flag fragment passed through to the installer

    Example:
        >>> pkg = PackageDefinition(
        ...     name="Visual Studio Code",
        ...     package_id="Microsoft.VisualStudioCode",
        ...     installer_type=InstallerType.WINGET,
        ...     source_script="dev-tools.ps1",
        ...     scope="machine",
        ... )
        >>> pkg.dedup_key
        'winget:Microsoft.VisualStudioCode'
    """
    name: str
    package_id: str
    installer_type: InstallerType
    source_script: str
    scope: str = ""
    additional_args: str = ""

    @property
    def dedup_key(self) -> str:
        """Identity used to suppress duplicate discoveries within one script."""
        return make_dedup_key(self.installer_type, self.package_id)

    def to_dict(self) -> dict[str, str]:
        """Serialize with stable key order for reports."""
        return {
            "name": self.name,
            "package_id": self.package_id,
            "installer_type": self.installer_type.value,
            "source_script": self.source_script,
            "scope": self.scope,
            "additional_args": self.additional_args,
        }


@dataclass(frozen=True)
class ContainerBlock:
    """
    A balanced `$Name = @{ ... }` container literal found in script text.

    Attributes:
        variable_name: Name of the variable the container is assigned to
            (without the leading `$`)
        inner_text: Text between the opening `{` and its matching `}`
        end_offset: Offset just past the matching `}`
    """
    variable_name: str
    inner_text: str
    end_offset: int


@dataclass(frozen=True)
class IterationResult:
    """
    The installer that consumes a container's values.

    Attributes:
        installer_type: One of WINGET, WINGET_STORE, CHOCO, SCOOP or UNKNOWN
        scope: Install scope; only standard winget invocations override it
    """
    installer_type: InstallerType
    scope: str = "machine"

    @property
    def is_unknown(self) -> bool:
        return self.installer_type == InstallerType.UNKNOWN


@dataclass
class PackageResult:
    """
    A discovered package together with its install outcome.

    Attributes:
        package: The discovered package definition
        status: Install outcome (populated by the invocation layer)
        message: Skip reason, error output, or other human-readable note
    """
    package: PackageDefinition
    status: InstallStatus = InstallStatus.PENDING
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        data = self.package.to_dict()
        data["status"] = self.status.value
        data["message"] = self.message
        return data


def make_dedup_key(installer_type: InstallerType, package_id: str) -> str:
    """
    Build the per-script deduplication key.

    Args:
        installer_type: The installer consuming the package
        package_id: The install-time identity

    Returns:
        Key of the form "installer:package_id"
    """
    return f"{installer_type.value}:{package_id}"
