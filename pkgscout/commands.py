"""
Install Command Planning

Builds the command line the install invocation layer runs for each
discovered package. Nothing is executed here; the planner is the contract
between discovery (which records scope and extra arguments) and the layer
that shells out to the package managers.

The invocation layer always supplies -Force, -AllowClobber and
-Scope AllUsers for modules, which is why the module extractor strips
those flags from the declared arguments.
"""

import shlex

from pkgscout.schema import InstallerType, PackageDefinition


# Timeout the invocation layer applies to each install, in seconds.
INSTALL_TIMEOUT_SECONDS = 600

WINGET_COMMON_FLAGS = [
    "--exact",
    "--silent",
    "--accept-package-agreements",
    "--accept-source-agreements",
]


def _powershell(script: str) -> list[str]:
    return ["pwsh", "-NoProfile", "-NonInteractive", "-Command", script]


def _quote(value: str) -> str:
    """Quote a value as a single-quoted PowerShell string."""
    return "'" + value.replace("'", "''") + "'"


def build_install_command(package: PackageDefinition) -> list[str]:
    """
    Build the argv that installs a package.

    Args:
        package: A discovered package definition

    Returns:
        The command as a list of arguments

    Raises:
        ValueError: If the package's installer type is UNKNOWN
    """
    installer = package.installer_type

    if installer == InstallerType.WINGET:
        command = ["winget", "install", "--id", package.package_id, *WINGET_COMMON_FLAGS]
        if package.scope:
            command += ["--scope", package.scope]
        return command

    if installer == InstallerType.WINGET_STORE:
        return [
            "winget", "install", "--id", package.package_id,
            "--source", "msstore",
            "--accept-package-agreements", "--accept-source-agreements",
        ]

    if installer == InstallerType.CHOCO:
        return ["choco", "install", package.package_id, "-y", "--no-progress"]

    if installer == InstallerType.SCOOP:
        return ["scoop", "install", package.package_id]

    if installer == InstallerType.PS_MODULE:
        script = (
            f"Install-Module -Name {_quote(package.package_id)} "
            f"-Force -AllowClobber -Scope AllUsers"
        )
        if package.additional_args:
            script += f" {package.additional_args}"
        return _powershell(script)

    if installer == InstallerType.SIDELOAD:
        script = (
            "$bundle = Join-Path $env:TEMP 'sideload.msixbundle'; "
            f"Invoke-WebRequest -Uri {_quote(package.package_id)} -OutFile $bundle; "
            "Add-AppxPackage -Path $bundle"
        )
        return _powershell(script)

    raise ValueError(
        f"Cannot build an install command for {package.name!r}: "
        f"installer type is {installer.value}"
    )


def format_command(command: list[str]) -> str:
    """Render an argv as a single shell-quoted line for display."""
    return shlex.join(command)
