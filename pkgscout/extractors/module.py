"""
PowerShell Module Extractor

Extracts `Install-Module` invocations:

    Install-Module -Name PSReadLine -AllowPrerelease -Force
    Install-Module Pester -Repository PSGallery -Scope CurrentUser

Only flags that change *what* gets installed are kept in additional_args
(-AllowPrerelease and -Repository <value>). Flags the invocation layer
always supplies itself (-Force, -AllowClobber, -Scope) are dropped so they
are not specified twice.
"""

import re

from pkgscout.extractors.base import BaseExtractor, is_comment_line
from pkgscout.schema import InstallerType, PackageDefinition


INSTALL_MODULE_PATTERN = re.compile(r"\bInstall-Module\b(.*)", re.IGNORECASE)
MODULE_NAME = r"['\"]?([A-Za-z0-9][\w.\-]*)"
POSITIONAL_NAME_PATTERN = re.compile(r"^\s+" + MODULE_NAME)
NAME_PARAMETER_PATTERN = re.compile(
    r"(?<![\w-])-Name\s+" + MODULE_NAME, re.IGNORECASE
)
PRERELEASE_FLAG_PATTERN = re.compile(r"(?<![\w-])-AllowPrerelease\b", re.IGNORECASE)
REPOSITORY_FLAG_PATTERN = re.compile(
    r"(?<![\w-])-Repository\s+['\"]?([^\s'\"]+)", re.IGNORECASE
)


def retained_module_args(rest: str) -> str:
    """
    Keep only the Install-Module flags that select what is installed.

    Args:
        rest: Argument text following the module name

    Returns:
        Space-separated flag fragment, possibly empty
    """
    kept: list[str] = []

    if PRERELEASE_FLAG_PATTERN.search(rest):
        kept.append("-AllowPrerelease")

    repository = REPOSITORY_FLAG_PATTERN.search(rest)
    if repository:
        kept.append(f"-Repository {repository.group(1)}")

    return " ".join(kept)


class ModuleInstallExtractor(BaseExtractor):
    """Extracts PowerShell modules installed with Install-Module."""

    name = "ModuleInstall"

    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        results: list[PackageDefinition] = []

        for line in text.splitlines():
            if is_comment_line(line):
                continue

            match = INSTALL_MODULE_PATTERN.search(line)
            if not match:
                continue

            arguments = match.group(1)
            name_match = (
                POSITIONAL_NAME_PATTERN.search(arguments)
                or NAME_PARAMETER_PATTERN.search(arguments)
            )
            if not name_match:
                continue

            module_name = name_match.group(1)
            self.emit(
                PackageDefinition(
                    name=module_name,
                    package_id=module_name,
                    installer_type=InstallerType.PS_MODULE,
                    source_script=source_name,
                    additional_args=retained_module_args(arguments),
                ),
                seen,
                results,
            )

        return results
