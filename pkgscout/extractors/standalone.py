"""
Standalone Invocation Extractors

Extracts packages installed by single-line installer invocations that name
the package literally:

    choco install git -y
    winget install --id Microsoft.PowerToys --scope user --silent

Both extractors scan line by line and ignore:
    - comment lines
    - lines referencing `$_` / `$PSItem`, which belong to a loop body and
      are covered by the hashtable and piped-array extractors

Heuristics and Limitations:
    - Only the first package named on a line is taken
    - winget IDs must contain a dot (Publisher.Product); msstore product
      codes and moniker-style names are not recognised as standalone installs
"""

import re
from typing import Optional

from pkgscout.extractors.base import (
    BaseExtractor,
    is_comment_line,
    references_implicit_variable,
)
from pkgscout.extractors.iteration import WINGET_INVOCATION_PATTERN, parse_scope
from pkgscout.schema import InstallerType, PackageDefinition


CHOCO_INSTALL_PATTERN = re.compile(
    r"\bchoco(?:\.exe)?\s+install\b([^\r\n]*)", re.IGNORECASE
)
CHOCO_PACKAGE_PATTERN = re.compile(r"[A-Za-z0-9][\w.+\-]*")

# choco flags whose following token is a value, never a package name.
CHOCO_VALUE_FLAGS = {
    "--version",
    "-s", "--source",
    "--params", "--package-parameters",
    "--ia", "--install-arguments",
    "-u", "--user",
    "-p", "--password",
    "--cache", "--cache-location",
    "--execution-timeout",
}

WINGET_ID_PATTERN = re.compile(r"[A-Za-z0-9][\w+\-]*(?:\.[\w+\-]+)+")
VERSION_LIKE_PATTERN = re.compile(r"[\d.]+")
ARGUMENT_TOKEN_PATTERN = re.compile(r"'[^']*'|\"[^\"]*\"|\S+")

ID_FLAGS = {"--id", "-id"}

# winget flags whose following token is a value, never a package ID.
VALUE_FLAGS = {
    "-v", "--version",
    "-s", "--source",
    "--scope",
    "-l", "--location",
    "-o", "--log",
    "--override",
    "--custom",
    "--architecture", "-a",
    "--locale",
    "--header",
}


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "'\"":
        return token[1:-1]
    return token


def find_winget_id(arguments: str) -> Optional[str]:
    """
    Find the package ID in the arguments of a `winget install` call.

    An explicit `--id` value wins; otherwise the first positional token
    shaped like `Publisher.Product` is taken. Flags, flag values and
    version numbers are never returned.

    Args:
        arguments: Argument text following `winget install`

    Returns:
        The package ID, or None if no dotted identifier is present
    """
    tokens = [_unquote(t) for t in ARGUMENT_TOKEN_PATTERN.findall(arguments)]

    for index, token in enumerate(tokens):
        lowered = token.lower()
        if lowered.startswith("--id="):
            candidate = token.split("=", 1)[1]
        elif lowered in ID_FLAGS and index + 1 < len(tokens):
            candidate = tokens[index + 1]
        else:
            continue
        if WINGET_ID_PATTERN.fullmatch(candidate):
            return candidate

    previous = ""
    for token in tokens:
        if (
            not token.startswith("-")
            and previous.lower() not in VALUE_FLAGS
            and previous.lower() not in ID_FLAGS
            and WINGET_ID_PATTERN.fullmatch(token)
            and not VERSION_LIKE_PATTERN.fullmatch(token)
        ):
            return token
        previous = token

    return None


def find_choco_package(arguments: str) -> Optional[str]:
    """
    Find the package name in the arguments of a `choco install` call.

    Flags are skipped together with the value of value-taking flags
    (`--version 1.2.3`, `--params "..."`); `--flag=value` forms are a
    single token.

    Args:
        arguments: Argument text following `choco install`

    Returns:
        The first package name, or None if the first positional argument
        is not a literal name (a variable, for example)
    """
    tokens = [_unquote(t) for t in ARGUMENT_TOKEN_PATTERN.findall(arguments)]

    skip_value = False
    for token in tokens:
        if skip_value:
            skip_value = False
            continue
        if token.startswith("-"):
            skip_value = token.lower() in CHOCO_VALUE_FLAGS
            continue
        package = CHOCO_PACKAGE_PATTERN.match(token)
        return package.group(0) if package else None

    return None


def standalone_lines(text: str):
    """Yield lines that may hold a standalone invocation."""
    for line in text.splitlines():
        if is_comment_line(line) or references_implicit_variable(line):
            continue
        yield line


class ChocoInstallExtractor(BaseExtractor):
    """Extracts `choco install <package>` lines outside of loops."""

    name = "ChocoInstall"

    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        results: list[PackageDefinition] = []

        for line in standalone_lines(text):
            match = CHOCO_INSTALL_PATTERN.search(line)
            if not match:
                continue
            package_name = find_choco_package(match.group(1))
            if package_name is None:
                continue
            self.emit(
                PackageDefinition(
                    name=package_name,
                    package_id=package_name,
                    installer_type=InstallerType.CHOCO,
                    source_script=source_name,
                ),
                seen,
                results,
            )

        return results


class WingetInstallExtractor(BaseExtractor):
    """Extracts `winget install <Publisher.Product>` lines outside of loops."""

    name = "WingetInstall"

    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        results: list[PackageDefinition] = []

        for line in standalone_lines(text):
            match = WINGET_INVOCATION_PATTERN.search(line)
            if not match:
                continue
            arguments = match.group(1)
            package_id = find_winget_id(arguments)
            if package_id is None:
                continue
            self.emit(
                PackageDefinition(
                    name=package_id,
                    package_id=package_id,
                    installer_type=InstallerType.WINGET,
                    source_script=source_name,
                    scope=parse_scope(arguments, self.options.default_scope),
                ),
                seen,
                results,
            )

        return results
