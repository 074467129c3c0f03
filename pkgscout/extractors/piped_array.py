"""
Piped Array Package Extractor

Extracts package names from literal string arrays piped into a bulk
install loop:

    @('git', 'nodejs', '7zip') | ForEach-Object { choco install $_ -y }

    'ripgrep', 'fd' | % {
        scoop install $_
    }

Every quoted literal becomes a package whose name is also its identity.
The installer is whichever of choco or scoop the loop body invokes; a loop
that invokes neither is not a package declaration. A pipeline whose first
line is commented out is ignored.
"""

import re

from pkgscout.extractors.base import BaseExtractor, is_comment_line
from pkgscout.extractors.iteration import (
    CHOCO_INVOCATION_PATTERN,
    SCOOP_INVOCATION_PATTERN,
)
from pkgscout.schema import InstallerType, PackageDefinition


STRING_LITERAL = r"(?:'[^'\r\n]+'" + r'|"[^"\r\n]+")'

# A comma-separated run of string literals, optionally wrapped in @( ),
# piped into ForEach-Object / foreach / % with a brace-delimited body.
PIPED_ARRAY_PATTERN = re.compile(
    r"(?:@\(\s*)?"
    r"(" + STRING_LITERAL + r"(?:\s*,\s*" + STRING_LITERAL + r")*)"
    r"\s*\)?\s*\|\s*(?:ForEach-Object|foreach|%)\s*\{([^}]*)\}",
    re.IGNORECASE,
)
LITERAL_VALUE_PATTERN = re.compile(r"'([^'\r\n]+)'" + r'|"([^"\r\n]+)"')


def split_literals(array_text: str) -> list[str]:
    """
    Split a comma-separated run of string literals into their values.

    Args:
        array_text: Text such as `'git', "nodejs"`

    Returns:
        Literal values with surrounding whitespace removed, empty ones dropped
    """
    values = []
    for match in LITERAL_VALUE_PATTERN.finditer(array_text):
        value = (match.group(1) or match.group(2) or "").strip()
        if value:
            values.append(value)
    return values


class PipedArrayExtractor(BaseExtractor):
    """Extracts packages from string arrays piped into a choco/scoop loop."""

    name = "PipedArray"

    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        results: list[PackageDefinition] = []

        for match in PIPED_ARRAY_PATTERN.finditer(text):
            line_start = text.rfind("\n", 0, match.start()) + 1
            if is_comment_line(text[line_start:match.end()]):
                continue

            body = match.group(2)
            if CHOCO_INVOCATION_PATTERN.search(body):
                installer = InstallerType.CHOCO
            elif SCOOP_INVOCATION_PATTERN.search(body):
                installer = InstallerType.SCOOP
            else:
                continue

            for package_name in split_literals(match.group(1)):
                self.emit(
                    PackageDefinition(
                        name=package_name,
                        package_id=package_name,
                        installer_type=installer,
                        source_script=source_name,
                    ),
                    seen,
                    results,
                )

        return results
