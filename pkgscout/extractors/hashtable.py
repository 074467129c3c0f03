"""
Hashtable Package Extractor

Extracts packages declared as entries of a hashtable that a later pipeline
feeds to an installer:

    $DevTools = @{
        'VSCode' = @{ Name = 'Visual Studio Code'; Id = 'Microsoft.VisualStudioCode' }
        # 'Rider' = @{ Name = 'Rider'; Id = 'JetBrains.Rider' }
    }
    $DevTools.Values | ForEach-Object {
        winget install --id $_.Id --scope machine --silent
    }

Each entry line carrying an `Id = '...'` field becomes one package. The
installer and scope come from the consuming pipeline (see iteration.py);
a container nobody iterates over contributes nothing.

Heuristics and Limitations:
    - Entries are read line by line; an entry split across lines is only
      recognised if its Id field and Name field share a line
    - A line without an Id field is not a declaration and is skipped
"""

import re

from pkgscout.extractors.base import BaseExtractor, is_comment_line
from pkgscout.extractors.blocks import extract_blocks
from pkgscout.extractors.iteration import classify_iteration
from pkgscout.schema import PackageDefinition


# `Id` or `PackageId`; the word boundary keeps `Id` from matching inside
# longer names such as `ProductId`.
ID_FIELD_PATTERN = re.compile(
    r"\b(?:Package)?Id\s*=\s*(['\"])(.*?)\1", re.IGNORECASE
)
NAME_FIELD_PATTERN = re.compile(r"\bName\s*=\s*(['\"])(.*?)\1", re.IGNORECASE)


class HashtableExtractor(BaseExtractor):
    """
    Extracts packages from hashtable containers consumed by an install loop.

    Usage:
        extractor = HashtableExtractor()
        packages = extractor.extract(text, "dev-tools.ps1", seen=set())
    """

    name = "Hashtable"

    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        results: list[PackageDefinition] = []

        for block in extract_blocks(text):
            if not ID_FIELD_PATTERN.search(block.inner_text):
                continue

            iteration = classify_iteration(block.variable_name, text, self.options)
            if iteration.is_unknown:
                self.add_warning(
                    f"${block.variable_name} declares package ids but no "
                    f"install loop consuming it was found; entries skipped"
                )
                continue

            for line in block.inner_text.splitlines():
                if is_comment_line(line):
                    continue

                id_match = ID_FIELD_PATTERN.search(line)
                if not id_match:
                    continue
                package_id = id_match.group(2).strip()
                if not package_id:
                    continue

                name_match = NAME_FIELD_PATTERN.search(line)
                label = name_match.group(2).strip() if name_match else ""

                self.emit(
                    PackageDefinition(
                        name=label or package_id,
                        package_id=package_id,
                        installer_type=iteration.installer_type,
                        source_script=source_name,
                        scope=iteration.scope,
                    ),
                    seen,
                    results,
                )

        return results
