"""
Sideload Extractor

Detects an app package downloaded from a URL and installed directly with
Add-AppxPackage rather than through a package manager catalog:

    Write-Host "Installing Windows Terminal..."
    $url = "https://github.com/microsoft/terminal/releases/download/v1.0/Terminal.msixbundle"
    Invoke-WebRequest -Uri $url -OutFile $bundle
    Add-AppxPackage -Path $bundle

The app name comes from the closest "Installing <name>" announcement before
the marker; the package ID is the download URL found near the marker.

Heuristics and Limitations:
    - Only the first Add-AppxPackage in a script is inspected, so at most
      one sideload record is produced per script; scripts with several
      markers are reported with a warning
    - When the fetch expression uses a variable, the first app-package URL
      literal in the window is taken instead
"""

import re

from pkgscout.extractors.base import BaseExtractor
from pkgscout.schema import InstallerType, PackageDefinition


SIDELOAD_MARKER_PATTERN = re.compile(r"\bAdd-AppxPackage\b", re.IGNORECASE)

ANNOUNCEMENT_PATTERN = re.compile(
    r"\bInstalling\s+([^\"'`\r\n]+?)\s*(?:\.{3}|…|[\"'`\r\n]|$)",
    re.IGNORECASE,
)

FETCH_URL_PATTERN = re.compile(
    r"(?:\bInvoke-WebRequest\b|\biwr\b|\bStart-BitsTransfer\b|\.DownloadFile\s*\(|\bcurl\b|\bwget\b)"
    r"[^\r\n]*?(https?://[^\s'\"\)]+)",
    re.IGNORECASE,
)
PACKAGE_URL_PATTERN = re.compile(
    r"https?://[^\s'\"\)]+?\.(?:msixbundle|appxbundle|msix|appx)\b",
    re.IGNORECASE,
)

DEFAULT_SIDELOAD_NAME = "Sideloaded App"
DEFAULT_SIDELOAD_URL = "unknown"


class SideloadExtractor(BaseExtractor):
    """Extracts at most one sideloaded app package per script."""

    name = "Sideload"

    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        results: list[PackageDefinition] = []

        markers = list(SIDELOAD_MARKER_PATTERN.finditer(text))
        if not markers:
            return results

        if len(markers) > 1:
            self.add_warning(
                f"{len(markers)} Add-AppxPackage calls found; only the first "
                f"is inspected, later sideloads are not reported"
            )

        position = markers[0].start()
        self.emit(
            PackageDefinition(
                name=self._find_app_name(text, position),
                package_id=self._find_download_url(text, position),
                installer_type=InstallerType.SIDELOAD,
                source_script=source_name,
            ),
            seen,
            results,
        )

        return results

    def _find_app_name(self, text: str, position: int) -> str:
        """
        Find the closest "Installing <name>" announcement before the marker.

        Args:
            text: The full script text
            position: Offset of the sideload marker

        Returns:
            The announced name, or DEFAULT_SIDELOAD_NAME
        """
        window = text[max(0, position - self.options.sideload_name_lookback):position]

        name = ""
        for match in ANNOUNCEMENT_PATTERN.finditer(window):
            candidate = match.group(1).strip().rstrip(".")
            if candidate:
                name = candidate

        return name or DEFAULT_SIDELOAD_NAME

    def _find_download_url(self, text: str, position: int) -> str:
        """
        Find the URL the sideloaded package is fetched from.

        Args:
            text: The full script text
            position: Offset of the sideload marker

        Returns:
            The download URL, or DEFAULT_SIDELOAD_URL
        """
        start = max(0, position - self.options.sideload_url_before)
        window = text[start:position + self.options.sideload_url_after]

        fetch = FETCH_URL_PATTERN.search(window)
        if fetch:
            return fetch.group(1)

        literal = PACKAGE_URL_PATTERN.search(window)
        if literal:
            return literal.group(0)

        return DEFAULT_SIDELOAD_URL
