"""
PkgScout Report Renderer

This module turns the package results into reports: a JSON document for
tooling and a Markdown summary for people reviewing a CI run.

Design Principles:
    1. Deterministic: the same results always render to the same bytes
    2. Grouped by script: scripts appear in the order they were scanned
    3. Status-aware: untested (skip-listed) packages show their reason

Output Structure (Markdown):
    1. Title and totals by status
    2. Totals by installer
    3. One table per source script
    4. Warnings (if any)
"""

import json
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from pkgscout.commands import build_install_command, format_command
from pkgscout.schema import InstallStatus, InstallerType, PackageDefinition, PackageResult


@dataclass
class ReportOptions:
    """
    Configuration options for report rendering.

    Attributes:
        include_installer_totals: Add a per-installer count table
        include_scope: Add a scope column to script tables
        include_warnings: Add a section listing extraction warnings
        title: Heading of the Markdown report
    """
    include_installer_totals: bool = True
    include_scope: bool = True
    include_warnings: bool = True
    title: str = "Package Discovery Report"


def group_by_script(results: Iterable[PackageResult]) -> dict[str, list[PackageResult]]:
    """
    Group results by source script, preserving first-seen script order.

    Args:
        results: Package results in catalog order

    Returns:
        Mapping of script name to its results
    """
    groups: dict[str, list[PackageResult]] = {}
    for result in results:
        groups.setdefault(result.package.source_script, []).append(result)
    return groups


def summarize(results: list[PackageResult]) -> dict:
    """
    Count results by status and by installer.

    Every status and installer appears in the output, in enum order,
    so consumers never have to handle a missing key.

    Args:
        results: Package results

    Returns:
        Dictionary with "total", "by_status" and "by_installer"
    """
    statuses = Counter(r.status for r in results)
    installers = Counter(r.package.installer_type for r in results)
    return {
        "total": len(results),
        "by_status": {s.value: statuses.get(s, 0) for s in InstallStatus},
        "by_installer": {i.value: installers.get(i, 0) for i in InstallerType},
    }


def render_json(
    results: list[PackageResult],
    warnings: Optional[list[str]] = None,
    indent: int = 2,
) -> str:
    """
    Serialize results as a JSON report.

    Args:
        results: Package results in catalog order
        warnings: Extraction and discovery warnings to include
        indent: JSON indentation

    Returns:
        JSON document with "summary", "packages" and "warnings"
    """
    return json.dumps(report_to_dict(results, warnings), indent=indent)


def report_to_dict(
    results: list[PackageResult],
    warnings: Optional[list[str]] = None,
) -> dict:
    """Build the JSON-serializable report structure."""
    return {
        "summary": summarize(results),
        "packages": [r.to_dict() for r in results],
        "warnings": list(warnings or []),
    }


class ReportRenderer:
    """
    Renders package results into a Markdown summary.

    Usage:
        renderer = ReportRenderer(results, warnings)
        markdown = renderer.render()
    """

    def __init__(
        self,
        results: list[PackageResult],
        warnings: Optional[list[str]] = None,
        options: Optional[ReportOptions] = None,
    ):
        """
        Initialize the renderer.

        Args:
            results: Package results in catalog order
            warnings: Extraction and discovery warnings
            options: Rendering options (uses defaults if not provided)
        """
        self.results = results
        self.warnings = warnings or []
        self.options = options or ReportOptions()
        self._sections: list[str] = []

    def render(self) -> str:
        """
        Generate the complete report.

        Returns:
            The rendered report as a Markdown string
        """
        self._sections = []

        self._add_title_section()
        self._add_installer_section()
        self._add_script_sections()
        self._add_warnings_section()

        return "\n".join(self._sections)

    def _add_section(self, content: str) -> None:
        if content.strip():
            self._sections.append(content)

    def _add_title_section(self) -> None:
        summary = summarize(self.results)
        section = f"# {self.options.title}\n\n"
        section += f"**Total packages:** {summary['total']}\n\n"
        section += "| Status | Count |\n"
        section += "|--------|-------|\n"
        for status, count in summary["by_status"].items():
            section += f"| {status} | {count} |\n"
        self._add_section(section)

    def _add_installer_section(self) -> None:
        if not self.options.include_installer_totals or not self.results:
            return

        counts = summarize(self.results)["by_installer"]
        section = "## Installers\n\n"
        section += "| Installer | Count |\n"
        section += "|-----------|-------|\n"
        for installer, count in counts.items():
            if count:
                section += f"| {installer} | {count} |\n"
        self._add_section(section)

    def _add_script_sections(self) -> None:
        """Add one table per source script."""
        if not self.results:
            self._add_section("No package declarations were found.\n")
            return

        for script, results in group_by_script(self.results).items():
            section = f"## {script}\n\n"
            if self.options.include_scope:
                section += "| Name | Package ID | Installer | Scope | Status | Note |\n"
                section += "|------|------------|-----------|-------|--------|------|\n"
            else:
                section += "| Name | Package ID | Installer | Status | Note |\n"
                section += "|------|------------|-----------|--------|------|\n"

            for result in results:
                pkg = result.package
                cells = [pkg.name, f"`{pkg.package_id}`", pkg.installer_type.value]
                if self.options.include_scope:
                    cells.append(pkg.scope or "-")
                cells += [result.status.value, result.message or ""]
                section += "| " + " | ".join(_escape_cell(c) for c in cells) + " |\n"

            self._add_section(section)

    def _add_warnings_section(self) -> None:
        if not self.options.include_warnings or not self.warnings:
            return

        section = "## Warnings\n\n"
        for warning in self.warnings:
            section += f"- {warning}\n"
        self._add_section(section)


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def render_summary(
    results: list[PackageResult],
    warnings: Optional[list[str]] = None,
    options: Optional[ReportOptions] = None,
) -> str:
    """
    Convenience function to render a Markdown summary.

    Args:
        results: Package results in catalog order
        warnings: Extraction and discovery warnings
        options: Optional rendering options

    Returns:
        Rendered report as a Markdown string
    """
    return ReportRenderer(results, warnings, options).render()


def render_plan(packages: Iterable[PackageDefinition]) -> str:
    """
    Render the install commands for a set of packages, one per line.

    Packages with an unknown installer are listed as comments.

    Args:
        packages: Packages in catalog order

    Returns:
        Newline-separated commands grouped under `# <script>` headers
    """
    lines: list[str] = []
    current_script: Optional[str] = None

    for package in packages:
        if package.source_script != current_script:
            if lines:
                lines.append("")
            lines.append(f"# {package.source_script}")
            current_script = package.source_script
        try:
            lines.append(format_command(build_install_command(package)))
        except ValueError as e:
            lines.append(f"# skipped: {e}")

    return "\n".join(lines) + ("\n" if lines else "")
