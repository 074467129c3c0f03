"""
Package Catalog

Runs the extractors over every declaration script and concatenates the
results into the package catalog consumed by the skip-list, the install
planner and the reporter.

There is no cross-script deduplication: a package declared in
two scripts yields two records, each attributed to its own script. Output
order is script order, then per-script discovery order, so the same inputs
always produce the same catalog.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from pkgscout.discovery import DiscoveryResult, discover_scripts
from pkgscout.extractors import ExtractionOptions, create_default_registry
from pkgscout.schema import PackageDefinition


@dataclass
class Catalog:
    """
    Packages discovered across a set of scripts.

    Attributes:
        packages: All discovered packages, in script then discovery order
        warnings: Extraction warnings, each prefixed with its script name
        script_count: Number of scripts scanned
    """
    packages: list[PackageDefinition] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    script_count: int = 0

    def get_packages_by_script(self, source_script: str) -> list[PackageDefinition]:
        """
        Filter packages declared in one script.

        Args:
            source_script: The script name

        Returns:
            Packages whose source_script matches, in discovery order
        """
        return [p for p in self.packages if p.source_script == source_script]


def build_catalog(
    sources: Iterable[tuple[str, str]],
    options: Optional[ExtractionOptions] = None,
) -> Catalog:
    """
    Extract packages from every (name, text) pair, keeping warnings.

    Args:
        sources: (script name, script text) pairs in the desired order
        options: Extraction options (uses defaults if not provided)

    Returns:
        Catalog with packages and warnings from all scripts
    """
    registry = create_default_registry(options)
    catalog = Catalog()

    for source_name, text in sources:
        catalog.packages.extend(registry.extract_packages(text, source_name))
        catalog.warnings.extend(registry.get_warnings())
        catalog.script_count += 1

    return catalog


def discover_all(
    sources: Iterable[tuple[str, str]],
    options: Optional[ExtractionOptions] = None,
) -> list[PackageDefinition]:
    """
    Extract packages from every script and concatenate the results.

    Args:
        sources: (script name, script text) pairs in the desired order
        options: Extraction options (uses defaults if not provided)

    Returns:
        All packages, in script order then per-script discovery order
    """
    return build_catalog(sources, options).packages


def scan_directory(
    path: str | Path,
    extra_excludes: Iterable[str] = (),
    options: Optional[ExtractionOptions] = None,
) -> tuple[DiscoveryResult, Catalog]:
    """
    Discover the declaration scripts under a directory and catalog them.

    Args:
        path: Repository root
        extra_excludes: Additional filename patterns to exclude
        options: Extraction options (uses defaults if not provided)

    Returns:
        Tuple of (discovery result, catalog). Read failures are recorded
        in the discovery result's warnings.

    Raises:
        ValueError: If the path does not exist or is not a directory
    """
    discovery = discover_scripts(path, extra_excludes=extra_excludes)
    catalog = build_catalog(discovery.load_sources(), options)
    return discovery, catalog
