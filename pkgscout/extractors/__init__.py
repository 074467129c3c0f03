"""
Package declaration extractors for PowerShell setup scripts.

This package contains the rules that recover "install this package with
this installer" declarations from script text. Each extractor recognises
one idiom; the registry applies them in a fixed precedence order with a
per-script dedup set.

Available Extractors (precedence order):
    - HashtableExtractor: `$X = @{ ... Id = '...' }` consumed by `$X.Values |`
    - PipedArrayExtractor: `@('a', 'b') | ForEach-Object { choco install $_ }`
    - ChocoInstallExtractor: standalone `choco install <pkg>`
    - WingetInstallExtractor: standalone `winget install <Publisher.Product>`
    - ModuleInstallExtractor: `Install-Module <name>`
    - SideloadExtractor: `Add-AppxPackage` of a downloaded bundle

Usage:
    from pkgscout.extractors import extract_packages

    packages = extract_packages(script_text, "dev-tools.ps1")
"""

from typing import Optional

from pkgscout.extractors.base import (
    BaseExtractor,
    ExtractionOptions,
    ExtractorRegistry,
)
from pkgscout.extractors.blocks import extract_blocks
from pkgscout.extractors.hashtable import HashtableExtractor
from pkgscout.extractors.iteration import classify_iteration
from pkgscout.extractors.module import ModuleInstallExtractor
from pkgscout.extractors.piped_array import PipedArrayExtractor
from pkgscout.extractors.sideload import SideloadExtractor
from pkgscout.extractors.standalone import (
    ChocoInstallExtractor,
    WingetInstallExtractor,
)
from pkgscout.schema import PackageDefinition


def create_default_registry(options: Optional[ExtractionOptions] = None) -> ExtractorRegistry:
    """
    Build a registry holding every extractor in precedence order.

    Args:
        options: Extraction options shared by all extractors

    Returns:
        A registry ready for extract_packages()
    """
    options = options or ExtractionOptions()
    registry = ExtractorRegistry()
    registry.register(HashtableExtractor(options))
    registry.register(PipedArrayExtractor(options))
    registry.register(ChocoInstallExtractor(options))
    registry.register(WingetInstallExtractor(options))
    registry.register(ModuleInstallExtractor(options))
    registry.register(SideloadExtractor(options))
    return registry


def extract_packages(
    text: str,
    source_name: str,
    options: Optional[ExtractionOptions] = None,
) -> list[PackageDefinition]:
    """
    Extract deduplicated package declarations from one script.

    Args:
        text: Raw script text
        source_name: Name recorded as each record's source_script
        options: Extraction options (uses defaults if not provided)

    Returns:
        Packages in rule precedence order, then source order
    """
    return create_default_registry(options).extract_packages(text, source_name)


__all__ = [
    "BaseExtractor",
    "ChocoInstallExtractor",
    "ExtractionOptions",
    "ExtractorRegistry",
    "HashtableExtractor",
    "ModuleInstallExtractor",
    "PipedArrayExtractor",
    "SideloadExtractor",
    "WingetInstallExtractor",
    "classify_iteration",
    "create_default_registry",
    "extract_blocks",
    "extract_packages",
]
