"""
Base Extractor Interface

This module defines the abstract base class that every declaration rule
implements, the options object carrying the engine's tunable windows, and
the registry that applies the rules to one script in a fixed order.

Design Principles:
    1. Single Responsibility: each extractor recognises one install idiom
    2. Graceful Degradation: extractors never raise on malformed script text
    3. Explicit Dedup State: the set of seen keys is passed in per script,
       never held globally, so rule order is the only precedence mechanism
    4. Source Attribution: every record carries the script it came from

Usage Pattern:
    1. The registry is built with extractors in precedence order
    2. extract_packages() creates a fresh dedup set for the script
    3. Each extractor emits records whose keys are not yet in the set
    4. Warnings are collected from every extractor after the run
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pkgscout.schema import PackageDefinition


# Lines whose first non-blank character is this marker are ignored by
# every line-oriented rule.
COMMENT_MARKER = "#"

# References to the per-iteration variable mark a line as part of a loop
# body rather than a standalone invocation.
IMPLICIT_VARIABLE_PATTERN = re.compile(r"\$(?:_(?!\w)|PSItem\b)", re.IGNORECASE)


@dataclass
class ExtractionOptions:
    """
    Tunable windows for the heuristic rules.

    The bounded windows trade recall against precision: wide enough to
    reach a related statement separated by comments or blank lines, narrow
    enough not to leak into an unrelated block later in the script.

    Attributes:
        iteration_lookahead: Characters scanned after `$Var.Values |` for
            the install invocation consuming a container
        sideload_name_lookback: Characters scanned before the sideload
            marker for an "Installing <name>" announcement
        sideload_url_before: Characters before the sideload marker searched
            for the download URL
        sideload_url_after: Characters after the sideload marker searched
            for the download URL
        default_scope: Scope assumed when a winget invocation has no
            --scope flag
    """
    iteration_lookahead: int = 500
    sideload_name_lookback: int = 500
    sideload_url_before: int = 300
    sideload_url_after: int = 300
    default_scope: str = "machine"


def is_comment_line(line: str) -> bool:
    """Returns True if the line is a comment once leading whitespace is removed."""
    return line.strip().startswith(COMMENT_MARKER)


def references_implicit_variable(line: str) -> bool:
    """Returns True if the line uses `$_` or `$PSItem`."""
    return IMPLICIT_VARIABLE_PATTERN.search(line) is not None


class BaseExtractor(ABC):
    """
    Abstract base class for all declaration extractors.

    Each extractor is responsible for:
        - Recognising one idiom that means "install a package"
        - Emitting one PackageDefinition per declaration it recognises
        - Skipping any declaration whose dedup key was already seen
        - Recording non-fatal observations as warnings

    Subclasses must implement:
        - name: Human-readable name for the extractor
        - extract(): Scan a script and emit new records

    Attributes:
        name: Human-readable identifier for this extractor
        options: The windows and defaults this extractor applies
    """

    name: str = "Base"

    def __init__(self, options: Optional[ExtractionOptions] = None):
        """
        Initialize the extractor.

        Args:
            options: Extraction options (uses defaults if not provided)
        """
        self.options = options or ExtractionOptions()
        self._warnings: list[str] = []

    def add_warning(self, message: str) -> None:
        """
        Record a warning encountered during extraction.

        Args:
            message: The warning message to record
        """
        self._warnings.append(f"[{self.name}] {message}")

    def get_warnings(self) -> list[str]:
        """
        Get all warnings recorded during extraction.

        Returns:
            List of warning messages
        """
        return self._warnings.copy()

    def clear_warnings(self) -> None:
        """Clear all recorded warnings."""
        self._warnings = []

    @staticmethod
    def emit(
        package: PackageDefinition,
        seen: set[str],
        results: list[PackageDefinition],
    ) -> bool:
        """
        Append a package unless its dedup key was already observed.

        Args:
            package: The candidate record
            seen: Dedup keys observed so far in this script
            results: The extractor's output list

        Returns:
            True if the package was appended
        """
        key = package.dedup_key
        if key in seen:
            return False
        seen.add(key)
        results.append(package)
        return True

    @abstractmethod
    def extract(
        self,
        text: str,
        source_name: str,
        seen: set[str],
    ) -> list[PackageDefinition]:
        """
        Extract package declarations from one script.

        Implementations must add the key of every record they emit to
        `seen` and must not emit a record whose key is already present.

        Args:
            text: Raw script text
            source_name: Name recorded as each record's source_script
            seen: Dedup keys observed by earlier extractors for this script

        Returns:
            Newly discovered packages, in discovery order
        """
        pass


class ExtractorRegistry:
    """
    Ordered collection of extractors applied to each script.

    Registration order is precedence order: when two extractors observe the
    same dedup key, the one registered first wins.

    Usage:
        registry = ExtractorRegistry()
        registry.register(HashtableExtractor())
        registry.register(PipedArrayExtractor())

        packages = registry.extract_packages(text, "dev-tools.ps1")
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._extractors: list[BaseExtractor] = []
        self._warnings: list[str] = []

    def register(self, extractor: BaseExtractor) -> None:
        """
        Register an extractor with the registry.

        Args:
            extractor: The extractor instance to register
        """
        self._extractors.append(extractor)

    def get_extractors(self) -> list[BaseExtractor]:
        """
        Get all registered extractors.

        Returns:
            List of registered extractor instances, in precedence order
        """
        return self._extractors.copy()

    def get_warnings(self) -> list[str]:
        """
        Get the warnings from the most recent extract_packages() call.

        Returns:
            List of warning messages, each prefixed with the script name
        """
        return self._warnings.copy()

    def extract_packages(self, text: str, source_name: str) -> list[PackageDefinition]:
        """
        Run every extractor over one script and merge their results.

        The dedup set lives only for the duration of this call, so the same
        package declared in two scripts yields two records.

        Args:
            text: Raw script text
            source_name: Name recorded as each record's source_script

        Returns:
            Deduplicated packages, ordered by extractor then by position
        """
        seen: set[str] = set()
        packages: list[PackageDefinition] = []
        self._warnings = []

        for extractor in self._extractors:
            extractor.clear_warnings()
            packages.extend(extractor.extract(text, source_name, seen))
            self._warnings.extend(
                f"{source_name}: {warning}" for warning in extractor.get_warnings()
            )

        return packages
