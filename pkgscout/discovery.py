"""
PkgScout Script Discovery Module

This module walks a setup-script repository and selects the PowerShell
scripts that declare packages, excluding helper and driver scripts by
filename convention.

Key Responsibilities:
    1. Walk the directory tree starting from a root path
    2. Skip version control and tooling directories
    3. Classify each script as a declaration script or an excluded one
    4. Produce a stable, lexicographic order so reports are reproducible
    5. Read script text into the (name, text) pairs the catalog consumes

Design Notes:
    - We use pathlib for cross-platform path handling
    - Exclusion patterns are fnmatch-style and matched against the file name
    - Script names are POSIX-style paths relative to the root, so the same
      repository yields the same names on Windows and Linux

Limitations:
    - Symlinks are not followed to avoid cycles
    - Scripts that cannot be decoded as UTF-8 are skipped with a warning
"""

import fnmatch
import os
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Optional


class ScriptCategory(Enum):
    """Whether a discovered script is scanned for package declarations."""
    DECLARATION = auto()    # Declares packages; scanned by the extractors
    EXCLUDED = auto()       # Helper, test or driver script; never scanned


# Files considered scripts at all.
SCRIPT_PATTERNS: list[str] = ["*.ps1"]

# Scripts that never declare packages, by filename convention.
# Each tuple contains: (glob_pattern, description). First match wins.
EXCLUDED_SCRIPT_PATTERNS: list[tuple[str, str]] = [
    ("_*.ps1", "Shared helper script"),
    ("*.Tests.ps1", "Pester test suite"),
    ("test-*.ps1", "CI test driver"),
    ("install-all.ps1", "Aggregate installer driver"),
    ("profile.ps1", "PowerShell profile"),
    ("Microsoft.PowerShell_profile.ps1", "PowerShell profile"),
]

# Directories to always skip.
DEFAULT_IGNORE_DIRS: set[str] = {
    ".git",
    ".svn",
    ".hg",
    ".github",
    ".vscode",
    ".idea",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "build",
    "dist",
}


@dataclass
class DiscoveredScript:
    """
    Represents a single discovered script.

    Attributes:
        path: Absolute path to the script
        name: POSIX-style path relative to the root; used as source_script
        category: Whether the script is scanned
        category_note: Human-readable explanation of the category
    """
    path: Path
    name: str
    category: ScriptCategory
    category_note: str = ""

    def __str__(self) -> str:
        return f"{self.name} [{self.category.name}]"


@dataclass
class DiscoveryResult:
    """
    Complete result of a script discovery operation.

    Attributes:
        root_path: The repository root that was scanned
        scripts: All discovered scripts, sorted by name
        skipped_dirs: Directories that were skipped and why
        warnings: Any warnings generated during discovery or loading
        exceeded_limit: True if the script count exceeded the limit
    """
    root_path: Path
    scripts: list[DiscoveredScript] = field(default_factory=list)
    skipped_dirs: list[tuple[str, str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    exceeded_limit: bool = False

    @property
    def declaration_scripts(self) -> list[DiscoveredScript]:
        """Scripts that should be scanned, in lexicographic order."""
        return [s for s in self.scripts if s.category == ScriptCategory.DECLARATION]

    @property
    def excluded_scripts(self) -> list[DiscoveredScript]:
        """Scripts excluded by filename convention."""
        return [s for s in self.scripts if s.category == ScriptCategory.EXCLUDED]

    def load_sources(self) -> list[tuple[str, str]]:
        """
        Read every declaration script.

        Unreadable scripts are skipped and recorded in `warnings`.

        Returns:
            (name, text) pairs in lexicographic name order
        """
        sources: list[tuple[str, str]] = []
        for script in self.declaration_scripts:
            text = read_file_safe(script.path, self.warnings)
            if text is not None:
                sources.append((script.name, text))
        return sources


def read_file_safe(
    path: Path,
    warnings: list[str],
    encoding: str = "utf-8-sig",
) -> Optional[str]:
    """
    Safely read a file's contents, returning None on error.

    The default encoding strips the byte-order mark that Windows editors
    commonly prepend to PowerShell scripts.

    Args:
        path: Path to the file to read
        warnings: List that receives a message if reading fails
        encoding: File encoding

    Returns:
        File contents as a string, or None if reading failed
    """
    try:
        with open(path, "r", encoding=encoding) as f:
            return f.read()
    except FileNotFoundError:
        warnings.append(f"File not found: {path}")
    except PermissionError:
        warnings.append(f"Permission denied: {path}")
    except UnicodeDecodeError:
        warnings.append(f"Could not decode file (not {encoding}): {path}")
    except OSError as e:
        warnings.append(f"Could not read file {path}: {e}")
    return None


class ScriptDiscovery:
    """
    Discovers and categorizes setup scripts in a repository.

    Usage:
        discovery = ScriptDiscovery("/path/to/setup-scripts")
        result = discovery.discover()

        for name, text in result.load_sources():
            ...

    Attributes:
        root_path: The repository root to scan
        max_scripts: Number of scripts after which a warning is issued
        extra_excludes: Additional fnmatch patterns for excluded scripts
    """

    MAX_SCRIPTS_DEFAULT = 500

    def __init__(
        self,
        root_path: str | Path,
        max_scripts: int = MAX_SCRIPTS_DEFAULT,
        extra_excludes: Iterable[str] = (),
    ):
        """
        Initialize the script discovery.

        Args:
            root_path: Path to the repository root
            max_scripts: Script count before issuing a warning
            extra_excludes: Additional filename patterns to exclude

        Raises:
            ValueError: If the root does not exist or is not a directory
        """
        self.root_path = Path(root_path).resolve()
        self.max_scripts = max_scripts
        self.extra_excludes = list(extra_excludes)

        if not self.root_path.exists():
            raise ValueError(f"Path does not exist: {self.root_path}")
        if not self.root_path.is_dir():
            raise ValueError(f"Path is not a directory: {self.root_path}")

    def _is_script(self, filename: str) -> bool:
        return any(fnmatch.fnmatch(filename.lower(), p.lower()) for p in SCRIPT_PATTERNS)

    def _categorize_script(self, filename: str) -> tuple[ScriptCategory, str]:
        """
        Decide whether a script declares packages.

        Matching is case-insensitive, as file names are on Windows.

        Args:
            filename: The script's file name

        Returns:
            Tuple of (category, description)
        """
        lowered = filename.lower()

        for pattern, description in EXCLUDED_SCRIPT_PATTERNS:
            if fnmatch.fnmatch(lowered, pattern.lower()):
                return ScriptCategory.EXCLUDED, description

        for pattern in self.extra_excludes:
            if fnmatch.fnmatch(lowered, pattern.lower()):
                return ScriptCategory.EXCLUDED, f"Excluded by pattern: {pattern}"

        return ScriptCategory.DECLARATION, "Package declaration script"

    def discover(self) -> DiscoveryResult:
        """
        Perform script discovery on the repository.

        Returns:
            DiscoveryResult with scripts sorted by their relative name
        """
        result = DiscoveryResult(root_path=self.root_path)

        for dirpath, dirnames, filenames in os.walk(self.root_path):
            current_dir = Path(dirpath)

            # Prune ignored directories in-place so os.walk skips them
            for dirname in sorted(dirnames):
                if dirname in DEFAULT_IGNORE_DIRS:
                    dirnames.remove(dirname)
                    relative = (current_dir / dirname).relative_to(self.root_path)
                    result.skipped_dirs.append((relative.as_posix(), f"Default ignore: {dirname}"))

            for filename in filenames:
                if not self._is_script(filename):
                    continue

                file_path = current_dir / filename
                if file_path.is_symlink():
                    continue

                category, note = self._categorize_script(filename)
                result.scripts.append(
                    DiscoveredScript(
                        path=file_path,
                        name=file_path.relative_to(self.root_path).as_posix(),
                        category=category,
                        category_note=note,
                    )
                )

        result.scripts.sort(key=lambda s: s.name)

        if len(result.scripts) > self.max_scripts:
            result.exceeded_limit = True
            result.warnings.append(
                f"Repository contains {len(result.scripts)} scripts, more than "
                f"the recommended {self.max_scripts}. Discovery may be slow."
            )

        if not result.declaration_scripts:
            result.warnings.append("No declaration scripts discovered.")

        return result


def discover_scripts(
    path: str | Path,
    max_scripts: int = ScriptDiscovery.MAX_SCRIPTS_DEFAULT,
    extra_excludes: Iterable[str] = (),
) -> DiscoveryResult:
    """
    Convenience function to discover setup scripts in a repository.

    Args:
        path: Path to the repository root
        max_scripts: Script count before issuing a warning (default 500)
        extra_excludes: Additional filename patterns to exclude

    Returns:
        DiscoveryResult containing all discovered scripts

    Example:
        result = discover_scripts("/path/to/setup-scripts")
        for name, text in result.load_sources():
            print(name, len(text))
    """
    discovery = ScriptDiscovery(
        root_path=path,
        max_scripts=max_scripts,
        extra_excludes=extra_excludes,
    )
    return discovery.discover()
