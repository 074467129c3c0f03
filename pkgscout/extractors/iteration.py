"""
Iteration Classification

Determines which installer consumes a container's values by locating the
first `$Name.Values |` pipeline that references it and inspecting the
install invocation that follows.

The consuming pipeline is usually written after the container, separated
by blank lines or comments. Only a bounded window after the pipeline is
inspected, so an unrelated container/pipeline pair later in the script is
not mistaken for this one's consumer.

Priority inside the window:
    1. winget install  (msstore source -> WINGET_STORE, else WINGET + scope)
    2. choco install
    3. scoop install
    4. nothing found   -> UNKNOWN
"""

import re
from typing import Optional

from pkgscout.extractors.base import ExtractionOptions
from pkgscout.schema import InstallerType, IterationResult


WINGET_INVOCATION_PATTERN = re.compile(
    r"\bwinget(?:\.exe)?\s+install\b([^\r\n]*)", re.IGNORECASE
)
CHOCO_INVOCATION_PATTERN = re.compile(
    r"\bchoco(?:\.exe)?\s+install\b", re.IGNORECASE
)
SCOOP_INVOCATION_PATTERN = re.compile(r"\bscoop\s+install\b", re.IGNORECASE)

STORE_SOURCE_PATTERN = re.compile(
    r"(?:--source|-s)[\s=]+['\"]?msstore\b", re.IGNORECASE
)
SCOPE_PATTERN = re.compile(r"--scope[\s=]+['\"]?(\w+)", re.IGNORECASE)


def build_consumer_pattern(variable_name: str) -> re.Pattern:
    """Pattern for `$Name.Values |` (also `.Keys` and `.GetEnumerator()`)."""
    return re.compile(
        r"\$" + re.escape(variable_name)
        + r"\.(?:Values|Keys|GetEnumerator\(\s*\))\s*\|",
        re.IGNORECASE,
    )


def parse_scope(arguments: str, default: str = "machine") -> str:
    """
    Extract the value of a --scope flag.

    Args:
        arguments: Argument text following `winget install`
        default: Scope returned when no flag is present

    Returns:
        The scope value, or the default
    """
    match = SCOPE_PATTERN.search(arguments)
    return match.group(1) if match else default


def classify_iteration(
    variable_name: str,
    text: str,
    options: Optional[ExtractionOptions] = None,
) -> IterationResult:
    """
    Classify the installer that consumes a container's values.

    Args:
        variable_name: Container variable name, without the leading `$`
        text: The full script text
        options: Extraction options (uses defaults if not provided)

    Returns:
        IterationResult; UNKNOWN with the default scope if no consuming
        pipeline or no recognised invocation was found
    """
    options = options or ExtractionOptions()
    default = IterationResult(InstallerType.UNKNOWN, options.default_scope)

    match = build_consumer_pattern(variable_name).search(text)
    if match is None:
        return default

    window = text[match.start():match.start() + options.iteration_lookahead]

    winget = WINGET_INVOCATION_PATTERN.search(window)
    if winget:
        arguments = winget.group(1)
        if STORE_SOURCE_PATTERN.search(arguments):
            return IterationResult(InstallerType.WINGET_STORE, options.default_scope)
        return IterationResult(
            InstallerType.WINGET,
            parse_scope(arguments, options.default_scope),
        )

    if CHOCO_INVOCATION_PATTERN.search(window):
        return IterationResult(InstallerType.CHOCO, options.default_scope)

    if SCOOP_INVOCATION_PATTERN.search(window):
        return IterationResult(InstallerType.SCOOP, options.default_scope)

    return default
