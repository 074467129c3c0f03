"""
Container Block Extraction

Finds `$Name = @{ ... }` hashtable literals in PowerShell text and recovers
each one's body by counting braces, so that nested `@{ ... }` values do not
end the outer block early.

Limitations:
    - Braces inside string literals and comments are counted like any other;
      the scanner has no notion of string-vs-code context
    - A container whose braces never balance before end of text is dropped
"""

import re

from pkgscout.schema import ContainerBlock


CONTAINER_START_PATTERN = re.compile(r"\$([A-Za-z_]\w*)\s*=\s*@\{")

OPEN_DELIMITER = "{"
CLOSE_DELIMITER = "}"


def find_block_end(text: str, start: int) -> int:
    """
    Find the offset of the delimiter that closes a container.

    Args:
        text: The full script text
        start: Offset immediately after the opening `{`

    Returns:
        Offset of the matching `}`, or -1 if the braces never balance
    """
    depth = 1
    for index in range(start, len(text)):
        char = text[index]
        if char == OPEN_DELIMITER:
            depth += 1
        elif char == CLOSE_DELIMITER:
            depth -= 1
            if depth == 0:
                return index
    return -1


def extract_blocks(text: str) -> list[ContainerBlock]:
    """
    Extract every balanced container literal assigned to a variable.

    Args:
        text: Raw script text

    Returns:
        One ContainerBlock per balanced `$Name = @{` occurrence, in source
        order. Unbalanced occurrences are omitted.

    Example:
        >>> blocks = extract_blocks("$Apps = @{ 'a' = @{ Id = 'X.Y' } }")
        >>> [b.variable_name for b in blocks]
        ['Apps']
    """
    blocks: list[ContainerBlock] = []

    for match in CONTAINER_START_PATTERN.finditer(text):
        body_start = match.end()
        close = find_block_end(text, body_start)
        if close < 0:
            continue

        blocks.append(
            ContainerBlock(
                variable_name=match.group(1),
                inner_text=text[body_start:close],
                end_offset=close + 1,
            )
        )

    return blocks
