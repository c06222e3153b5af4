"""
Line normalization for raw TLE text.

Handles CRLF/CR/LF line endings, tabs, surrounding whitespace, blank lines
and ``#`` comment lines. Lines are only ever filtered, never reordered.
"""

from typing import List, Tuple

COMMENT_PREFIX = "#"


def normalize_line_endings(text: str) -> str:
    """
    Normalize CRLF and bare CR line endings to LF.

    Args:
        text: Raw input with potentially mixed line endings

    Returns:
        Text using LF line endings only
    """
    return text.replace("\r\n", "\n").replace("\r", "\n")


def parse_tle_lines(text: str) -> List[str]:
    """
    Split raw TLE text into cleaned, non-empty lines.

    Tabs become single spaces before each line is trimmed; lines left empty
    are dropped.

    Example:
        >>> parse_tle_lines("  line1\\t\\n\\nline2  \\n")
        ['line1', 'line2']
    """
    lines = []
    for raw_line in normalize_line_endings(text).split("\n"):
        line = raw_line.replace("\t", " ").strip()
        if line:
            lines.append(line)
    return lines


def is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIX)


def split_comments(lines: List[str]) -> Tuple[List[str], List[str]]:
    """
    Partition normalized lines into data lines and comment lines.

    Returns:
        Tuple of (data_lines, comment_lines), each in original order
    """
    data_lines = [line for line in lines if not is_comment(line)]
    comments = [line for line in lines if is_comment(line)]
    return data_lines, comments
