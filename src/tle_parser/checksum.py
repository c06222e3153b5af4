"""
Modulo-10 checksum used by TLE data lines.

Digits add their value, each ``-`` adds one, and every other character is
ignored. The last character of a line holds the checksum itself and is never
part of the sum.
"""

from dataclasses import dataclass
from typing import Optional

from .error_codes import ErrorCode
from .fields import LINE_LENGTH
from .models import Severity, TLEIssue


@dataclass(frozen=True)
class ChecksumResult:
    """Result of comparing a line's embedded checksum with the computed one."""

    is_valid: bool
    expected: Optional[int] = None
    actual: Optional[int] = None
    error: Optional[TLEIssue] = None


def calculate_checksum(line: str) -> int:
    """
    Calculate the checksum for a TLE line.

    Args:
        line: TLE line including its trailing checksum character

    Returns:
        Checksum digit 0-9

    Example:
        >>> calculate_checksum(
        ...     "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927")
        7
    """
    total = 0
    for char in line[:-1]:
        if "0" <= char <= "9":
            total += ord(char) - ord("0")
        elif char == "-":
            total += 1
    return total % 10


def validate_checksum(line: str) -> ChecksumResult:
    """
    Validate the embedded checksum of a full-length TLE line.

    Args:
        line: TLE line to check

    Returns:
        ChecksumResult; ``error`` is set when the line is not 69 characters,
        the checksum position is not a digit, or the digits disagree
    """
    if len(line) != LINE_LENGTH:
        return ChecksumResult(
            is_valid=False,
            error=TLEIssue(
                code=ErrorCode.INVALID_LINE_LENGTH,
                message=f"Line length must be {LINE_LENGTH} characters",
                field="line_length",
                expected=LINE_LENGTH,
                actual=len(line),
            ),
        )

    expected = calculate_checksum(line)
    checksum_char = line[LINE_LENGTH - 1]

    if not ("0" <= checksum_char <= "9"):
        return ChecksumResult(
            is_valid=False,
            expected=expected,
            error=TLEIssue(
                code=ErrorCode.INVALID_CHECKSUM_CHARACTER,
                message="Checksum position must contain a digit",
                field="checksum",
                expected=expected,
                actual=checksum_char,
                details={"position": LINE_LENGTH - 1},
            ),
        )

    actual = int(checksum_char)
    if actual != expected:
        return ChecksumResult(
            is_valid=False,
            expected=expected,
            actual=actual,
            error=TLEIssue(
                code=ErrorCode.CHECKSUM_MISMATCH,
                message=f"Checksum mismatch: expected {expected}, got {actual}",
                field="checksum",
                expected=expected,
                actual=actual,
                severity=Severity.ERROR,
            ),
        )

    return ChecksumResult(is_valid=True, expected=expected, actual=actual)
