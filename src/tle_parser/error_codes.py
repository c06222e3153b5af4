"""
Error codes for structured TLE parser diagnostics.

Every issue produced by the validators, the warning heuristics and the
recovery state machine carries one of these codes.
"""

from enum import Enum
from typing import Union


class ErrorCode(str, Enum):
    """Stable identifiers for TLE parsing and validation issues."""

    # Input
    INVALID_INPUT_TYPE = "INVALID_INPUT_TYPE"
    EMPTY_INPUT = "EMPTY_INPUT"

    # Structure
    INVALID_LINE_COUNT = "INVALID_LINE_COUNT"
    INVALID_LINE_LENGTH = "INVALID_LINE_LENGTH"
    INVALID_LINE_NUMBER = "INVALID_LINE_NUMBER"
    LINE_NOT_FOUND = "LINE_NOT_FOUND"

    # Checksum
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"
    INVALID_CHECKSUM_CHARACTER = "INVALID_CHECKSUM_CHARACTER"

    # Fields
    SATELLITE_NUMBER_MISMATCH = "SATELLITE_NUMBER_MISMATCH"
    INVALID_SATELLITE_NUMBER = "INVALID_SATELLITE_NUMBER"
    INVALID_CLASSIFICATION = "INVALID_CLASSIFICATION"
    VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"
    INVALID_NUMBER_FORMAT = "INVALID_NUMBER_FORMAT"
    SATELLITE_NAME_TOO_LONG = "SATELLITE_NAME_TOO_LONG"
    SATELLITE_NAME_FORMAT_WARNING = "SATELLITE_NAME_FORMAT_WARNING"

    # Recovery
    PARTIAL_FIELD = "PARTIAL_FIELD"
    MISSING_FIELD = "MISSING_FIELD"
    STATE_MACHINE_LOOP = "STATE_MACHINE_LOOP"

    # Data quality heuristics
    CLASSIFIED_DATA_WARNING = "CLASSIFIED_DATA_WARNING"
    STALE_TLE_WARNING = "STALE_TLE_WARNING"
    HIGH_ECCENTRICITY_WARNING = "HIGH_ECCENTRICITY_WARNING"
    LOW_MEAN_MOTION_WARNING = "LOW_MEAN_MOTION_WARNING"
    DEPRECATED_EPOCH_YEAR_WARNING = "DEPRECATED_EPOCH_YEAR_WARNING"
    REVOLUTION_NUMBER_ROLLOVER_WARNING = "REVOLUTION_NUMBER_ROLLOVER_WARNING"
    NEAR_ZERO_DRAG_WARNING = "NEAR_ZERO_DRAG_WARNING"
    NON_STANDARD_EPHEMERIS_WARNING = "NON_STANDARD_EPHEMERIS_WARNING"
    NEGATIVE_DECAY_WARNING = "NEGATIVE_DECAY_WARNING"

    def __str__(self) -> str:
        return self.value


_DESCRIPTIONS = {
    ErrorCode.INVALID_INPUT_TYPE: "Input data must be a string",
    ErrorCode.EMPTY_INPUT: "Input string is empty or contains only whitespace",
    ErrorCode.INVALID_LINE_COUNT: "TLE must contain exactly 2 or 3 lines",
    ErrorCode.INVALID_LINE_LENGTH: "TLE line must be exactly 69 characters",
    ErrorCode.INVALID_LINE_NUMBER: "Line number must be 1 or 2",
    ErrorCode.LINE_NOT_FOUND: "A required TLE data line could not be located",
    ErrorCode.CHECKSUM_MISMATCH: "Calculated checksum does not match",
    ErrorCode.INVALID_CHECKSUM_CHARACTER: "Checksum must be a digit 0-9",
    ErrorCode.SATELLITE_NUMBER_MISMATCH: "Satellite numbers on line 1 and line 2 must match",
    ErrorCode.INVALID_SATELLITE_NUMBER: "Satellite catalog number is invalid",
    ErrorCode.INVALID_CLASSIFICATION: "Classification must be U, C, or S",
    ErrorCode.VALUE_OUT_OF_RANGE: "Field value is outside valid range",
    ErrorCode.INVALID_NUMBER_FORMAT: "Field contains invalid numeric format",
    ErrorCode.SATELLITE_NAME_TOO_LONG: "Satellite name exceeds maximum length",
    ErrorCode.SATELLITE_NAME_FORMAT_WARNING: "Satellite name contains unusual characters",
    ErrorCode.PARTIAL_FIELD: "Field is truncated by a short line",
    ErrorCode.MISSING_FIELD: "Field is missing because the line is too short",
    ErrorCode.STATE_MACHINE_LOOP: "Parser state machine exceeded its iteration limit",
    ErrorCode.CLASSIFIED_DATA_WARNING: "TLE contains classified satellite data",
    ErrorCode.STALE_TLE_WARNING: "TLE epoch is significantly old",
    ErrorCode.HIGH_ECCENTRICITY_WARNING: "Eccentricity is unusually high",
    ErrorCode.LOW_MEAN_MOTION_WARNING: "Mean motion is unusually low",
    ErrorCode.DEPRECATED_EPOCH_YEAR_WARNING: "Epoch year is in the far past",
    ErrorCode.REVOLUTION_NUMBER_ROLLOVER_WARNING: "Revolution number may have rolled over",
    ErrorCode.NEAR_ZERO_DRAG_WARNING: "Drag coefficient is near zero",
    ErrorCode.NON_STANDARD_EPHEMERIS_WARNING: "Ephemeris type is non-standard",
    ErrorCode.NEGATIVE_DECAY_WARNING: "Mean motion decay is negative",
}

WARNING_CODES = frozenset(
    {
        ErrorCode.SATELLITE_NAME_TOO_LONG,
        ErrorCode.SATELLITE_NAME_FORMAT_WARNING,
        ErrorCode.PARTIAL_FIELD,
        ErrorCode.MISSING_FIELD,
        ErrorCode.CLASSIFIED_DATA_WARNING,
        ErrorCode.STALE_TLE_WARNING,
        ErrorCode.HIGH_ECCENTRICITY_WARNING,
        ErrorCode.LOW_MEAN_MOTION_WARNING,
        ErrorCode.DEPRECATED_EPOCH_YEAR_WARNING,
        ErrorCode.REVOLUTION_NUMBER_ROLLOVER_WARNING,
        ErrorCode.NEAR_ZERO_DRAG_WARNING,
        ErrorCode.NON_STANDARD_EPHEMERIS_WARNING,
        ErrorCode.NEGATIVE_DECAY_WARNING,
    }
)

# Downgradable to warnings in permissive mode
FIELD_LEVEL_CODES = frozenset(
    {
        ErrorCode.CHECKSUM_MISMATCH,
        ErrorCode.INVALID_CHECKSUM_CHARACTER,
        ErrorCode.SATELLITE_NUMBER_MISMATCH,
        ErrorCode.INVALID_SATELLITE_NUMBER,
        ErrorCode.INVALID_CLASSIFICATION,
        ErrorCode.VALUE_OUT_OF_RANGE,
        ErrorCode.INVALID_NUMBER_FORMAT,
        ErrorCode.SATELLITE_NAME_TOO_LONG,
    }
)

CHECKSUM_CODES = frozenset(
    {ErrorCode.CHECKSUM_MISMATCH, ErrorCode.INVALID_CHECKSUM_CHARACTER}
)


def _coerce(code: Union[ErrorCode, str]) -> Union[ErrorCode, str]:
    try:
        return ErrorCode(code)
    except ValueError:
        return code


def is_valid_error_code(code: Union[ErrorCode, str]) -> bool:
    """Return True if ``code`` is a known error code."""
    return isinstance(_coerce(code), ErrorCode)


def get_error_description(code: Union[ErrorCode, str]) -> str:
    """
    Get a human-readable description of an error code.

    Args:
        code: ErrorCode member or its string value

    Returns:
        Description string, or "Unknown error code"
    """
    return _DESCRIPTIONS.get(_coerce(code), "Unknown error code")


def is_warning_code(code: Union[ErrorCode, str]) -> bool:
    """Return True if the code only ever describes a non-fatal issue."""
    return _coerce(code) in WARNING_CODES


def is_critical_error(code: Union[ErrorCode, str]) -> bool:
    """Return True if the code describes an error rather than a warning."""
    return not is_warning_code(code)
