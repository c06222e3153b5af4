"""
TLE Parser

Parsing and validation engine for NORAD Two-Line Element sets, with a strict
validating parser, a recovery parser that always returns a best-effort
record, data-quality warnings, and batch parsing of multi-record catalogs.
"""

from .batch import TLEFilter, apply_filter, parse_batch, parse_parallel, split_tles
from .checksum import calculate_checksum, validate_checksum
from .config import get_profile_options, load_options, parse_with_profile
from .error_codes import ErrorCode, get_error_description, is_critical_error, is_warning_code
from .models import (
    ParsedTLE,
    Severity,
    TLEFormatError,
    TLEIssue,
    TLEParserError,
    TLEValidationError,
    ValidationMode,
    ValidationResult,
)
from .parser import ParseOptions, parse_tle, validate_tle
from .state_machine import (
    ParserState,
    RecoveryAction,
    RecoveryOptions,
    RecoveryResult,
    TLEStateMachineParser,
    parse_with_recovery,
)

__version__ = "0.1.0"
__author__ = "TLE Parser Team"

__all__ = [
    "parse_tle",
    "validate_tle",
    "parse_with_recovery",
    "calculate_checksum",
    "validate_checksum",
    "parse_batch",
    "parse_parallel",
    "split_tles",
    "apply_filter",
    "TLEFilter",
    "get_profile_options",
    "parse_with_profile",
    "load_options",
    "ParseOptions",
    "RecoveryOptions",
    "ParsedTLE",
    "TLEIssue",
    "ValidationResult",
    "RecoveryResult",
    "TLEStateMachineParser",
    "ParserState",
    "RecoveryAction",
    "Severity",
    "ValidationMode",
    "ErrorCode",
    "get_error_description",
    "is_warning_code",
    "is_critical_error",
    "TLEParserError",
    "TLEValidationError",
    "TLEFormatError",
]
