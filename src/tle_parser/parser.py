"""
Strict TLE parser.

Validation runs in stages: line count, line structure (length, line number,
checksum), field checks (catalog number, classification, numeric ranges) and
finally the data-quality heuristics. Each stage collects every problem it
finds before the parser decides whether to stop, so a single call reports as
much as possible about a broken TLE.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar, Union
import logging

from .error_codes import CHECKSUM_CODES, FIELD_LEVEL_CODES, ErrorCode
from .fields import extract_fields
from .heuristics import detect_warnings
from .models import (
    ParsedTLE,
    TLEFormatError,
    TLEIssue,
    TLEValidationError,
    ValidationMode,
    ValidationResult,
)
from .normalize import parse_tle_lines, split_comments
from .validators import (
    check_ranges,
    range_values_from_lines,
    validate_classification,
    validate_line_structure,
    validate_satellite_name,
    validate_satellite_number,
)

logger = logging.getLogger(__name__)

OptionsT = TypeVar("OptionsT")


@dataclass
class ParseOptions:
    """
    Options for the strict parser.

    ``mode`` accepts a ValidationMode or its string value. In permissive mode
    field-level errors (checksum, catalog number, classification, ranges)
    are reported as warnings instead.
    """

    validate: bool = True
    strict_checksums: bool = True
    validate_ranges: bool = True
    include_warnings: bool = True
    include_comments: bool = True
    mode: ValidationMode = ValidationMode.STRICT
    reference_time: Optional[datetime] = None  # "now" for the stale-epoch check

    def __post_init__(self):
        """Validate parser options."""
        try:
            self.mode = ValidationMode(self.mode)
        except ValueError:
            raise ValueError(
                f"mode must be 'strict' or 'permissive', got {self.mode!r}"
            ) from None

        if self.reference_time is not None and not isinstance(self.reference_time, datetime):
            raise ValueError(
                f"reference_time must be a datetime, got {type(self.reference_time).__name__}"
            )

    @property
    def permissive(self) -> bool:
        return self.mode == ValidationMode.PERMISSIVE


def resolve_options(
    option_cls: Type[OptionsT],
    options: Union[OptionsT, Mapping[str, Any], None],
    overrides: Mapping[str, Any],
) -> OptionsT:
    """
    Build an options instance from an instance, a mapping or keyword overrides.

    Keyword overrides always win over values in ``options``.
    """
    if options is None:
        return option_cls(**overrides)
    if isinstance(options, option_cls):
        return replace(options, **overrides) if overrides else options
    if isinstance(options, Mapping):
        return option_cls(**{**options, **overrides})
    raise TypeError(
        f"options must be a {option_cls.__name__} or a mapping, got {type(options).__name__}"
    )


def require_string(tle_string: Any) -> None:
    if not isinstance(tle_string, str):
        raise TypeError(f"Input must be a string, got {type(tle_string).__name__}")


def split_record_lines(data_lines: List[str]) -> Tuple[Optional[str], str, str]:
    """Split two or more data lines into (name, line1, line2)."""
    if len(data_lines) == 3:
        return data_lines[0], data_lines[1], data_lines[2]
    return None, data_lines[0], data_lines[1]


def build_record(
    line1: str,
    line2: str,
    satellite_name: Optional[str] = None,
    warnings: Optional[List[TLEIssue]] = None,
    comments: Optional[List[str]] = None,
) -> ParsedTLE:
    """
    Extract every field into a ParsedTLE.

    ``warnings`` and ``comments`` are attached only when non-empty.
    """
    values = extract_fields(line1, line2, satellite_name)
    return ParsedTLE(
        **values,
        warnings=tuple(warnings) if warnings else None,
        comments=tuple(comments) if comments else None,
    )


def _route(
    issue: TLEIssue,
    errors: List[TLEIssue],
    warnings: List[TLEIssue],
    downgrade: bool,
) -> None:
    if downgrade:
        warnings.append(issue.as_warning())
    else:
        errors.append(issue)


def validate_tle(
    tle_string: str,
    options: Union[ParseOptions, Mapping[str, Any], None] = None,
    **overrides: Any,
) -> ValidationResult:
    """
    Validate a TLE and extract its record.

    Args:
        tle_string: Raw 2- or 3-line TLE text
        options: ParseOptions instance or mapping of option values
        **overrides: Individual option values

    Returns:
        ValidationResult; on success ``record`` holds the parsed TLE

    Raises:
        TypeError: If ``tle_string`` is not a string
    """
    require_string(tle_string)
    opts = resolve_options(ParseOptions, options, overrides)

    errors: List[TLEIssue] = []
    warnings: List[TLEIssue] = []

    if not tle_string.strip():
        return ValidationResult.failure(
            [TLEIssue(code=ErrorCode.EMPTY_INPUT, message="Input string is empty or contains only whitespace")]
        )

    data_lines, comments = split_comments(parse_tle_lines(tle_string))

    if len(data_lines) not in (2, 3):
        logger.debug(f"Rejected TLE with {len(data_lines)} data lines")
        return ValidationResult.failure(
            [
                TLEIssue(
                    code=ErrorCode.INVALID_LINE_COUNT,
                    message=f"TLE must contain 2 or 3 lines (got {len(data_lines)})",
                    expected="2 or 3",
                    actual=len(data_lines),
                )
            ]
        )

    satellite_name, line1, line2 = split_record_lines(data_lines)
    if satellite_name is not None:
        warnings.extend(validate_satellite_name(satellite_name))

    # Structural checks; only checksum problems can be downgraded here
    if opts.permissive:
        downgradable = FIELD_LEVEL_CODES
    elif not opts.strict_checksums:
        downgradable = CHECKSUM_CODES
    else:
        downgradable = frozenset()
    for line_number, line in ((1, line1), (2, line2)):
        for issue in validate_line_structure(line, line_number).errors:
            _route(issue, errors, warnings, issue.code in downgradable)
    if errors:
        logger.debug(f"TLE failed structural validation: {[str(e.code) for e in errors]}")
        return ValidationResult.failure(errors, warnings)

    downgradable = FIELD_LEVEL_CODES if opts.permissive else frozenset()
    for result in (validate_satellite_number(line1, line2), validate_classification(line1)):
        if not result.is_valid and result.error is not None:
            _route(result.error, errors, warnings, result.error.code in downgradable)

    if opts.validate_ranges:
        for rule, issue in check_ranges(range_values_from_lines(line1, line2)):
            _route(issue, errors, warnings, issue.code in downgradable or rule.warning_only)
    if errors:
        logger.debug(f"TLE failed field validation: {[str(e.code) for e in errors]}")
        return ValidationResult.failure(errors, warnings)

    warnings.extend(detect_warnings(line1, line2, opts.reference_time))

    record = build_record(
        line1,
        line2,
        satellite_name,
        warnings=warnings if opts.include_warnings else None,
        comments=comments if opts.include_comments else None,
    )
    return ValidationResult.success(record, warnings)


def parse_tle(
    tle_string: str,
    options: Union[ParseOptions, Mapping[str, Any], None] = None,
    **overrides: Any,
) -> ParsedTLE:
    """
    Parse a TLE into a ParsedTLE record.

    Args:
        tle_string: Raw 2- or 3-line TLE text
        options: ParseOptions instance or mapping of option values
        **overrides: Individual option values

    Returns:
        Parsed record

    Raises:
        TypeError: If ``tle_string`` is not a string
        TLEValidationError: If validation is enabled and fails
        TLEFormatError: If validation is disabled and fewer than two data
            lines are present

    Example:
        >>> record = parse_tle(iss_tle, mode="permissive")
        >>> record.satellite_number1
        '25544'
    """
    require_string(tle_string)
    opts = resolve_options(ParseOptions, options, overrides)

    if opts.validate:
        result = validate_tle(tle_string, opts)
        if not result.is_valid:
            message = "TLE validation failed:\n" + "\n".join(
                f"  - {error.message}" for error in result.errors
            )
            raise TLEValidationError(message, result.errors, result.warnings)
        return result.record

    data_lines, comments = split_comments(parse_tle_lines(tle_string))
    if len(data_lines) < 2:
        code = ErrorCode.EMPTY_INPUT if not tle_string.strip() else ErrorCode.INVALID_LINE_COUNT
        raise TLEFormatError(
            "TLE must contain at least 2 data lines",
            code=code,
            details={"line_count": len(data_lines)},
        )

    satellite_name, line1, line2 = split_record_lines(data_lines)
    return build_record(
        line1,
        line2,
        satellite_name,
        comments=comments if opts.include_comments else None,
    )
