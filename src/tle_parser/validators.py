"""
Structural and field validators for TLE data lines.

Each validator reports problems as TLEIssue objects and never raises for
malformed input. Whether an issue is fatal is decided by the caller.
"""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple
import math

from .checksum import validate_checksum
from .error_codes import ErrorCode
from .fields import FIELD_MAP, LINE_LENGTH, get_field
from .models import Severity, TLEIssue
from .utils import is_numeric_text

VALID_CLASSIFICATIONS = ("U", "C", "S")


@dataclass(frozen=True)
class LineValidationResult:
    """All structural errors found on one line."""

    is_valid: bool
    errors: List[TLEIssue] = dataclass_field(default_factory=list)


@dataclass(frozen=True)
class FieldValidationResult:
    """Outcome of a single field check."""

    is_valid: bool
    error: Optional[TLEIssue] = None


class RangeRule(NamedTuple):
    """Numeric range constraint for one record field."""

    field: str
    label: str
    minimum: float
    maximum: float
    optional: bool = False  # Skipped when blank
    warning_only: bool = False  # Never fatal, even in strict mode
    implied_decimal: bool = False  # Stored without its leading "0."


RANGE_TABLE: Tuple[RangeRule, ...] = (
    RangeRule("satellite_number1", "Satellite Number", 1, 99999),
    RangeRule("international_designator_year", "International Designator Year", 0, 99, optional=True),
    RangeRule(
        "international_designator_launch_number",
        "International Designator Launch Number",
        1,
        999,
        optional=True,
    ),
    RangeRule("ephemeris_type", "Ephemeris Type", 0, 9, optional=True),
    RangeRule("element_set_number", "Element Set Number", 0, 9999, optional=True),
    RangeRule("epoch_year", "Epoch Year", 0, 99),
    RangeRule("epoch_day", "Epoch Day", 1, 366.99999999),
    RangeRule("inclination", "Inclination", 0, 180),
    RangeRule("right_ascension", "Right Ascension", 0, 360),
    RangeRule("eccentricity", "Eccentricity", 0, 1, implied_decimal=True),
    RangeRule("argument_of_perigee", "Argument of Perigee", 0, 360),
    RangeRule("mean_anomaly", "Mean Anomaly", 0, 360),
    RangeRule("mean_motion", "Mean Motion", 0, 20, warning_only=True),
    RangeRule("revolution_number", "Revolution Number", 0, 99999, optional=True),
)


def validate_line_structure(line: str, expected_line_number: int) -> LineValidationResult:
    """
    Validate line length, leading line number and checksum.

    A wrong length short-circuits the remaining checks for that line;
    otherwise every problem found is reported.

    Args:
        line: TLE data line
        expected_line_number: 1 or 2

    Returns:
        LineValidationResult with all collected errors
    """
    n = expected_line_number
    if len(line) != LINE_LENGTH:
        error = TLEIssue(
            code=ErrorCode.INVALID_LINE_LENGTH,
            message=f"Line {n} must be exactly {LINE_LENGTH} characters (got {len(line)})",
            line=n,
            field="line_length",
            expected=LINE_LENGTH,
            actual=len(line),
        )
        return LineValidationResult(is_valid=False, errors=[error])

    errors = []
    line_number = line[0]
    if line_number != str(n):
        errors.append(
            TLEIssue(
                code=ErrorCode.INVALID_LINE_NUMBER,
                message=f"Line {n} must start with '{n}' (got '{line_number}')",
                line=n,
                field="line_number",
                expected=str(n),
                actual=line_number,
            )
        )

    checksum_result = validate_checksum(line)
    if not checksum_result.is_valid and checksum_result.error is not None:
        error = checksum_result.error
        errors.append(
            TLEIssue(
                code=error.code,
                message=f"Line {n}: {error.message}",
                severity=error.severity,
                line=n,
                field=error.field,
                expected=error.expected,
                actual=error.actual,
                details=dict(error.details),
            )
        )

    return LineValidationResult(is_valid=not errors, errors=errors)


def validate_satellite_number(line1: str, line2: str) -> FieldValidationResult:
    """Check that both lines carry the same numeric catalog number."""
    sat_num1 = get_field(line1, "satellite_number1")
    sat_num2 = get_field(line2, "satellite_number2")

    if sat_num1 != sat_num2:
        return FieldValidationResult(
            is_valid=False,
            error=TLEIssue(
                code=ErrorCode.SATELLITE_NUMBER_MISMATCH,
                message=f"Satellite numbers must match (Line 1: {sat_num1}, Line 2: {sat_num2})",
                field="satellite_number",
                expected=sat_num1,
                actual=sat_num2,
                details={"line1_value": sat_num1, "line2_value": sat_num2},
            ),
        )

    if not (sat_num1.isascii() and sat_num1.isdigit()):
        return FieldValidationResult(
            is_valid=False,
            error=TLEIssue(
                code=ErrorCode.INVALID_SATELLITE_NUMBER,
                message=f"Satellite number must be numeric (got '{sat_num1}')",
                field="satellite_number",
                actual=sat_num1,
            ),
        )

    return FieldValidationResult(is_valid=True)


def validate_classification(line1: str) -> FieldValidationResult:
    """Check that the classification character is U, C or S."""
    classification = line1[7:8]
    if classification not in VALID_CLASSIFICATIONS:
        return FieldValidationResult(
            is_valid=False,
            error=TLEIssue(
                code=ErrorCode.INVALID_CLASSIFICATION,
                message=f"Classification must be U, C, or S (got '{classification}')",
                line=1,
                field="classification",
                expected=list(VALID_CLASSIFICATIONS),
                actual=classification,
            ),
        )
    return FieldValidationResult(is_valid=True)


def validate_numeric_range(
    value: str, field_name: str, minimum: float, maximum: float
) -> FieldValidationResult:
    """
    Validate that a field parses as a number within ``[minimum, maximum]``.

    Args:
        value: Raw field text
        field_name: Name used in messages
        minimum: Lowest allowed value
        maximum: Highest allowed value

    Returns:
        FieldValidationResult with INVALID_NUMBER_FORMAT or VALUE_OUT_OF_RANGE
    """
    text = value.strip()
    number = float(text) if is_numeric_text(text) else math.nan

    if not math.isfinite(number):
        return FieldValidationResult(
            is_valid=False,
            error=TLEIssue(
                code=ErrorCode.INVALID_NUMBER_FORMAT,
                message=f"{field_name} must be numeric (got '{value}')",
                field=field_name,
                actual=value,
            ),
        )

    if number < minimum or number > maximum:
        return FieldValidationResult(
            is_valid=False,
            error=TLEIssue(
                code=ErrorCode.VALUE_OUT_OF_RANGE,
                message=f"{field_name} must be between {minimum} and {maximum} (got {number})",
                field=field_name,
                expected=[minimum, maximum],
                actual=number,
                details={"min": minimum, "max": maximum},
            ),
        )

    return FieldValidationResult(is_valid=True)


def check_ranges(
    values: Mapping[str, Optional[str]], skip_blank: bool = False
) -> List[Tuple[RangeRule, TLEIssue]]:
    """
    Apply RANGE_TABLE to extracted record values.

    Args:
        values: Record values keyed by attribute name
        skip_blank: Skip every blank or absent value, not only optional ones

    Returns:
        List of (rule, issue) pairs for each failed rule, in table order
    """
    failures = []
    for rule in RANGE_TABLE:
        raw = (values.get(rule.field) or "").strip()
        if not raw and (rule.optional or skip_blank):
            continue
        value = f"0.{raw}" if rule.implied_decimal else raw
        result = validate_numeric_range(value, rule.label, rule.minimum, rule.maximum)
        if not result.is_valid and result.error is not None:
            failures.append((rule, result.error))
    return failures


def range_values_from_lines(line1: str, line2: str) -> Dict[str, str]:
    """Extract just the range-checked fields from both data lines."""
    values = {}
    for rule in RANGE_TABLE:
        line = line2 if FIELD_MAP[rule.field].line == 2 else line1
        values[rule.field] = get_field(line, rule.field)
    return values


MAX_NAME_LENGTH = 24


def validate_satellite_name(name: str) -> List[TLEIssue]:
    """
    Check a line 0 satellite name.

    Names are free text, so problems are only ever reported as warnings.
    """
    warnings = []
    if name[:1] in ("1", "2"):
        warnings.append(
            TLEIssue(
                code=ErrorCode.SATELLITE_NAME_FORMAT_WARNING,
                message='Line 0 starts with "1" or "2", might be incorrectly formatted',
                severity=Severity.WARNING,
                line=0,
                field="satellite_name",
                actual=name,
            )
        )
    if len(name) > MAX_NAME_LENGTH:
        warnings.append(
            TLEIssue(
                code=ErrorCode.SATELLITE_NAME_TOO_LONG,
                message=f"Satellite name (Line 0) should be {MAX_NAME_LENGTH} characters or less",
                severity=Severity.WARNING,
                line=0,
                field="satellite_name",
                expected=MAX_NAME_LENGTH,
                actual=len(name),
            )
        )
    return warnings
