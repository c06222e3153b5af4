"""
Data models for parsed TLE records and validation diagnostics.

These models define the structure for:
- Issues (errors and warnings) raised while validating or recovering a TLE
- The parsed record itself, with every field kept as its exact substring
- Validation results and the exceptions raised by the strict parser
"""

from dataclasses import asdict, dataclass, fields, replace
from dataclasses import field as dataclass_field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .error_codes import ErrorCode
from .utils import epoch_to_datetime, parse_assumed_decimal, parse_number


class Severity(str, Enum):
    """Severity of a reported issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationMode(str, Enum):
    """How field-level validation failures are treated."""

    STRICT = "strict"
    PERMISSIVE = "permissive"  # Field-level errors downgraded to warnings


@dataclass(frozen=True)
class TLEIssue:
    """A single error, warning or informational note about a TLE."""

    code: Union[ErrorCode, str]
    message: str
    severity: Severity = Severity.ERROR
    line: Optional[int] = None
    field: Optional[str] = None
    expected: Any = None
    actual: Any = None
    details: Dict[str, Any] = dataclass_field(default_factory=dict)

    @property
    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING

    def as_warning(self) -> "TLEIssue":
        """Return a copy of this issue downgraded to warning severity."""
        return replace(self, severity=Severity.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "code": str(self.code),
            "message": self.message,
            "severity": self.severity.value,
        }
        for key in ("line", "field", "expected", "actual"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data.update(self.details)
        return data


# Fields taken from line 2; everything else in ParsedTLE comes from line 1
_LINE2_ATTRIBUTES = (
    "line_number2",
    "satellite_number2",
    "inclination",
    "right_ascension",
    "eccentricity",
    "argument_of_perigee",
    "mean_anomaly",
    "mean_motion",
    "revolution_number",
    "checksum2",
)


@dataclass(frozen=True)
class ParsedTLE:
    """
    A parsed Two-Line Element set.

    All orbital and catalog fields are stored as the exact trimmed substrings
    found in the source lines so that the record can be written back without
    loss. Numeric interpretations are available through ``numeric``.
    """

    satellite_name: Optional[str]

    # Line 1
    line_number1: str
    satellite_number1: str
    classification: str
    international_designator_year: str
    international_designator_launch_number: str
    international_designator_piece: str
    epoch_year: str
    epoch_day: str
    first_derivative: str
    second_derivative: str
    b_star: str
    ephemeris_type: str
    element_set_number: str
    checksum1: str

    # Line 2
    line_number2: str
    satellite_number2: str
    inclination: str
    right_ascension: str
    eccentricity: str
    argument_of_perigee: str
    mean_anomaly: str
    mean_motion: str
    revolution_number: str
    checksum2: str

    # Attached only when requested by the parse options
    warnings: Optional[Tuple[TLEIssue, ...]] = None
    comments: Optional[Tuple[str, ...]] = None

    @classmethod
    def field_names(cls) -> List[str]:
        """Names of the string fields extracted from the data lines."""
        skip = {"satellite_name", "warnings", "comments"}
        return [f.name for f in fields(cls) if f.name not in skip]

    @classmethod
    def line_for_field(cls, name: str) -> int:
        """Return 1 or 2, the data line a record field is extracted from."""
        if name not in cls.field_names():
            raise KeyError(name)
        return 2 if name in _LINE2_ATTRIBUTES else 1

    @property
    def international_designator(self) -> str:
        return (
            f"{self.international_designator_year}"
            f"{self.international_designator_launch_number}"
            f"{self.international_designator_piece}"
        ).strip()

    @property
    def epoch_datetime(self) -> Optional[datetime]:
        """Epoch as a naive UTC datetime, or None if the epoch is malformed."""
        try:
            return epoch_to_datetime(self.epoch_year, self.epoch_day)
        except ValueError:
            return None

    @property
    def numeric(self) -> Dict[str, Optional[float]]:
        """
        Numeric interpretation of the record fields.

        Values that cannot be interpreted are returned as None. The
        eccentricity gets its implied leading decimal point, and the second
        derivative and B* term are decoded from assumed-decimal exponent form.
        """
        return {
            "satellite_number": parse_number(self.satellite_number1),
            "international_designator_year": parse_number(self.international_designator_year),
            "international_designator_launch_number": parse_number(
                self.international_designator_launch_number
            ),
            "epoch_year": parse_number(self.epoch_year),
            "epoch_day": parse_number(self.epoch_day),
            "first_derivative": parse_number(self.first_derivative),
            "second_derivative": parse_assumed_decimal(self.second_derivative),
            "b_star": parse_assumed_decimal(self.b_star),
            "ephemeris_type": parse_number(self.ephemeris_type),
            "element_set_number": parse_number(self.element_set_number),
            "inclination": parse_number(self.inclination),
            "right_ascension": parse_number(self.right_ascension),
            "eccentricity": parse_number("0." + self.eccentricity) if self.eccentricity else None,
            "argument_of_perigee": parse_number(self.argument_of_perigee),
            "mean_anomaly": parse_number(self.mean_anomaly),
            "mean_motion": parse_number(self.mean_motion),
            "revolution_number": parse_number(self.revolution_number),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.warnings is None:
            data.pop("warnings")
        else:
            data["warnings"] = [w.to_dict() for w in self.warnings]
        if self.comments is None:
            data.pop("comments")
        else:
            data["comments"] = list(self.comments)
        return data


@dataclass
class ValidationResult:
    """
    Outcome of validating a TLE.

    Exactly one of success or failure holds: a valid result has no errors,
    an invalid result has at least one.
    """

    is_valid: bool
    errors: List[TLEIssue] = dataclass_field(default_factory=list)
    warnings: List[TLEIssue] = dataclass_field(default_factory=list)
    record: Optional[ParsedTLE] = None

    def __post_init__(self) -> None:
        if self.is_valid and self.errors:
            raise ValueError("A valid result cannot carry errors")
        if not self.is_valid and not self.errors:
            raise ValueError("An invalid result must carry at least one error")

    @classmethod
    def success(
        cls, record: Optional[ParsedTLE] = None, warnings: Sequence[TLEIssue] = ()
    ) -> "ValidationResult":
        return cls(is_valid=True, warnings=list(warnings), record=record)

    @classmethod
    def failure(
        cls, errors: Sequence[TLEIssue], warnings: Sequence[TLEIssue] = ()
    ) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors), warnings=list(warnings))

    @property
    def error_codes(self) -> List[str]:
        return [str(e.code) for e in self.errors]

    @property
    def warning_codes(self) -> List[str]:
        return [str(w.code) for w in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "record": self.record.to_dict() if self.record else None,
        }


class TLEParserError(ValueError):
    """Base class for errors raised by the TLE parser."""


class TLEValidationError(TLEParserError):
    """Raised by the strict parser when validation fails."""

    def __init__(
        self,
        message: str,
        errors: Sequence[TLEIssue] = (),
        warnings: Sequence[TLEIssue] = (),
    ) -> None:
        super().__init__(message)
        self.errors: Tuple[TLEIssue, ...] = tuple(errors)
        self.warnings: Tuple[TLEIssue, ...] = tuple(warnings)

    @property
    def codes(self) -> List[str]:
        return [str(e.code) for e in self.errors]


class TLEFormatError(TLEParserError):
    """Raised for structural problems that prevent extraction."""

    def __init__(
        self,
        message: str,
        code: Union[ErrorCode, str] = ErrorCode.INVALID_LINE_COUNT,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
