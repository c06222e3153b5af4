"""
Data-quality heuristics for TLE records.

Each check reads only the fields it needs from a single data line and
returns zero or more warnings. None of them can make a TLE invalid, and
their order does not matter.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
import logging
import math

from .error_codes import ErrorCode
from .fields import get_field
from .models import Severity, TLEIssue
from .utils import epoch_to_datetime, full_epoch_year, get_current_utc, parse_number

logger = logging.getLogger(__name__)

STALE_EPOCH_DAYS = 30
HIGH_ECCENTRICITY_THRESHOLD = 0.25
LOW_MEAN_MOTION_THRESHOLD = 1.0  # rev/day
REVOLUTION_ROLLOVER_THRESHOLD = 90000
ZERO_DRAG_PATTERNS = ("00000-0", "00000+0", "00000 0")


def _warning(code: ErrorCode, message: str, field: str, actual=None, **details) -> TLEIssue:
    return TLEIssue(
        code=code,
        message=message,
        severity=Severity.WARNING,
        field=field,
        actual=actual,
        details=details,
    )


def _as_naive_utc(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return get_current_utc()
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def check_classification(line1: str) -> List[TLEIssue]:
    """Flag classified (C) or secret (S) records."""
    classification = get_field(line1, "classification")
    if classification in ("C", "S"):
        return [
            _warning(
                ErrorCode.CLASSIFIED_DATA_WARNING,
                f"Classification '{classification}' is unusual in public TLE data "
                f"(typically 'U' for unclassified)",
                "classification",
                classification,
            )
        ]
    return []


def check_deprecated_epoch_year(line1: str) -> List[TLEIssue]:
    """Flag epochs whose two-digit year maps into the 1900s."""
    epoch_year = parse_number(get_field(line1, "epoch_year"))
    if epoch_year is None:
        return []
    year = full_epoch_year(int(epoch_year))
    if year < 2000:
        return [
            _warning(
                ErrorCode.DEPRECATED_EPOCH_YEAR_WARNING,
                f"Epoch year {year} is in the deprecated 1900s range "
                f"(two-digit year: {int(epoch_year):02d})",
                "epoch_year",
                int(epoch_year),
                full_year=year,
            )
        ]
    return []


def check_stale_epoch(line1: str, reference_time: Optional[datetime] = None) -> List[TLEIssue]:
    """
    Flag epochs more than 30 days before ``reference_time``.

    Args:
        line1: TLE line 1
        reference_time: Moment to compare against (default: now, UTC)
    """
    try:
        epoch = epoch_to_datetime(get_field(line1, "epoch_year"), get_field(line1, "epoch_day"))
    except ValueError:
        return []

    now = _as_naive_utc(reference_time)
    days_since_epoch = (now - epoch).total_seconds() / 86400.0
    if days_since_epoch > STALE_EPOCH_DAYS:
        epoch_date = epoch.date().isoformat()
        return [
            _warning(
                ErrorCode.STALE_TLE_WARNING,
                f"TLE epoch is {math.floor(days_since_epoch)} days old "
                f"(epoch: {epoch_date}). TLE data may be stale.",
                "epoch",
                epoch_date,
                days_since_epoch=math.floor(days_since_epoch),
            )
        ]
    return []


def check_high_eccentricity(line2: str) -> List[TLEIssue]:
    """Flag eccentricities above 0.25 (highly elliptical orbits)."""
    raw = get_field(line2, "eccentricity")
    if not raw:
        return []
    eccentricity = parse_number("0." + raw)
    if eccentricity is not None and eccentricity > HIGH_ECCENTRICITY_THRESHOLD:
        return [
            _warning(
                ErrorCode.HIGH_ECCENTRICITY_WARNING,
                f"Eccentricity {eccentricity:.7f} is unusually high. "
                f"This indicates a highly elliptical orbit.",
                "eccentricity",
                eccentricity,
            )
        ]
    return []


def check_low_mean_motion(line2: str) -> List[TLEIssue]:
    """Flag mean motion below 1 rev/day (very high orbits)."""
    mean_motion = parse_number(get_field(line2, "mean_motion"))
    if mean_motion is not None and mean_motion < LOW_MEAN_MOTION_THRESHOLD:
        return [
            _warning(
                ErrorCode.LOW_MEAN_MOTION_WARNING,
                f"Mean motion {mean_motion:.8f} rev/day is unusually low. "
                f"This indicates a very high orbit.",
                "mean_motion",
                mean_motion,
            )
        ]
    return []


def check_revolution_rollover(line2: str) -> List[TLEIssue]:
    revolution_number = parse_number(get_field(line2, "revolution_number"))
    if revolution_number is not None and revolution_number > REVOLUTION_ROLLOVER_THRESHOLD:
        return [
            _warning(
                ErrorCode.REVOLUTION_NUMBER_ROLLOVER_WARNING,
                f"Revolution number {int(revolution_number)} is approaching rollover "
                f"limit (99999). Counter may reset soon.",
                "revolution_number",
                int(revolution_number),
            )
        ]
    return []


def check_near_zero_drag(line1: str) -> List[TLEIssue]:
    """Flag a B* term written as one of the zero sentinels."""
    b_star = get_field(line1, "b_star")
    if b_star in ZERO_DRAG_PATTERNS:
        return [
            _warning(
                ErrorCode.NEAR_ZERO_DRAG_WARNING,
                "B* drag term is zero or near-zero, which is unusual for most satellites in LEO",
                "b_star",
                b_star,
            )
        ]
    return []


def check_negative_decay(line1: str) -> List[TLEIssue]:
    first_derivative = parse_number(get_field(line1, "first_derivative"))
    if first_derivative is not None and first_derivative < 0:
        return [
            _warning(
                ErrorCode.NEGATIVE_DECAY_WARNING,
                f"First derivative of mean motion is negative ({first_derivative}), "
                f"indicating orbital decay",
                "first_derivative",
                first_derivative,
            )
        ]
    return []


def check_non_standard_ephemeris(line1: str) -> List[TLEIssue]:
    """Flag ephemeris types other than blank or 0 (SGP4/SDP4)."""
    ephemeris_type = get_field(line1, "ephemeris_type")
    if ephemeris_type not in ("", "0"):
        return [
            _warning(
                ErrorCode.NON_STANDARD_EPHEMERIS_WARNING,
                f"Ephemeris type '{ephemeris_type}' is non-standard (expected '0' for SGP4/SDP4)",
                "ephemeris_type",
                ephemeris_type,
            )
        ]
    return []


LINE1_HEURISTICS: Tuple[Callable[[str], List[TLEIssue]], ...] = (
    check_classification,
    check_deprecated_epoch_year,
    check_near_zero_drag,
    check_negative_decay,
    check_non_standard_ephemeris,
)

LINE2_HEURISTICS: Tuple[Callable[[str], List[TLEIssue]], ...] = (
    check_high_eccentricity,
    check_low_mean_motion,
    check_revolution_rollover,
)


def detect_warnings(
    line1: Optional[str],
    line2: Optional[str],
    reference_time: Optional[datetime] = None,
) -> List[TLEIssue]:
    """
    Run every heuristic against the available data lines.

    Args:
        line1: TLE line 1, or None to skip line 1 checks
        line2: TLE line 2, or None to skip line 2 checks
        reference_time: Moment used by the stale-epoch check

    Returns:
        All warnings found
    """
    warnings: List[TLEIssue] = []
    if line1 is not None:
        for check in LINE1_HEURISTICS:
            warnings.extend(check(line1))
        warnings.extend(check_stale_epoch(line1, reference_time))
    if line2 is not None:
        for check in LINE2_HEURISTICS:
            warnings.extend(check(line2))
    if warnings:
        logger.debug(f"Data quality heuristics raised {len(warnings)} warning(s)")
    return warnings
