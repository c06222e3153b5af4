"""
Fixed-column field map for TLE lines.

Offsets are 0-indexed half-open ranges following the NORAD two-line element
format. They are shared by the strict parser and the recovery parser and
must not be changed: every field would shift on round trip.
"""

from typing import Dict, NamedTuple, Optional, Tuple

LINE_LENGTH = 69


class FieldSpec(NamedTuple):
    """Location of one record field within a TLE data line."""

    name: str
    line: int
    start: int
    end: int
    label: str


LINE1_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("line_number1", 1, 0, 1, "Line 1 number"),
    FieldSpec("satellite_number1", 1, 2, 7, "Satellite number"),
    FieldSpec("classification", 1, 7, 8, "Classification"),
    FieldSpec("international_designator_year", 1, 9, 11, "Int. designator year"),
    FieldSpec("international_designator_launch_number", 1, 11, 14, "Int. designator launch"),
    FieldSpec("international_designator_piece", 1, 14, 17, "Int. designator piece"),
    FieldSpec("epoch_year", 1, 18, 20, "Epoch year"),
    FieldSpec("epoch_day", 1, 20, 32, "Epoch day"),
    FieldSpec("first_derivative", 1, 33, 43, "First derivative"),
    FieldSpec("second_derivative", 1, 44, 52, "Second derivative"),
    FieldSpec("b_star", 1, 53, 61, "B* drag term"),
    FieldSpec("ephemeris_type", 1, 62, 63, "Ephemeris type"),
    FieldSpec("element_set_number", 1, 64, 68, "Element set number"),
    FieldSpec("checksum1", 1, 68, 69, "Line 1 checksum"),
)

LINE2_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("line_number2", 2, 0, 1, "Line 2 number"),
    FieldSpec("satellite_number2", 2, 2, 7, "Satellite number"),
    FieldSpec("inclination", 2, 8, 16, "Inclination"),
    FieldSpec("right_ascension", 2, 17, 25, "Right ascension"),
    FieldSpec("eccentricity", 2, 26, 33, "Eccentricity"),
    FieldSpec("argument_of_perigee", 2, 34, 42, "Argument of perigee"),
    FieldSpec("mean_anomaly", 2, 43, 51, "Mean anomaly"),
    FieldSpec("mean_motion", 2, 52, 63, "Mean motion"),
    FieldSpec("revolution_number", 2, 63, 68, "Revolution number"),
    FieldSpec("checksum2", 2, 68, 69, "Line 2 checksum"),
)

FIELD_MAP: Dict[str, FieldSpec] = {spec.name: spec for spec in LINE1_FIELDS + LINE2_FIELDS}


def extract_field(line: str, start: int, end: int) -> str:
    """
    Extract and trim the substring ``line[start:end]``.

    Never validates; returns an empty string when the line is too short.
    """
    return line[start:end].strip()


def get_field(line: str, name: str) -> str:
    """Extract a named field from the data line it belongs to."""
    spec = FIELD_MAP[name]
    return extract_field(line, spec.start, spec.end)


def extract_fields(line1: str, line2: str, satellite_name: Optional[str] = None) -> Dict[str, Optional[str]]:
    """
    Extract every record field from a pair of data lines.

    Args:
        line1: TLE line 1
        line2: TLE line 2
        satellite_name: Optional name from line 0

    Returns:
        Dictionary keyed by record attribute name
    """
    values: Dict[str, Optional[str]] = {"satellite_name": satellite_name}
    for spec in LINE1_FIELDS:
        values[spec.name] = extract_field(line1, spec.start, spec.end)
    for spec in LINE2_FIELDS:
        values[spec.name] = extract_field(line2, spec.start, spec.end)
    return values
