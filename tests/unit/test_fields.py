"""
Tests for the fields module.
"""

import pytest

from tle_parser.fields import (
    FIELD_MAP,
    LINE1_FIELDS,
    LINE2_FIELDS,
    LINE_LENGTH,
    extract_field,
    extract_fields,
    get_field,
)
from tle_parser.models import ParsedTLE

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


class TestFieldMap:
    """Tests for the static field tables."""

    def test_fields_cover_line_in_order(self) -> None:
        for specs in (LINE1_FIELDS, LINE2_FIELDS):
            starts = [spec.start for spec in specs]
            assert starts == sorted(starts)
            assert specs[-1].end == LINE_LENGTH

    def test_no_overlaps(self) -> None:
        for specs in (LINE1_FIELDS, LINE2_FIELDS):
            for previous, current in zip(specs, specs[1:]):
                assert previous.end <= current.start

    def test_names_match_record_attributes(self) -> None:
        assert set(FIELD_MAP) == set(ParsedTLE.field_names())

    def test_line_numbers(self) -> None:
        assert all(spec.line == 1 for spec in LINE1_FIELDS)
        assert all(spec.line == 2 for spec in LINE2_FIELDS)
        assert FIELD_MAP["eccentricity"].line == ParsedTLE.line_for_field("eccentricity")


class TestExtractField:
    """Tests for extract_field and get_field."""

    def test_trims(self) -> None:
        assert extract_field("ab  cd  ef", 2, 6) == "cd"

    def test_short_line_returns_empty(self) -> None:
        assert extract_field("abc", 5, 8) == ""

    def test_partial(self) -> None:
        assert extract_field("abcdef", 4, 10) == "ef"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("satellite_number1", "25544"),
            ("classification", "U"),
            ("epoch_day", "264.51782528"),
            ("first_derivative", "-.00002182"),
            ("second_derivative", "00000-0"),
            ("b_star", "-11606-4"),
            ("element_set_number", "292"),
        ],
    )
    def test_get_field_line1(self, name: str, expected: str) -> None:
        assert get_field(ISS_LINE1, name) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("inclination", "51.6416"),
            ("eccentricity", "0006703"),
            ("mean_motion", "15.72125391"),
            ("revolution_number", "56353"),
            ("checksum2", "7"),
        ],
    )
    def test_get_field_line2(self, name: str, expected: str) -> None:
        assert get_field(ISS_LINE2, name) == expected

    def test_unknown_field(self) -> None:
        with pytest.raises(KeyError):
            get_field(ISS_LINE1, "altitude")


class TestExtractFields:
    """Tests for extract_fields function."""

    def test_iss_record(self) -> None:
        values = extract_fields(ISS_LINE1, ISS_LINE2, "ISS (ZARYA)")

        assert values["satellite_name"] == "ISS (ZARYA)"
        assert values["line_number1"] == "1"
        assert values["international_designator_year"] == "98"
        assert values["international_designator_launch_number"] == "067"
        assert values["international_designator_piece"] == "A"
        assert values["epoch_year"] == "08"
        assert values["ephemeris_type"] == "0"
        assert values["checksum1"] == "7"
        assert values["line_number2"] == "2"
        assert values["satellite_number2"] == "25544"
        assert values["right_ascension"] == "247.4627"
        assert values["argument_of_perigee"] == "130.5360"
        assert values["mean_anomaly"] == "325.0288"

    def test_without_name(self) -> None:
        values = extract_fields(ISS_LINE1, ISS_LINE2)
        assert values["satellite_name"] is None
        assert len(values) == len(FIELD_MAP) + 1
