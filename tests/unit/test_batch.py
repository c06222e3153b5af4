"""
Tests for the batch module.

Process pool tests use the real pool and are marked slow; everything else
runs in-process.
"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from tle_parser.batch import (
    TLEFilter,
    _parse_worker,
    _rebuild_error,
    apply_filter,
    cleanup_process_pool,
    get_optimal_workers,
    parse_batch,
    parse_parallel,
    split_tles,
)
from tle_parser.error_codes import ErrorCode
from tle_parser.models import TLEFormatError, TLEValidationError
from tle_parser.parser import ParseOptions, parse_tle

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"
ICEYE_LINE1 = "1 62707U 25009DC  25306.22031033  .00004207  00000+0  39848-3 0  9995"
ICEYE_LINE2 = "2 62707  97.7269  23.9854 0002193 135.9671 224.1724 14.94137357 66022"
MISMATCH_LINE2 = "2 25545  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563538"

ISS_TLE = f"ISS (ZARYA)\n{ISS_LINE1}\n{ISS_LINE2}"
ICEYE_TLE = f"ICEYE-X44\n{ICEYE_LINE1}\n{ICEYE_LINE2}"
BROKEN_TLE = f"BROKEN\n{ISS_LINE1}\n{MISMATCH_LINE2}"


class TestSplitTles:
    """Tests for split_tles function."""

    def test_three_line_records(self) -> None:
        assert split_tles(f"{ISS_TLE}\n{ICEYE_TLE}") == [ISS_TLE, ICEYE_TLE]

    def test_two_line_records(self) -> None:
        text = f"{ISS_LINE1}\n{ISS_LINE2}\n{ICEYE_LINE1}\n{ICEYE_LINE2}"
        assert split_tles(text) == [
            f"{ISS_LINE1}\n{ISS_LINE2}",
            f"{ICEYE_LINE1}\n{ICEYE_LINE2}",
        ]

    def test_mixed_records(self) -> None:
        text = f"{ISS_LINE1}\n{ISS_LINE2}\n{ICEYE_TLE}"
        assert split_tles(text) == [f"{ISS_LINE1}\n{ISS_LINE2}", ICEYE_TLE]

    def test_blank_lines_and_crlf(self) -> None:
        text = f"\n{ISS_TLE}\n\n\n{ICEYE_TLE}\n".replace("\n", "\r\n")
        assert split_tles(text) == [ISS_TLE, ICEYE_TLE]

    def test_comments_attach_to_open_record(self) -> None:
        text = f"# leading\n{ISS_TLE}\n# about iss\n{ICEYE_TLE}"

        records = split_tles(text)

        assert records[0] == f"{ISS_TLE}\n# about iss"
        assert records[1] == ICEYE_TLE

    def test_lone_line1_dropped(self) -> None:
        text = f"{ISS_LINE1}\n{ICEYE_TLE}"
        assert split_tles(text) == [ICEYE_TLE]

    def test_incomplete_named_group_kept_for_parser(self) -> None:
        text = f"ORPHAN\n{ISS_LINE1}\n{ICEYE_TLE}"
        assert split_tles(text) == [f"ORPHAN\n{ISS_LINE1}", ICEYE_TLE]

    def test_stray_name_replaced(self) -> None:
        text = f"STRAY\n{ISS_TLE}"
        assert split_tles(text) == [ISS_TLE]

    def test_empty(self) -> None:
        assert split_tles("") == []
        assert split_tles("# only a comment") == []


class TestApplyFilter:
    """Tests for TLEFilter and apply_filter."""

    @pytest.fixture
    def iss(self):
        return parse_tle(ISS_TLE)

    def test_empty_filter_matches(self, iss) -> None:
        assert apply_filter(iss, TLEFilter())

    def test_satellite_number(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(satellite_number="25544"))
        assert apply_filter(iss, TLEFilter(satellite_number=["1", "25544"]))
        assert apply_filter(iss, TLEFilter(satellite_number=lambda n: n.startswith("255")))
        assert not apply_filter(iss, TLEFilter(satellite_number="62707"))

    def test_satellite_name_substring(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(satellite_name="ZARYA"))
        assert apply_filter(iss, TLEFilter(satellite_name=["STARLINK", "ISS"]))
        assert not apply_filter(iss, TLEFilter(satellite_name="STARLINK"))

    def test_name_filter_ignores_unnamed_records(self) -> None:
        record = parse_tle(f"{ISS_LINE1}\n{ISS_LINE2}")
        assert apply_filter(record, TLEFilter(satellite_name="STARLINK"))

    def test_international_designator(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(international_designator="98067A"))
        assert not apply_filter(iss, TLEFilter(international_designator="98067B"))

    def test_classification(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(classification="U"))
        assert apply_filter(iss, TLEFilter(classification=["C", "U"]))
        assert not apply_filter(iss, TLEFilter(classification="S"))

    def test_epoch_range(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(epoch_start=datetime(2008, 9, 1)))
        assert apply_filter(iss, TLEFilter(epoch_end=datetime(2008, 10, 1)))
        assert not apply_filter(iss, TLEFilter(epoch_start=datetime(2008, 9, 21)))
        assert not apply_filter(
            iss, TLEFilter(epoch_start=datetime(2009, 1, 1), epoch_end=datetime(2010, 1, 1))
        )

    def test_inclination_range(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(inclination_min=50, inclination_max=52))
        assert not apply_filter(iss, TLEFilter(inclination_min=90))
        assert not apply_filter(iss, TLEFilter(inclination_max=45))

    def test_custom(self, iss) -> None:
        assert apply_filter(iss, TLEFilter(custom=lambda r: r.revolution_number == "56353"))
        assert not apply_filter(iss, TLEFilter(custom=lambda r: False))


class TestParseBatch:
    """Tests for parse_batch function."""

    def test_parses_all(self) -> None:
        records = parse_batch(f"{ISS_TLE}\n{ICEYE_TLE}")
        assert [r.satellite_name for r in records] == ["ISS (ZARYA)", "ICEYE-X44"]

    def test_raises_on_error(self) -> None:
        with pytest.raises(TLEValidationError):
            parse_batch(f"{ISS_TLE}\n{BROKEN_TLE}\n{ICEYE_TLE}")

    def test_continue_on_error(self) -> None:
        on_error = MagicMock()

        records = parse_batch(
            f"{ISS_TLE}\n{BROKEN_TLE}\n{ICEYE_TLE}", continue_on_error=True, on_error=on_error
        )

        assert [r.satellite_name for r in records] == ["ISS (ZARYA)", "ICEYE-X44"]
        on_error.assert_called_once()
        error, index, raw = on_error.call_args[0]
        assert isinstance(error, TLEValidationError)
        assert index == 1
        assert raw == BROKEN_TLE

    def test_on_error_called_before_raise(self) -> None:
        on_error = MagicMock()

        with pytest.raises(TLEValidationError):
            parse_batch(BROKEN_TLE, on_error=on_error)

        on_error.assert_called_once()

    def test_on_tle_callback(self) -> None:
        on_tle = MagicMock()

        parse_batch(f"{ISS_TLE}\n{ICEYE_TLE}", on_tle=on_tle)

        assert on_tle.call_count == 2
        assert on_tle.call_args_list[1][0][1] == 1

    def test_skip_and_limit(self) -> None:
        text = f"{ISS_TLE}\n{ICEYE_TLE}\n{ISS_TLE}"

        assert [r.satellite_name for r in parse_batch(text, skip=1)] == ["ICEYE-X44", "ISS (ZARYA)"]
        assert [r.satellite_name for r in parse_batch(text, limit=1)] == ["ISS (ZARYA)"]
        assert [r.satellite_name for r in parse_batch(text, skip=1, limit=1)] == ["ICEYE-X44"]

    def test_filter(self) -> None:
        records = parse_batch(f"{ISS_TLE}\n{ICEYE_TLE}", tle_filter=TLEFilter(inclination_min=90))
        assert [r.satellite_number1 for r in records] == ["62707"]

    def test_options_apply_to_every_record(self) -> None:
        records = parse_batch(
            f"{ISS_TLE}\n{BROKEN_TLE}", options={"mode": "permissive"}
        )
        assert len(records) == 2

    def test_catalog_document(self, catalog_text: str, reference_time: datetime) -> None:
        records = parse_batch(catalog_text, options={"reference_time": reference_time})

        assert [r.satellite_number1 for r in records] == ["25544", "62707"]
        assert records[1].warnings is None

    def test_empty_document(self) -> None:
        assert parse_batch("") == []


class TestGetOptimalWorkers:
    """Tests for get_optimal_workers function."""

    @patch("os.cpu_count")
    def test_default_uses_all_cores(self, mock_cpu) -> None:
        mock_cpu.return_value = 8
        assert get_optimal_workers() == 8

    @patch("os.cpu_count")
    def test_respects_max_workers(self, mock_cpu) -> None:
        mock_cpu.return_value = 16
        assert get_optimal_workers(max_workers=4) == 4

    @patch("os.cpu_count")
    def test_max_workers_cant_exceed_cpu(self, mock_cpu) -> None:
        mock_cpu.return_value = 4
        assert get_optimal_workers(max_workers=16) == 4

    @patch("os.cpu_count")
    def test_limited_by_record_count(self, mock_cpu) -> None:
        mock_cpu.return_value = 8
        assert get_optimal_workers(num_records=3) == 3

    @patch("os.cpu_count")
    def test_handles_none_cpu_count(self, mock_cpu) -> None:
        mock_cpu.return_value = None
        assert get_optimal_workers() == 4

    @patch("os.cpu_count")
    def test_never_below_one(self, mock_cpu) -> None:
        mock_cpu.return_value = 8
        assert get_optimal_workers(max_workers=0) == 1


class TestParseWorker:
    """Tests for the worker function and error payloads."""

    def test_success(self) -> None:
        index, record, failure = _parse_worker(3, ISS_TLE, ParseOptions())

        assert index == 3
        assert record.satellite_number1 == "25544"
        assert failure is None

    def test_validation_failure_round_trip(self) -> None:
        index, record, failure = _parse_worker(0, BROKEN_TLE, ParseOptions())

        assert record is None
        assert failure["kind"] == "validation"

        error = _rebuild_error(failure)
        assert isinstance(error, TLEValidationError)
        assert error.codes == ["SATELLITE_NUMBER_MISMATCH"]

    def test_format_failure_round_trip(self) -> None:
        _, _, failure = _parse_worker(0, ISS_LINE1, ParseOptions(validate=False))

        error = _rebuild_error(failure)
        assert isinstance(error, TLEFormatError)
        assert error.code == ErrorCode.INVALID_LINE_COUNT


@pytest.mark.slow
class TestParseParallel:
    """Tests for parse_parallel with a real process pool."""

    def teardown_method(self) -> None:
        cleanup_process_pool()

    def test_matches_sequential(self) -> None:
        text = "\n".join([ISS_TLE, ICEYE_TLE] * 5)

        assert parse_parallel(text, max_workers=2) == parse_batch(text)

    def test_raises_first_failure(self) -> None:
        with pytest.raises(TLEValidationError) as exc_info:
            parse_parallel(f"{ISS_TLE}\n{BROKEN_TLE}", max_workers=2)

        assert exc_info.value.codes == ["SATELLITE_NUMBER_MISMATCH"]

    def test_continue_on_error(self) -> None:
        records = parse_parallel(
            f"{ISS_TLE}\n{BROKEN_TLE}\n{ICEYE_TLE}", max_workers=2, continue_on_error=True
        )
        assert [r.satellite_name for r in records] == ["ISS (ZARYA)", "ICEYE-X44"]

    def test_empty_document(self) -> None:
        assert parse_parallel("") == []
