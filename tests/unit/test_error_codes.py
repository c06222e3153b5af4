"""
Tests for error codes and their classification helpers.
"""

import pytest

from tle_parser.error_codes import (
    CHECKSUM_CODES,
    FIELD_LEVEL_CODES,
    WARNING_CODES,
    ErrorCode,
    get_error_description,
    is_critical_error,
    is_valid_error_code,
    is_warning_code,
)


class TestErrorCode:
    """Tests for the ErrorCode enum."""

    def test_str_is_value(self) -> None:
        assert str(ErrorCode.CHECKSUM_MISMATCH) == "CHECKSUM_MISMATCH"
        assert f"{ErrorCode.EMPTY_INPUT}" == "EMPTY_INPUT"

    def test_compares_equal_to_string(self) -> None:
        assert ErrorCode.LINE_NOT_FOUND == "LINE_NOT_FOUND"

    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_every_code_has_description(self, code: ErrorCode) -> None:
        assert get_error_description(code) != "Unknown error code"


class TestHelpers:
    """Tests for lookup and classification helpers."""

    def test_is_valid_error_code(self) -> None:
        assert is_valid_error_code(ErrorCode.EMPTY_INPUT)
        assert is_valid_error_code("VALUE_OUT_OF_RANGE")
        assert not is_valid_error_code("NOT_A_CODE")

    def test_description_by_string(self) -> None:
        assert get_error_description("INVALID_CLASSIFICATION") == "Classification must be U, C, or S"

    def test_unknown_description(self) -> None:
        assert get_error_description("NOT_A_CODE") == "Unknown error code"

    def test_warning_codes(self) -> None:
        assert is_warning_code(ErrorCode.STALE_TLE_WARNING)
        assert is_warning_code("PARTIAL_FIELD")
        assert is_warning_code(ErrorCode.SATELLITE_NAME_TOO_LONG)
        assert not is_warning_code(ErrorCode.CHECKSUM_MISMATCH)

    def test_critical_errors(self) -> None:
        assert is_critical_error(ErrorCode.INVALID_LINE_LENGTH)
        assert is_critical_error("STATE_MACHINE_LOOP")
        assert not is_critical_error(ErrorCode.NEGATIVE_DECAY_WARNING)

    def test_unknown_code_is_critical(self) -> None:
        assert is_critical_error("NOT_A_CODE")

    def test_code_sets(self) -> None:
        assert CHECKSUM_CODES <= FIELD_LEVEL_CODES
        assert ErrorCode.INVALID_LINE_LENGTH not in FIELD_LEVEL_CODES
        assert ErrorCode.INVALID_LINE_COUNT not in WARNING_CODES
