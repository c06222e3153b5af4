"""
Tests for the normalize module.
"""

from tle_parser.normalize import (
    is_comment,
    normalize_line_endings,
    parse_tle_lines,
    split_comments,
)


class TestNormalizeLineEndings:
    """Tests for normalize_line_endings function."""

    def test_crlf(self) -> None:
        assert normalize_line_endings("a\r\nb\r\n") == "a\nb\n"

    def test_bare_cr(self) -> None:
        assert normalize_line_endings("a\rb") == "a\nb"

    def test_mixed(self) -> None:
        assert normalize_line_endings("a\r\nb\rc\nd") == "a\nb\nc\nd"

    def test_lf_unchanged(self) -> None:
        assert normalize_line_endings("a\nb") == "a\nb"


class TestParseTleLines:
    """Tests for parse_tle_lines function."""

    def test_strips_and_drops_blank_lines(self) -> None:
        assert parse_tle_lines("  line1  \n\n   \nline2\n") == ["line1", "line2"]

    def test_tabs_become_spaces(self) -> None:
        assert parse_tle_lines("a\tb\t\n") == ["a b"]

    def test_preserves_order(self) -> None:
        assert parse_tle_lines("c\r\nb\ra") == ["c", "b", "a"]

    def test_empty_input(self) -> None:
        assert parse_tle_lines("") == []
        assert parse_tle_lines(" \n\t\n") == []

    def test_keeps_inner_spacing(self) -> None:
        line = "1 25544U 98067A   08264.51782528"
        assert parse_tle_lines(line) == [line]


class TestComments:
    """Tests for comment handling."""

    def test_is_comment(self) -> None:
        assert is_comment("# header")
        assert not is_comment("ISS # not a comment")

    def test_split_comments(self) -> None:
        data, comments = split_comments(["# a", "NAME", "# b", "1 x", "2 y"])

        assert data == ["NAME", "1 x", "2 y"]
        assert comments == ["# a", "# b"]

    def test_split_without_comments(self) -> None:
        data, comments = split_comments(["1 x", "2 y"])
        assert data == ["1 x", "2 y"]
        assert comments == []
