"""Unit tests for candidate marker building."""

import pytest

from notemarker.config.models import MarkerConfig
from notemarker.core.models import CommentRecord, MarkerColor, TimecodeValue
from notemarker.core.timecode_calc import parse
from notemarker.markers.builder import (
    MarkerBuilder,
    clean_author,
    determine_marker_color,
    generate_marker_name,
    sanitize_marker_name,
)

TEN = TimecodeValue(0, 0, 10, 0)


class TestNaming:
    def test_sanitize(self):
        assert sanitize_marker_name('Mix: "final"  pass') == "Mix_ _final_ pass"
        assert sanitize_marker_name("a/b\\c|d?e*f<g>") == "a_b_c_d_e_f_g_"
        assert sanitize_marker_name("x" * 80) == "x" * 64

    @pytest.mark.parametrize(
        "author, expected",
        [
            ("Jane Doe (Reply)", "Jane Doe"),
            ("Jane (Continuation)", "Jane"),
            ("John Smith - 07:02PM April 06, 2025", "John Smith"),
            ("001 - Jane Doe", "Jane Doe"),
        ],
    )
    def test_clean_author(self, author, expected):
        assert clean_author(author) == expected

    def test_author_name_first(self):
        assert generate_marker_name(CommentRecord("Jane Doe (Reply)", TEN, "Agreed", True)) == "Jane Doe"

    def test_text_when_no_author(self):
        comment = CommentRecord("", TEN, "Fix the color in the second shot")
        assert generate_marker_name(comment) == "Fix the color in the second sh"

    def test_timecode_fallback(self):
        assert generate_marker_name(CommentRecord("", TEN, "")) == "Marker 00_00_10_00"

    def test_custom_lengths(self):
        comment = CommentRecord("", TEN, "Fix the color in the second shot")
        assert generate_marker_name(comment, max_length=5, text_length=10) == "Fix t"


class TestColor:
    @pytest.mark.parametrize(
        "text, is_reply, color",
        [
            ("Agreed, there is an error", True, MarkerColor.RED),
            ("There is an error in the mix", False, MarkerColor.ORANGE),
            ("Be careful with this cut", False, MarkerColor.YELLOW),
            ("Note: VO in here", False, MarkerColor.GREEN),
            ("Warning, a problem", False, MarkerColor.ORANGE),
            ("Fix the color", False, MarkerColor.BLUE),
        ],
    )
    def test_color(self, text, is_reply, color):
        assert determine_marker_color(CommentRecord("Jane", TEN, text, is_reply)) is color

    def test_label(self):
        assert MarkerColor.ORANGE.label == "Orange"


class TestMarkerBuilder:
    def test_adds_session_start(self, tc):
        builder = MarkerBuilder(session_start="01:00:00:00")
        marker = builder.build_marker(CommentRecord("Jane", tc("00:03:30:12"), "Fix the color"))

        assert str(marker.timecode) == "01:03:30:12"
        assert marker.name == "Jane"
        assert marker.comments == "Fix the color"
        assert marker.color is MarkerColor.BLUE
        assert marker.source_comment.author == "Jane"

    def test_default_session_start_is_zero(self, tc):
        marker = MarkerBuilder().build_marker(CommentRecord("Jane", tc("00:00:10:00"), "Fix"))
        assert str(marker.timecode) == "00:00:10:00"

    def test_wraps_past_midnight(self, tc):
        builder = MarkerBuilder(session_start="23:59:59:00")
        marker = builder.build_marker(CommentRecord("Jane", tc("00:00:02:00"), "Late"))
        assert str(marker.timecode) == "00:00:01:00"

    def test_drop_frame_session_start(self, df):
        builder = MarkerBuilder(df, "00:00:59;29")
        marker = builder.build_marker(CommentRecord("Jane", parse("00:00:00:01", df), "Next frame"))
        assert str(marker.timecode) == "00:01:00:02"

    def test_build_preserves_order(self, tc):
        comments = [
            CommentRecord("Jane", tc("00:00:20:00"), "Second"),
            CommentRecord("Mike", tc("00:00:10:00"), "First"),
        ]
        markers = MarkerBuilder(config=MarkerConfig(max_name_length=3)).build(comments)
        assert [m.name for m in markers] == ["Jan", "Mik"]
