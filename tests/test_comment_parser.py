"""Unit tests for the comment export parser."""

import pytest

from notemarker.core.frame_rates import FRAME_RATES
from notemarker.core.models import CommentRecord, TimecodeValue
from notemarker.data.comment_parser import (
    CommentParser,
    is_reply_author_line,
    parse_comments,
    strip_corruption,
)

HEADER = "001 - Jane - 1:00PM Jan 1, 2025"


def lines(*rows: str) -> str:
    return "\n".join(rows)


class TestBasicComments:
    def test_single_comment(self):
        comments = parse_comments(lines(HEADER, "00:00:10:00 - Fix the color"))
        assert comments == [CommentRecord("Jane", TimecodeValue(0, 0, 10, 0), "Fix the color", False)]

    def test_reply(self):
        comments = parse_comments(
            lines(
                HEADER,
                "00:00:10:00 - Fix the color",
                "  John - 1:05PM Jan 1, 2025",
                "  Agreed",
            )
        )
        assert comments == [
            CommentRecord("Jane", TimecodeValue(0, 0, 10, 0), "Fix the color", False),
            CommentRecord("John", TimecodeValue(0, 0, 10, 0), "Agreed", True),
        ]

    @pytest.mark.parametrize("text", ["", "   \n\t\n", None, "too short"])
    def test_unusable_input_gives_empty_list(self, text):
        assert parse_comments(text) == []

    def test_input_without_timecodes_or_headers(self):
        assert parse_comments("This is a long export line without anything useful in it") == []

    def test_author_defaults_to_unknown(self):
        comments = parse_comments("00:00:10:00 - A comment without header")
        assert comments[0].author == "Unknown"

    def test_sample_export(self, sample_export):
        comments = CommentParser().parse(sample_export)

        assert [(c.author, str(c.timecode), c.is_reply) for c in comments] == [
            ("Jane Doe", "00:00:10:00", False),
            ("John Smith", "00:00:10:00", True),
            ("Mike Chen", "00:01:00:00", False),
            ("Mike Chen", "00:02:30:15", False),
        ]
        assert comments[0].text == "Fix the color in this shot and warm up the highlights"
        assert comments[1].text == "Agreed, will fix"


class TestStateMachine:
    def test_continuation_lines_join(self):
        comments = parse_comments(lines(HEADER, "00:00:10:00 - Fix the", "color in", "this shot"))
        assert comments[0].text == "Fix the color in this shot"

    def test_consecutive_comments(self):
        comments = parse_comments(lines(HEADER, "00:00:10:00 - First note", "00:00:20:00 - Second note"))
        assert [c.text for c in comments] == ["First note", "Second note"]

    def test_multi_line_reply(self):
        comments = parse_comments(
            lines(
                HEADER,
                "00:00:10:00 - Fix the color",
                "\tJohn - 1:05PM Jan 1, 2025",
                "\tAgreed,",
                "\twill fix",
            )
        )
        assert comments[1].text == "Agreed, will fix"

    def test_indented_text_without_author_becomes_reply(self):
        comments = parse_comments(lines(HEADER, "00:00:10:00 - Fix the color", "   Agreed"))
        assert comments[1] == CommentRecord("Jane (Reply)", TimecodeValue(0, 0, 10, 0), "Agreed", True)

    def test_unindented_line_ends_reply_and_is_reprocessed(self):
        comments = parse_comments(
            lines(
                HEADER,
                "00:00:10:00 - Fix the color",
                "  John - 1:05PM Jan 1, 2025",
                "  Agreed",
                "Check at 00:00:20:00 the cut",
            )
        )
        assert len(comments) == 3
        assert comments[1].is_reply
        assert comments[2] == CommentRecord("Jane", TimecodeValue(0, 0, 20, 0), "Check at the cut", False)

    def test_new_header_switches_author(self):
        comments = parse_comments(
            lines(HEADER, "00:00:10:00 - Fix the color", "002 - Mike - 2:00PM Jan 1, 2025", "00:00:20:00 - Trim")
        )
        assert [c.author for c in comments] == ["Jane", "Mike"]

    def test_replies_use_last_main_timecode(self):
        comments = parse_comments(
            lines(
                HEADER,
                "00:00:10:00 - First",
                "00:00:20:00 - Second",
                "  John - 1:05PM Jan 1, 2025",
                "  Reply to second",
            )
        )
        assert comments[-1].timecode == TimecodeValue(0, 0, 20, 0)

    def test_bracketed_timecode_in_scanning(self):
        comments = parse_comments(lines(HEADER, "[00:00:12:00 - 00:00:14:00] Lower the music"))
        assert comments == [CommentRecord("Jane", TimecodeValue(0, 0, 12, 0), "Lower the music", False)]

    def test_reply_author_line_with_timecode_is_not_author(self):
        assert is_reply_author_line("John - 1:05PM Jan 1, 2025")
        assert not is_reply_author_line("John - 1:05PM at 00:00:10:00")
        assert not is_reply_author_line("Agreed")


class TestFiltering:
    def test_zero_timecode_discarded(self):
        comments = parse_comments(lines(HEADER, "00:00:00:00 - Intro note", "00:00:10:00 - Real note"))
        assert [c.text for c in comments] == ["Real note"]

    def test_short_text_discarded(self):
        comments = parse_comments(lines(HEADER, "00:00:05:00 - x", "00:00:10:00 - Real note"))
        assert [c.text for c in comments] == ["Real note"]

    def test_invalid_timecode_skipped(self):
        comments = parse_comments(lines(HEADER, "00:00:75:00 - Bad seconds", "00:00:10:00 - Real note"))
        assert [c.text for c in comments] == ["Real note"]

    def test_frames_validated_against_profile(self):
        text = lines(HEADER, "00:00:10:27 - Late frame", "00:00:11:00 - On time")
        assert len(CommentParser("30").parse(text)) == 2
        assert len(CommentParser("25").parse(text)) == 1

    def test_comment_limit(self):
        text = lines(HEADER, *(f"00:00:{n:02d}:00 - Note {n}" for n in range(1, 6)))
        comments = CommentParser(max_comments=3).parse(text)
        assert len(comments) == 3

    def test_corruption_stripped(self):
        comments = parse_comments(lines(HEADER, "00:00:10:00 - Fix\ufffd the\0 color"))
        assert comments[0].text == "Fix the color"

    def test_strip_corruption_counts(self):
        assert strip_corruption("a\0b\ufffdc\0") == ("abc", 3)

    def test_duplicates_removed(self):
        comments = parse_comments(
            lines(HEADER, "00:00:10:00 - Fix the color", "002 - Jane - 2:00PM Jan 1, 2025", "00:00:10:00 - Fix the color")
        )
        assert len(comments) == 1


class TestParserBehaviour:
    def test_parse_is_repeatable(self, sample_export):
        parser = CommentParser()
        assert parser.parse(sample_export) == parser.parse(sample_export)

    def test_drop_frame_profile(self):
        comments = CommentParser(FRAME_RATES["29.97drop"]).parse(lines(HEADER, "00:01:00;02 - Drop frame note"))
        assert comments[0].timecode == TimecodeValue(0, 1, 0, 2)

    def test_no_report_without_diagnostic_mode(self, sample_export):
        assert CommentParser().parse_with_report(sample_export).report is None
