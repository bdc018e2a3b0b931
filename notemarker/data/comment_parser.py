"""
Comment Parser - review export text to CommentRecords

The export is an informal text format:

    001 - Jane Doe - 06:56PM April 06, 2025
    00:00:10:00 - Fix the color
    that continues on this line
      John Smith - 07:02PM April 06, 2025
      Agreed

Lines are classified by a three-state machine (SCANNING, IN_COMMENT,
IN_REPLY) driven by an explicit index loop. A line that ends a reply
block is pushed back and classified again in SCANNING. The result is
deduplicated before it is returned.

Usage:
    parser = CommentParser(profile=get_profile("25"))
    comments = parser.parse(export_text)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from notemarker.core.frame_rates import DEFAULT_PROFILE, get_profile
from notemarker.core.models import CommentRecord, FrameRateProfile, ParserState, TimecodeValue
from notemarker.core.timecode_calc import TimecodeCalculator
from notemarker.data.dedup import normalize_author, remove_duplicate_comments
from notemarker.data.diagnostics import DiagnosticReport
from notemarker.data.extractors import contains_timecode, extract_timecode, strip_timecodes
from notemarker.utils.constants import (
    CONTINUATION_AUTHOR_SUFFIX,
    CORRUPTION_CHARACTERS,
    LARGE_EXPORT_BYTES,
    MAX_COMMENTS,
    MIN_COMMENT_TEXT_LENGTH,
    MIN_EXPORT_LENGTH,
    REPLY_AUTHOR_SUFFIX,
    TIMECODE_TOKEN,
    UNKNOWN_AUTHOR,
)
from notemarker.utils.exceptions import TimecodeError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

# ============================================================================
# Line patterns
# ============================================================================

AUTHOR_HEADER = re.compile(r"^\d+\s*-\s*([^-]+?)\s*-\s*(.+)$")
COMMENT_START = re.compile(rf"^({TIMECODE_TOKEN})\s*-\s*(.+)$")
REPLY_INDENT = re.compile(r"^(\t| {2,})(.+)$")
REPLY_AUTHOR = re.compile(r"^([^-]+?)\s*-\s*(\d{1,2}:\d{2}[AP]M\s+.+)$")

# Input guard: something shaped like a timecode or an author header
TIMECODE_SHAPE = re.compile(TIMECODE_TOKEN)
AUTHOR_HEADER_SHAPE = re.compile(r"\d+\s*-\s*[^-\n\r]+\s*-")


def is_indented(raw_line: str) -> bool:
    return REPLY_INDENT.match(raw_line) is not None


def indented_content(raw_line: str) -> str:
    match = REPLY_INDENT.match(raw_line)
    return match.group(2).strip() if match else raw_line.strip()


def is_reply_author_line(content: str) -> bool:
    """'Name - 1:05PM Jan 1, 2025' with no timecode in it."""
    return REPLY_AUTHOR.match(content) is not None and not contains_timecode(content)


def strip_corruption(text: str) -> tuple[str, int]:
    """Remove NUL bytes and U+FFFD; return the clean text and how many were removed."""
    removed = 0
    for char in CORRUPTION_CHARACTERS:
        count = text.count(char)
        if count:
            removed += count
            text = text.replace(char, "")
    return text, removed


@dataclass(frozen=True)
class ParseResult:
    comments: list[CommentRecord]
    report: DiagnosticReport | None = None


@dataclass
class _OpenComment:
    author: str
    timecode: TimecodeValue
    text: str
    line_number: int


class _StopParsing(Exception):
    """Raised inside a run once the comment limit is reached."""


# ============================================================================
# Parse run
# ============================================================================

class _ParseRun:
    """State of a single parse. Created fresh for every call."""

    def __init__(self, calculator: TimecodeCalculator, max_comments: int, report: DiagnosticReport | None):
        self.calc = calculator
        self.max_comments = max_comments
        self.report = report

        self.comments: list[CommentRecord] = []
        self.state = ParserState.SCANNING
        self.author = UNKNOWN_AUTHOR
        self.timecode: TimecodeValue | None = None  # last main comment's timecode

        self.comment: _OpenComment | None = None
        self.continuation: list[str] = []

        self.reply_author: str | None = None
        self.reply_buffer: list[str] = []

        self.line_number = 0
        self.raw_line = ""

    # ------------------------------------------------------------------
    # Diagnostics helpers
    # ------------------------------------------------------------------

    def _classify(self, classification: str, **details) -> None:
        if self.report is not None:
            self.report.record_line(self.line_number, self.raw_line, classification, self.state.value, **details)

    def _transition(self, new_state: ParserState, reason: str) -> None:
        if new_state is not self.state:
            logger.debug(f"Line {self.line_number}: {self.state.value} -> {new_state.value} ({reason})")
            if self.report is not None:
                self.report.record_transition(self.state.value, new_state.value, reason, self.line_number)
        self.state = new_state

    def _note_author(self, author: str, context: str) -> None:
        if self.report is not None:
            self.report.record_author(author, normalize_author(author), context)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, record: CommentRecord, line_number: int) -> None:
        if record.timecode.is_zero or len(record.text) < MIN_COMMENT_TEXT_LENGTH:
            logger.debug(f"Discarding noise comment at {record.timecode}: '{record.text}'")
            if self.report is not None:
                self.report.record_discarded(
                    "Zero timecode or text too short", line_number, timecode=str(record.timecode), text=record.text
                )
            return

        self.comments.append(record)
        if self.report is not None:
            self.report.record_emitted(record)

        if len(self.comments) >= self.max_comments:
            logger.warning(f"Maximum comment limit ({self.max_comments}) reached - stopping parsing")
            if self.report is not None:
                self.report.record_anomaly(
                    "comment_limit_reached", f"Stopped after {self.max_comments} comments", self.line_number
                )
            raise _StopParsing

    def finalize_comment(self) -> None:
        comment, self.comment = self.comment, None
        continuation, self.continuation = self.continuation, []

        if comment is None:
            return

        text = " ".join([comment.text, *continuation]).strip()
        self._emit(CommentRecord(comment.author, comment.timecode, text, False), comment.line_number)

    def finalize_reply(self) -> None:
        author, self.reply_author = self.reply_author, None
        buffer, self.reply_buffer = self.reply_buffer, []

        if author is None or not buffer or self.timecode is None:
            return

        text = " ".join(buffer).strip()
        if text:
            self._emit(CommentRecord(author, self.timecode, text, True), self.line_number)

    def open_comment(self, timecode: TimecodeValue, text: str) -> None:
        self.timecode = timecode
        self.comment = _OpenComment(self.author.strip(), timecode, text.strip(), self.line_number)
        self.continuation = []

    def start_reply(self, author: str) -> None:
        self.finalize_reply()
        self.reply_author = author
        self.reply_buffer = []

    # ------------------------------------------------------------------
    # Shared line handlers
    # ------------------------------------------------------------------

    def _set_author(self, match: re.Match) -> None:
        self.author = match.group(1).strip()
        self._classify("author_header", author=self.author)
        self._note_author(self.author, "header")
        logger.debug(f"Found author: {self.author}")

    def _comment_start(self, match: re.Match) -> bool:
        """Open a comment from a 'TC - text' line. Returns False when the timecode is invalid."""
        raw, text = match.group(1), match.group(2).strip()
        try:
            timecode = self.calc.parse_lenient(raw)
        except TimecodeError as e:
            logger.warning(f"Line {self.line_number}: skipping comment with invalid timecode: {e}")
            self._classify("skipped", reason="invalid_timecode", timecode=raw)
            if self.report is not None:
                self.report.record_timecode_format("invalid")
                self.report.record_anomaly("invalid_timecode", str(e), self.line_number, timecode=raw)
            return False

        self._classify("comment_start", timecode=str(timecode), author=self.author)
        if self.report is not None:
            self.report.record_timecode_format("standard")
        self.open_comment(timecode, text)
        return True

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def scanning(self, line: str) -> None:
        header = AUTHOR_HEADER.match(line)
        if header:
            self._set_author(header)
            return

        start = COMMENT_START.match(line)
        if start and self._comment_start(start):
            self._transition(ParserState.IN_COMMENT, "comment_start_detected")
            return

        found = extract_timecode(line, self.calc.profile)
        if found is None:
            if not start:
                self._classify("unrecognized")
            return

        text = strip_timecodes(line)
        if not text:
            self._classify("timecode_only", timecode=str(found.timecode))
            return

        self._classify("comment_extracted", timecode=str(found.timecode), source=found.source)
        if self.report is not None:
            self.report.record_timecode_format(found.source)
        self.open_comment(found.timecode, text)
        self._transition(ParserState.IN_COMMENT, "timecode_extracted")

    def in_comment(self, line: str) -> bool:
        """Handle a line in IN_COMMENT. Returns True to push the line back."""
        start = COMMENT_START.match(line)
        if start:
            self.finalize_comment()
            self._comment_start(start)
            return False

        header = AUTHOR_HEADER.match(line)
        if header:
            self.finalize_comment()
            self._set_author(header)
            self._transition(ParserState.SCANNING, "author_header")
            return False

        if is_indented(self.raw_line):
            self.finalize_comment()
            content = indented_content(self.raw_line)

            if is_reply_author_line(content):
                self._reply_author_line(content)
                self._transition(ParserState.IN_REPLY, "reply_author_detected")
                return False

            if not contains_timecode(content) and self.timecode is not None:
                self._classify("reply_text", synthetic=self.reply_author is None)
                if self.reply_author is None:
                    self.start_reply(self.author + REPLY_AUTHOR_SUFFIX)
                self.reply_buffer.append(content)
                self._transition(ParserState.IN_REPLY, "reply_text_detected")
                return False

            self._classify("unrecognized", indented=True)
            self._transition(ParserState.IN_REPLY, "indented_line")
            return False

        if extract_timecode(line, self.calc.profile) is not None:
            self.finalize_comment()
            self._transition(ParserState.SCANNING, "timecoded_line")
            return True

        if self.comment is None:
            logger.debug(f"Line {self.line_number}: dropping text with no open comment")
            self._classify("skipped", reason="no_open_comment")
            return False

        self._classify("continuation")
        self.continuation.append(line)
        return False

    def in_reply(self, line: str) -> bool:
        """Handle a line in IN_REPLY. Returns True to push the line back."""
        start = COMMENT_START.match(line)
        if start:
            self.finalize_reply()
            self._comment_start(start)
            self._transition(ParserState.IN_COMMENT, "comment_start_detected")
            return False

        header = AUTHOR_HEADER.match(line)
        if header:
            self.finalize_reply()
            self._set_author(header)
            self._transition(ParserState.SCANNING, "author_header")
            return False

        if not is_indented(self.raw_line):
            self.finalize_reply()
            self._transition(ParserState.SCANNING, "indent_returned")
            return True

        content = indented_content(self.raw_line)
        if is_reply_author_line(content):
            self._reply_author_line(content)
            return False

        if contains_timecode(content):
            self._classify("unrecognized", indented=True)
            return False

        if self.reply_author is None:
            self.start_reply(self.author + CONTINUATION_AUTHOR_SUFFIX)
            self._classify("reply_text", synthetic=True)
        else:
            self._classify("reply_text")
        self.reply_buffer.append(content)
        return False

    def _reply_author_line(self, content: str) -> None:
        author = REPLY_AUTHOR.match(content).group(1).strip()
        self._classify("reply_author", author=author)
        self._note_author(author, "reply")
        self.start_reply(author)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self, lines: list[str]) -> list[CommentRecord]:
        handlers = {
            ParserState.IN_COMMENT: self.in_comment,
            ParserState.IN_REPLY: self.in_reply,
        }

        try:
            index = 0
            while index < len(lines):
                self.raw_line = lines[index].rstrip("\r")
                self.line_number = index + 1
                line = self.raw_line.strip()

                if not line:
                    self._classify("empty")
                    index += 1
                    continue

                if self.state is ParserState.SCANNING:
                    self.scanning(line)
                elif handlers[self.state](line):
                    # Reprocess the same line in SCANNING
                    continue

                index += 1

            self.finalize_comment()
            self.finalize_reply()
        except _StopParsing:
            pass

        return self.comments


# ============================================================================
# Public API
# ============================================================================

class CommentParser:
    """Parses review comment exports into CommentRecords.

    The parser holds configuration only; every parse() call is independent,
    so running it twice on the same text gives the same list.

    Attributes:
        profile: Frame rate profile used to validate timecodes
        diagnostic_mode: Collect a DiagnosticReport alongside the comments
        max_comments: Stop after this many records have been emitted
        min_length: Inputs shorter than this are rejected
    """

    def __init__(
        self,
        profile: FrameRateProfile | str | None = None,
        diagnostic_mode: bool = False,
        max_comments: int = MAX_COMMENTS,
        min_length: int = MIN_EXPORT_LENGTH,
    ) -> None:
        self.profile = get_profile(profile) if profile is not None else DEFAULT_PROFILE
        self.diagnostic_mode = diagnostic_mode
        self.max_comments = max_comments
        self.min_length = min_length
        self._calculator = TimecodeCalculator(self.profile)

    def parse(self, text: str) -> list[CommentRecord]:
        return self.parse_with_report(text).comments

    def parse_with_report(self, text: str) -> ParseResult:
        """
        Parse export text.

        Args:
            text: Raw export text

        Returns:
            ParseResult with the deduplicated comments, plus the diagnostic
            report when diagnostic mode is on

        Never raises for bad input: unusable text gives an empty list.
        """
        report = DiagnosticReport(input_size=len(text) if isinstance(text, str) else 0) if self.diagnostic_mode else None

        if not isinstance(text, str) or not text.strip():
            logger.warning("Comment export is empty - nothing to parse")
            return ParseResult([], report)

        text, removed = strip_corruption(text)
        if removed:
            logger.warning(f"Stripped {removed} corrupted character(s) from comment export")
            if report is not None:
                report.record_anomaly("corruption", f"Removed {removed} NUL/replacement characters", count=removed)

        stripped = text.strip()
        if len(stripped) < self.min_length:
            logger.warning(f"Comment export too short ({len(stripped)} characters) - nothing to parse")
            return ParseResult([], report)

        if not TIMECODE_SHAPE.search(text) and not AUTHOR_HEADER_SHAPE.search(text):
            logger.warning("Comment export contains no timecodes or author headers - nothing to parse")
            return ParseResult([], report)

        if len(text.encode("utf-8")) > LARGE_EXPORT_BYTES:
            logger.warning(f"Large comment export ({len(text) // 1024} KB) - parsing may take a while")

        lines = text.split("\n")
        run = _ParseRun(self._calculator, self.max_comments, report)
        comments = run.run(lines)
        logger.info(f"Parsed {len(lines)} lines, found {len(comments)} comments")

        comments = remove_duplicate_comments(comments, report)

        if report is not None:
            report.log_summary(logger)

        return ParseResult(comments, report)


def parse_comments(
    text: str,
    profile: FrameRateProfile | str | None = None,
    diagnostic_mode: bool = False,
) -> list[CommentRecord]:
    """Parse export text with a one-off CommentParser."""
    return CommentParser(profile, diagnostic_mode).parse(text)

