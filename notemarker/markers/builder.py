"""
Marker Builder - CommentRecords to candidate Markers

A comment's timecode is relative to the start of the reviewed media. The
marker timecode is the session start plus that offset, computed with the
timecode engine. Each marker gets a name (the cleaned author, else the
start of the comment text) and a colour chosen from the comment.
"""

from __future__ import annotations

import re

from notemarker.config.models import MarkerConfig
from notemarker.core.frame_rates import DEFAULT_PROFILE, get_profile
from notemarker.core.models import CommentRecord, FrameRateProfile, Marker, MarkerColor, TimecodeValue
from notemarker.core.timecode_calc import TimecodeCalculator
from notemarker.utils.constants import (
    ERROR_KEYWORDS,
    INVALID_NAME_CHARACTERS,
    MAX_MARKER_NAME_LENGTH,
    NOTE_KEYWORDS,
    TEXT_MARKER_NAME_LENGTH,
    WARNING_KEYWORDS,
    ZERO_TIMECODE,
)
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

INVALID_NAME_PATTERN = re.compile(INVALID_NAME_CHARACTERS)
WHITESPACE_PATTERN = re.compile(r"\s+")

# Author clean-up, applied in order
AUTHOR_TAG_PATTERN = re.compile(r"\s*\((?:Reply|Continuation)\)\s*", re.IGNORECASE)
AUTHOR_STAMP_PATTERN = re.compile(r"\s*-\s*\d{1,2}:\d{2}[AP]M.*$", re.IGNORECASE)
AUTHOR_INDEX_PATTERN = re.compile(r"^\d+\s*-\s*")


# ============================================================================
# Naming and colour
# ============================================================================

def sanitize_marker_name(name: str, max_length: int = MAX_MARKER_NAME_LENGTH) -> str:
    """
    Make a marker name safe for the timeline application.

    Replaces <>:"/\\|?* with underscores, collapses whitespace, trims and
    caps the length.

    Example:
        'Mix: "final"  pass' -> 'Mix_ _final_ pass'
    """
    name = INVALID_NAME_PATTERN.sub("_", name)
    name = WHITESPACE_PATTERN.sub(" ", name).strip()
    return name[:max_length]


def clean_author(author: str) -> str:
    """Strip reply tags, trailing timestamps and leading '001 - ' indices."""
    author = AUTHOR_TAG_PATTERN.sub(" ", author)
    author = AUTHOR_STAMP_PATTERN.sub("", author)
    author = AUTHOR_INDEX_PATTERN.sub("", author.strip())
    return author.strip()


def generate_marker_name(
    comment: CommentRecord,
    max_length: int = MAX_MARKER_NAME_LENGTH,
    text_length: int = TEXT_MARKER_NAME_LENGTH,
) -> str:
    """
    Choose a marker name for a comment.

    Priority:
        1. The cleaned author name
        2. The first text_length characters of the comment text
        3. "Marker HH_MM_SS_FF" (the timecode, sanitized like any other name)

    Examples:
        author "Jane Doe (Reply)" -> "Jane Doe"
        author "" and text "Fix the color in the second shot" -> "Fix the color in the second sh"
    """
    if comment.author and comment.author.strip():
        author = clean_author(comment.author)
        if author:
            return sanitize_marker_name(author, max_length)

    if comment.text and comment.text.strip():
        text = WHITESPACE_PATTERN.sub(" ", comment.text.strip())[:text_length]
        return sanitize_marker_name(text, max_length)

    timecode = comment.timecode if comment.timecode is not None else ZERO_TIMECODE
    return sanitize_marker_name(f"Marker {timecode}", max_length)


def determine_marker_color(comment: CommentRecord) -> MarkerColor:
    """
    Pick a marker colour.

    Replies are red. Otherwise the text is searched for error, warning
    and note keywords in that order; anything else is a blue main marker.
    """
    if comment.is_reply:
        return MarkerColor.RED

    text = (comment.text or "").casefold()

    if any(keyword in text for keyword in ERROR_KEYWORDS):
        return MarkerColor.ORANGE
    if any(keyword in text for keyword in WARNING_KEYWORDS):
        return MarkerColor.YELLOW
    if any(keyword in text for keyword in NOTE_KEYWORDS):
        return MarkerColor.GREEN

    return MarkerColor.BLUE


# ============================================================================
# Builder
# ============================================================================

class MarkerBuilder:
    """Builds candidate markers positioned on the session timeline.

    Example:
        >>> builder = MarkerBuilder("25", "01:00:00:00")
        >>> markers = builder.build(comments)
        >>> markers[0].timecode
        TimecodeValue(01:00:10:00)
    """

    def __init__(
        self,
        profile: FrameRateProfile | str = DEFAULT_PROFILE,
        session_start: TimecodeValue | str = ZERO_TIMECODE,
        config: MarkerConfig | None = None,
    ) -> None:
        self.calc = TimecodeCalculator(get_profile(profile))
        self.profile = self.calc.profile
        self.config = config or MarkerConfig()

        if isinstance(session_start, str):
            session_start = self.calc.parse_lenient(session_start)
        self.session_start = session_start

    def build_marker(self, comment: CommentRecord) -> Marker:
        """Build one marker; raises TimecodeError if the comment's timecode is unusable."""
        total = self.calc.add(comment.timecode, self.session_start)
        if total.day_overflow:
            logger.warning(
                f"Marker at {comment.timecode} + session start {self.session_start} "
                f"passes midnight; wrapped to {total.result}"
            )

        return Marker(
            name=generate_marker_name(comment, self.config.max_name_length, self.config.text_name_length),
            timecode=total.result,
            source_comment=comment,
            comments=comment.text,
            color=determine_marker_color(comment),
        )

    def build(self, comments: list[CommentRecord]) -> list[Marker]:
        """
        Build candidate markers for a list of comments, preserving order.

        Args:
            comments: Parsed comments

        Returns:
            Candidate markers, one per comment
        """
        markers = [self.build_marker(comment) for comment in comments]
        logger.info(f"Built {len(markers)} candidate markers from session start {self.session_start}")
        return markers
