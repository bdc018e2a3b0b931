"""
Timecode extractors for comment export lines.

Each extractor looks for one timecode syntax in a line and returns the
first occurrence that validates under the frame rate profile, or None.
EXTRACTORS lists them in priority order:

    bracketed range  [00:01:00:00 - 00:01:05:00]   (first timecode wins)
    bracketed single [00:01:00:00]
    line start       00:01:00:00 - text
    anywhere         ... at 00:01:00:00 ...

Timecodes failing range validation are logged and skipped, so a later
tier can still supply a valid one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable

from notemarker.core.frame_rates import DEFAULT_PROFILE
from notemarker.core.models import FrameRateProfile, TimecodeValue
from notemarker.core.timecode_calc import normalize_separators, parse
from notemarker.utils.constants import TIMECODE_TOKEN
from notemarker.utils.exceptions import TimecodeError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

BRACKETED_RANGE_PATTERN = re.compile(rf"\[({TIMECODE_TOKEN})\s*-\s*({TIMECODE_TOKEN})\]")
BRACKETED_SINGLE_PATTERN = re.compile(rf"\[({TIMECODE_TOKEN})\]")
LINE_START_PATTERN = re.compile(rf"^({TIMECODE_TOKEN})\s*-\s*(.+)$")
ANYWHERE_PATTERN = re.compile(rf"(?<!\d)({TIMECODE_TOKEN})(?!\d)")
LEADING_DASH_PATTERN = re.compile(r"^\s*-\s*")
WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass(frozen=True)
class TimecodeMatch:
    """A validated timecode found in a line.

    Attributes:
        timecode: Parsed timecode
        source: Extractor that found it (e.g. "bracketed_range")
        raw: Timecode text as it appeared in the line
    """

    timecode: TimecodeValue
    source: str
    raw: str


def _validate_raw(raw: str, source: str, profile: FrameRateProfile) -> TimecodeValue | None:
    try:
        return parse(normalize_separators(raw), profile)
    except TimecodeError as e:
        logger.debug(f"Ignoring invalid {source} timecode '{raw}': {e}")
        return None


def _first_valid(matches: Iterable[str], source: str, profile: FrameRateProfile) -> TimecodeMatch | None:
    for raw in matches:
        timecode = _validate_raw(raw, source, profile)
        if timecode is not None:
            return TimecodeMatch(timecode, source, raw)
    return None


def extract_bracketed_range(line: str, profile: FrameRateProfile = DEFAULT_PROFILE) -> TimecodeMatch | None:
    """Find "[TC - TC]" and return the start of the range."""
    return _first_valid(
        (m.group(1) for m in BRACKETED_RANGE_PATTERN.finditer(line)),
        "bracketed_range",
        profile,
    )


def extract_bracketed_single(line: str, profile: FrameRateProfile = DEFAULT_PROFILE) -> TimecodeMatch | None:
    return _first_valid(
        (m.group(1) for m in BRACKETED_SINGLE_PATTERN.finditer(line)),
        "bracketed_single",
        profile,
    )


def extract_line_start(line: str, profile: FrameRateProfile = DEFAULT_PROFILE) -> TimecodeMatch | None:
    """Find "TC - text" at the start of the (trimmed) line."""
    match = LINE_START_PATTERN.match(line.strip())
    if not match:
        return None
    return _first_valid([match.group(1)], "line_start", profile)


def extract_anywhere(line: str, profile: FrameRateProfile = DEFAULT_PROFILE) -> TimecodeMatch | None:
    return _first_valid(
        (m.group(1) for m in ANYWHERE_PATTERN.finditer(line)),
        "anywhere",
        profile,
    )


Extractor = Callable[[str, FrameRateProfile], "TimecodeMatch | None"]

EXTRACTORS: tuple[Extractor, ...] = (
    extract_bracketed_range,
    extract_bracketed_single,
    extract_line_start,
    extract_anywhere,
)


def extract_timecode(
    line: str,
    profile: FrameRateProfile = DEFAULT_PROFILE,
    extractors: Iterable[Extractor] = EXTRACTORS,
) -> TimecodeMatch | None:
    """
    Return the highest-priority valid timecode in a line.

    Args:
        line: Export line
        profile: Profile used to validate candidate timecodes
        extractors: Extractors to try, highest priority first

    Returns:
        TimecodeMatch, or None when no tier yields a valid timecode

    Example:
        "See [00:00:10:00 - 00:00:12:00] and 00:00:05:00"
            -> TimecodeMatch(00:00:10:00, "bracketed_range", "00:00:10:00")
    """
    for extractor in extractors:
        found = extractor(line, profile)
        if found is not None:
            return found
    return None


def contains_timecode(text: str) -> bool:
    """Whether text contains anything shaped like a timecode (valid or not)."""
    return ANYWHERE_PATTERN.search(text) is not None


def strip_timecodes(line: str) -> str:
    """
    Remove every recognised timecode syntax and a leading dash.

    Example:
        "[00:00:10:00 - 00:00:12:00] - Lower the music" -> "Lower the music"
    """
    text = BRACKETED_RANGE_PATTERN.sub(" ", line)
    text = BRACKETED_SINGLE_PATTERN.sub(" ", text)
    text = ANYWHERE_PATTERN.sub(" ", text)
    text = LEADING_DASH_PATTERN.sub("", text.strip())
    return WHITESPACE_PATTERN.sub(" ", text).strip()
