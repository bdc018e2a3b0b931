"""
Timecode Engine - frame-accurate SMPTE timecode arithmetic

Parses, validates and formats HH:MM:SS:FF timecodes, converts them to and
from absolute frame counts (with NTSC drop-frame correction), adds them
and measures durations. Every operation is interpreted under an explicit
FrameRateProfile; malformed input always raises a typed error and is
never clamped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from notemarker.core.frame_rates import DEFAULT_PROFILE, get_profile
from notemarker.core.models import FrameRateProfile, TimecodeValue
from notemarker.utils.constants import (
    DROP_FRAME_EXEMPT_EVERY,
    DROP_FRAMES_PER_MINUTE,
    HOURS_PER_DAY,
    MAX_HOURS,
    MAX_MINUTES,
    MAX_SECONDS,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
)
from notemarker.utils.exceptions import (
    CalculationError,
    FieldViolation,
    InvalidFormatError,
    InvalidRangeError,
    ProfileMismatchError,
    TimecodeError,
)
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

TIMECODE_PATTERN = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2}):(\d{2})$")


# ============================================================================
# Result types
# ============================================================================

@dataclass(frozen=True)
class FrameConversion:
    """A timecode rebuilt from a frame count, with whole days past 24h."""

    timecode: TimecodeValue
    day_overflow: int = 0


@dataclass(frozen=True)
class TimecodeSum:
    result: TimecodeValue
    day_overflow: int = 0


@dataclass(frozen=True)
class DurationResult:
    duration: TimecodeValue
    frames: int
    crosses_midnight: bool = False


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate(); exactly one of timecode/error is set."""

    valid: bool
    timecode: TimecodeValue | None = None
    error: TimecodeError | None = None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error else None


# ============================================================================
# Parsing and formatting
# ============================================================================

def normalize_separators(text: str) -> str:
    """
    Convert the drop-frame ';' separator to ':'.

    Exports and users write "01:00:00;00" for drop-frame timecodes; the
    engine itself only accepts the four-field colon form.
    """
    return text.strip().replace(";", ":")


def parse(text: str, profile: FrameRateProfile = DEFAULT_PROFILE) -> TimecodeValue:
    """
    Parse an HH:MM:SS:FF string.

    Args:
        text: Timecode string (e.g. "01:00:10:00")
        profile: Frame rate profile that bounds the frames field

    Returns:
        TimecodeValue tagged with the profile

    Raises:
        InvalidFormatError: Wrong shape, field count or non-numeric fields
        InvalidRangeError: One or more fields out of range; every violated
                           field is listed, e.g. "25:61:00:00" reports both
                           hours and minutes

    Example:
        parse("00:00:10:00", FRAME_RATES["30"]) -> 00:00:10:00
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidFormatError(text)

    match = TIMECODE_PATTERN.match(text.strip())
    if not match:
        raise InvalidFormatError(text)

    hours, minutes, seconds, frames = (int(part) for part in match.groups())

    limits = (
        ("hours", hours, MAX_HOURS),
        ("minutes", minutes, MAX_MINUTES),
        ("seconds", seconds, MAX_SECONDS),
        ("frames", frames, profile.max_frames),
    )
    violations = [
        FieldViolation(name, value, 0, maximum)
        for name, value, maximum in limits
        if not 0 <= value <= maximum
    ]
    if violations:
        raise InvalidRangeError(text, violations, profile.key)

    return TimecodeValue(hours, minutes, seconds, frames, profile)


def format_timecode(tc: TimecodeValue) -> str:
    """Format a timecode as zero-padded HH:MM:SS:FF."""
    return f"{tc.hours:02d}:{tc.minutes:02d}:{tc.seconds:02d}:{tc.frames:02d}"


def validate(text: str, profile: FrameRateProfile = DEFAULT_PROFILE) -> ValidationResult:
    """
    Non-throwing wrapper around parse() for callers that keep going on bad input.

    Returns:
        ValidationResult(valid=True, timecode=...) or
        ValidationResult(valid=False, error=...)
    """
    try:
        return ValidationResult(True, timecode=parse(text, profile))
    except TimecodeError as e:
        return ValidationResult(False, error=e)


# ============================================================================
# Frame count conversion
# ============================================================================

def _check_profile(tc: TimecodeValue, profile: FrameRateProfile) -> None:
    """
    Reject a timecode produced under a different profile.

    A value built without a profile (TimecodeValue(0, 0, 10, 0)) is taken
    to belong to the profile it is used with; only its frames are range
    checked against that profile.
    """
    other = tc.profile
    if other is None:
        if tc.frames > profile.max_frames:
            raise InvalidRangeError(
                format_timecode(tc),
                [FieldViolation("frames", tc.frames, 0, profile.max_frames)],
                profile.key,
            )
        return

    same = (
        other.nominal_fps == profile.nominal_fps
        and other.drop_frame == profile.drop_frame
        and other.integer_fps == profile.integer_fps
    )
    if not same:
        raise ProfileMismatchError(profile.key, other.key)


def _dropped_frames(total_minutes: int) -> int:
    """Frame numbers skipped up to the given elapsed minute count."""
    counted_minutes = total_minutes - total_minutes // DROP_FRAME_EXEMPT_EVERY
    return DROP_FRAMES_PER_MINUTE * counted_minutes


def to_frame_count(tc: TimecodeValue, profile: FrameRateProfile = DEFAULT_PROFILE) -> int:
    """
    Convert a timecode to an absolute frame count.

    frames + seconds*fps + minutes*60*fps + hours*3600*fps, minus 2 frames
    for every elapsed minute not divisible by 10 under drop-frame.

    Example:
        00:01:00:02 at 29.97drop -> 1800
    """
    _check_profile(tc, profile)

    fps = profile.integer_fps
    total = (
        tc.frames
        + tc.seconds * fps
        + tc.minutes * SECONDS_PER_MINUTE * fps
        + tc.hours * SECONDS_PER_HOUR * fps
    )

    if profile.drop_frame:
        total -= _dropped_frames(tc.hours * 60 + tc.minutes)

    return int(total)


def from_frame_count(frames: int, profile: FrameRateProfile = DEFAULT_PROFILE) -> FrameConversion:
    """
    Convert an absolute frame count back to a timecode.

    Drop-frame counts are converted with the closed-form inverse of
    to_frame_count, so every drop-frame label that exists round-trips
    exactly. Hours wrap at 24 and whole days are reported in day_overflow.

    Raises:
        CalculationError: If the frame count is negative
    """
    if isinstance(frames, bool) or not isinstance(frames, int):
        try:
            frames = int(frames)
        except (TypeError, ValueError) as e:
            raise CalculationError(f"Frame count must be an integer: {frames!r}") from e

    if frames < 0:
        raise CalculationError(
            f"Frame count cannot be negative: {frames}",
            {"frames": frames, "frameRate": profile.key},
        )

    fps = profile.integer_fps
    nominal = frames

    if profile.drop_frame:
        frames_per_minute = SECONDS_PER_MINUTE * fps - DROP_FRAMES_PER_MINUTE
        frames_per_ten_minutes = (
            DROP_FRAME_EXEMPT_EVERY * SECONDS_PER_MINUTE * fps
            - DROP_FRAMES_PER_MINUTE * (DROP_FRAME_EXEMPT_EVERY - 1)
        )
        tens, remainder = divmod(frames, frames_per_ten_minutes)
        nominal += DROP_FRAMES_PER_MINUTE * (DROP_FRAME_EXEMPT_EVERY - 1) * tens
        if remainder > DROP_FRAMES_PER_MINUTE:
            nominal += DROP_FRAMES_PER_MINUTE * ((remainder - DROP_FRAMES_PER_MINUTE) // frames_per_minute)

    frames_per_hour = SECONDS_PER_HOUR * fps
    hours, nominal = divmod(nominal, frames_per_hour)
    minutes, nominal = divmod(nominal, SECONDS_PER_MINUTE * fps)
    seconds, frame = divmod(nominal, fps)

    day_overflow, hours = divmod(hours, HOURS_PER_DAY)

    return FrameConversion(TimecodeValue(hours, minutes, seconds, frame, profile), day_overflow)


# ============================================================================
# Arithmetic
# ============================================================================

def add(a: TimecodeValue, b: TimecodeValue, profile: FrameRateProfile = DEFAULT_PROFILE) -> TimecodeSum:
    """
    Add two timecodes (e.g. a comment timecode and the session start).

    Example:
        add(00:03:30:12, 01:00:00:00) -> 01:03:30:12
    """
    total = to_frame_count(a, profile) + to_frame_count(b, profile)
    converted = _convert(total, profile, "add", a, b)
    return TimecodeSum(converted.timecode, converted.day_overflow)


def offset(tc: TimecodeValue, frames: int, profile: FrameRateProfile = DEFAULT_PROFILE) -> FrameConversion:
    """Move a timecode by a number of frames (negative moves earlier)."""
    total = to_frame_count(tc, profile) + frames
    return _convert(total, profile, "offset", tc, frames)


def duration(start: TimecodeValue, end: TimecodeValue, profile: FrameRateProfile = DEFAULT_PROFILE) -> DurationResult:
    """
    Measure end - start.

    A negative difference is taken to cross midnight: one day of frames
    (24*3600*fps) is added and crosses_midnight is set.
    """
    start_frames = to_frame_count(start, profile)
    end_frames = to_frame_count(end, profile)

    frames = end_frames - start_frames
    crosses_midnight = frames < 0
    if crosses_midnight:
        frames += profile.frames_per_day

    converted = _convert(frames, profile, "duration", start, end)
    return DurationResult(converted.timecode, frames, crosses_midnight)


def frame_distance(a: TimecodeValue, b: TimecodeValue, profile: FrameRateProfile = DEFAULT_PROFILE) -> int:
    """Absolute distance between two timecodes in frames."""
    return abs(to_frame_count(a, profile) - to_frame_count(b, profile))


def _convert(total: int, profile: FrameRateProfile, operation: str, *operands) -> FrameConversion:
    try:
        return from_frame_count(total, profile)
    except TimecodeError:
        raise
    except Exception as e:
        logger.error(f"Timecode {operation} failed for {operands}: {e}")
        raise CalculationError(
            f"Failed to {operation} timecodes: {e}",
            {"operation": operation, "operands": [str(o) for o in operands]},
        ) from e


# ============================================================================
# Bound calculator
# ============================================================================

class TimecodeCalculator:
    """Timecode engine bound to one frame rate profile.

    Example:
        >>> calc = TimecodeCalculator("29.97drop")
        >>> calc.to_frame_count(calc.parse("00:01:00:02"))
        1800
    """

    def __init__(self, frame_rate: str | float | FrameRateProfile = DEFAULT_PROFILE) -> None:
        self.profile = get_profile(frame_rate)
        logger.debug(f"TimecodeCalculator initialized at {self.profile.key}")

    @property
    def frame_rate(self) -> str:
        return self.profile.key

    @property
    def fps(self) -> int:
        return self.profile.integer_fps

    def parse(self, text: str) -> TimecodeValue:
        return parse(text, self.profile)

    def parse_lenient(self, text: str) -> TimecodeValue:
        """Parse accepting ';' as the frame separator."""
        if not isinstance(text, str):
            raise InvalidFormatError(text)
        return parse(normalize_separators(text), self.profile)

    def validate(self, text: str) -> ValidationResult:
        return validate(text, self.profile)

    def to_frame_count(self, tc: TimecodeValue) -> int:
        return to_frame_count(tc, self.profile)

    def from_frame_count(self, frames: int) -> FrameConversion:
        return from_frame_count(frames, self.profile)

    def add(self, a: TimecodeValue, b: TimecodeValue) -> TimecodeSum:
        return add(a, b, self.profile)

    def offset(self, tc: TimecodeValue, frames: int) -> FrameConversion:
        return offset(tc, frames, self.profile)

    def duration(self, start: TimecodeValue, end: TimecodeValue) -> DurationResult:
        return duration(start, end, self.profile)

    def frame_distance(self, a: TimecodeValue, b: TimecodeValue) -> int:
        return frame_distance(a, b, self.profile)

    def frames_to_seconds(self, frames: int) -> float:
        return frames / self.profile.integer_fps

    def format(self, tc: TimecodeValue) -> str:
        return format_timecode(tc)
