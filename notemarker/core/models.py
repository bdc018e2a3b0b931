"""Data models shared by the timecode engine, parser and conflict engine.

All models are frozen dataclasses: a record, once produced, is never
modified in place. Changes (such as an offset applied during conflict
resolution) produce new instances through ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from notemarker.utils.constants import MAX_HOURS, MAX_MINUTES, MAX_SECONDS


class ParserState(str, Enum):
    """States of the comment export line classifier."""

    SCANNING = "SCANNING"
    IN_COMMENT = "IN_COMMENT"
    IN_REPLY = "IN_REPLY"


class ConflictType(str, Enum):
    """Kinds of collision between a candidate and an existing marker."""

    EXACT_MATCH = "exact_match"  # Same name and timecode
    EXACT_NAME = "exact_name"  # Same name, different timecode
    EXACT_TIMECODE = "exact_timecode"  # Same timecode, different name
    NEAR_TIMECODE = "near_timecode"  # Timecodes within threshold


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ResolutionStrategy(str, Enum):
    """Ways of dealing with a conflicting candidate marker."""

    SKIP = "skip"
    REPLACE = "replace"
    OFFSET = "offset"
    ASK_EACH = "ask_each"
    CANCEL = "cancel"


class MarkerColor(int, Enum):
    """Marker colour indices understood by the timeline application."""

    BLUE = 0  # main comments
    RED = 1  # replies
    GREEN = 2  # notes
    YELLOW = 3  # warnings
    ORANGE = 4  # errors

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class FrameRateProfile:
    """Frame rate governing all arithmetic on a timecode.

    Attributes:
        key: Lookup key (e.g. "29.97drop")
        nominal_fps: Broadcast rate (e.g. 29.97)
        drop_frame: Whether NTSC drop-frame counting applies
        integer_fps: Frames per timecode second (e.g. 30)

    Instances are normally obtained from notemarker.core.frame_rates,
    which validates the combination.
    """

    key: str
    nominal_fps: float
    drop_frame: bool
    integer_fps: int

    @property
    def max_frames(self) -> int:
        return self.integer_fps - 1

    @property
    def frames_per_day(self) -> int:
        return 24 * 3600 * self.integer_fps

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class TimecodeValue:
    """An SMPTE timecode, HH:MM:SS:FF.

    The profile that produced the value travels with it so the engine can
    reject arithmetic across profiles. It does not take part in equality:
    two values are equal when their four fields are equal.

    Example:
        >>> TimecodeValue(0, 0, 10, 0)
        TimecodeValue(00:00:10:00)
    """

    hours: int
    minutes: int
    seconds: int
    frames: int
    profile: FrameRateProfile | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Reject values no profile can represent."""
        if not 0 <= self.hours <= MAX_HOURS:
            raise ValueError(f"hours must be 0-{MAX_HOURS}, got {self.hours}")
        if not 0 <= self.minutes <= MAX_MINUTES:
            raise ValueError(f"minutes must be 0-{MAX_MINUTES}, got {self.minutes}")
        if not 0 <= self.seconds <= MAX_SECONDS:
            raise ValueError(f"seconds must be 0-{MAX_SECONDS}, got {self.seconds}")
        if self.frames < 0:
            raise ValueError(f"frames cannot be negative, got {self.frames}")
        if self.profile is not None and self.frames > self.profile.max_frames:
            raise ValueError(
                f"frames must be 0-{self.profile.max_frames} for {self.profile.key}, got {self.frames}"
            )

    @property
    def components(self) -> tuple[int, int, int, int]:
        return (self.hours, self.minutes, self.seconds, self.frames)

    @property
    def is_zero(self) -> bool:
        return self.components == (0, 0, 0, 0)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}:{self.frames:02d}"

    def __repr__(self) -> str:
        return f"TimecodeValue({self})"


@dataclass(frozen=True)
class CommentRecord:
    """One comment (or reply) read from a review export.

    Replies have no parent link: they carry the timecode of the most
    recent main comment in their block.
    """

    author: str
    timecode: TimecodeValue
    text: str
    is_reply: bool = False


@dataclass(frozen=True)
class OffsetInfo:
    """How far a marker was moved to clear its conflicts."""

    original_timecode: TimecodeValue
    offset_frames: int
    offset_seconds: float


@dataclass(frozen=True)
class Marker:
    """A marker proposed for creation in the timeline.

    Attributes:
        name: Marker name shown in the timeline
        timecode: Absolute (session) timecode
        source_comment: Comment the marker was built from
        offset_info: Set when conflict resolution moved the marker
        comments: Comment text stored with the marker
        color: Marker colour
    """

    name: str
    timecode: TimecodeValue
    source_comment: CommentRecord | None = None
    offset_info: OffsetInfo | None = None
    comments: str = ""
    color: MarkerColor = MarkerColor.BLUE


@dataclass(frozen=True)
class ExistingMarker:
    """A marker already present in the timeline (read-only)."""

    name: str
    start_location: TimecodeValue


@dataclass(frozen=True)
class Conflict:
    """A collision between candidate ``candidate_index`` and an existing marker."""

    type: ConflictType
    existing_marker: ExistingMarker
    candidate_index: int
    severity: Severity
    distance_frames: int | None = None
    description: str = ""
    suggestions: tuple[ResolutionStrategy, ...] = ()
