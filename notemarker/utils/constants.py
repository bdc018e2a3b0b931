"""Constants for comment parsing, timecode arithmetic and marker import.

This module keeps the limits, patterns and defaults used across the
package in one place, named and type-safe.
"""

from typing import Final

# Timecode field limits
MAX_HOURS: Final[int] = 23
MAX_MINUTES: Final[int] = 59
MAX_SECONDS: Final[int] = 59
HOURS_PER_DAY: Final[int] = 24
SECONDS_PER_MINUTE: Final[int] = 60
SECONDS_PER_HOUR: Final[int] = 3600

# NTSC drop-frame rule: 2 frame numbers skipped per minute, except every 10th
DROP_FRAMES_PER_MINUTE: Final[int] = 2
DROP_FRAME_EXEMPT_EVERY: Final[int] = 10

ZERO_TIMECODE: Final[str] = "00:00:00:00"
DEFAULT_FRAME_RATE: Final[str] = "29.97"

# Raw timecode shape accepted in exports (colon or semicolon before frames)
TIMECODE_TOKEN: Final[str] = r"\d{1,2}:\d{2}:\d{2}[:;]\d{2}"

# Parser guards and safety bounds
MIN_EXPORT_LENGTH: Final[int] = 20
MAX_COMMENTS: Final[int] = 2000
LARGE_EXPORT_BYTES: Final[int] = 500 * 1024
MIN_COMMENT_TEXT_LENGTH: Final[int] = 2
MAX_AUTHOR_WORD_DIFFERENCE: Final[int] = 2
CORRUPTION_CHARACTERS: Final[tuple[str, ...]] = ("\0", "\ufffd")
UNKNOWN_AUTHOR: Final[str] = "Unknown"
REPLY_AUTHOR_SUFFIX: Final[str] = " (Reply)"
CONTINUATION_AUTHOR_SUFFIX: Final[str] = " (Continuation)"
TAB_WIDTH: Final[int] = 4
DIAGNOSTIC_PREVIEW_LENGTH: Final[int] = 50

# Conflict detection defaults
DEFAULT_NEAR_THRESHOLD_FRAMES: Final[int] = 15  # ~0.5 seconds at 30fps
DEFAULT_OFFSET_FRAMES: Final[int] = 30  # 1 second at 30fps
DEFAULT_MAX_OFFSET_ATTEMPTS: Final[int] = 10

# Marker naming
MAX_MARKER_NAME_LENGTH: Final[int] = 64
TEXT_MARKER_NAME_LENGTH: Final[int] = 30
INVALID_NAME_CHARACTERS: Final[str] = r'[<>:"/\\|?*]'

# Marker colour keywords, checked in this order
ERROR_KEYWORDS: Final[tuple[str, ...]] = ("error", "problem", "issue")
WARNING_KEYWORDS: Final[tuple[str, ...]] = ("warning", "caution", "careful")
NOTE_KEYWORDS: Final[tuple[str, ...]] = ("note", "reminder", "remember")

# Pipeline defaults
DEFAULT_BATCH_SIZE: Final[int] = 10

# Export file loading
ENCODING_SAMPLE_BYTES: Final[int] = 4096
MIN_ENCODING_CONFIDENCE: Final[float] = 0.7

# Avid marker text output
AVID_TRACK: Final[str] = "V1"
AVID_DURATION: Final[str] = "1"

# Marker CSV columns
NAME_COLUMN: Final[str] = "Name"
TIMECODE_COLUMN: Final[str] = "Timecode"
TIMECODE_COLUMN_ALIASES: Final[tuple[str, ...]] = ("Timecode", "Start", "Start Location")
