"""
Marker file I/O and the file-backed marker service.

Existing timeline markers are read from a CSV export (Name and Timecode
columns) or an Avid marker text file. Created markers are written as
CSV or as Avid marker text, one tab-delimited line per marker:

    name<TAB>TC<TAB>V1<TAB>Color<TAB>comment<TAB>1<TAB><TAB>Color
"""

from __future__ import annotations

import csv
from pathlib import Path

import pandas as pd

from notemarker.core.frame_rates import DEFAULT_PROFILE
from notemarker.core.models import ExistingMarker, FrameRateProfile, Marker, MarkerColor
from notemarker.core.timecode_calc import TimecodeCalculator
from notemarker.utils.constants import (
    AVID_DURATION,
    AVID_TRACK,
    NAME_COLUMN,
    TIMECODE_COLUMN,
    TIMECODE_COLUMN_ALIASES,
)
from notemarker.utils.exceptions import MarkerFileError, MarkerServiceError, TimecodeError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

# Avid has no orange marker
AVID_COLORS = {
    MarkerColor.BLUE: "Blue",
    MarkerColor.RED: "Red",
    MarkerColor.GREEN: "Green",
    MarkerColor.YELLOW: "Yellow",
    MarkerColor.ORANGE: "Magenta",
}

AVID_COLUMNS = ["Name", "Timecode", "Track", "Color", "Comment", "Duration", "Blank", "Color2"]

DATAFRAME_COLUMNS = [
    NAME_COLUMN,
    TIMECODE_COLUMN,
    "Color",
    "Comment",
    "Author",
    "Reply",
    "Original Timecode",
    "Offset Frames",
]


# ============================================================================
# Helpers
# ============================================================================

def sanitize_text(text) -> str:
    """
    Make text safe for the tab-delimited Avid format.

    Tabs and line breaks become spaces and runs of whitespace collapse.
    """
    if text is None or (isinstance(text, float) and pd.isna(text)):
        return ""
    text = str(text).replace("\t", " ").replace("\n", " ").replace("\r", " ")
    return " ".join(text.split())


def format_marker_line(marker: Marker) -> str:
    """Format one marker as an Avid marker text line."""
    color = AVID_COLORS.get(marker.color, "Blue")
    name = sanitize_text(marker.name)
    comment = sanitize_text(marker.comments)
    return f"{name}\t{marker.timecode}\t{AVID_TRACK}\t{color}\t{comment}\t{AVID_DURATION}\t\t{color}\n"


def _timecode_column(data: pd.DataFrame, path: Path) -> str:
    for column in TIMECODE_COLUMN_ALIASES:
        if column in data.columns:
            return column
    raise MarkerFileError(
        f"Missing timecode column (expected one of: {', '.join(TIMECODE_COLUMN_ALIASES)})",
        str(path),
        TIMECODE_COLUMN,
    )


def _load_table(path: Path) -> pd.DataFrame:
    try:
        if path.suffix.lower() == ".txt":
            return pd.read_csv(
                path,
                sep="\t",
                header=None,
                names=AVID_COLUMNS,
                dtype=str,
                keep_default_na=False,
                quoting=csv.QUOTE_NONE,
            )
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    except FileNotFoundError:
        raise
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=[NAME_COLUMN, TIMECODE_COLUMN])
    except Exception as e:
        raise MarkerFileError(f"Error reading marker file: {e}", str(path)) from e


# ============================================================================
# Reading and writing
# ============================================================================

def read_existing_markers(file_path: str | Path, profile: FrameRateProfile = DEFAULT_PROFILE) -> list[ExistingMarker]:
    """
    Read the markers already in the timeline.

    Args:
        file_path: CSV with Name and Timecode (or Start / Start Location)
                   columns, or an Avid marker .txt file
        profile: Session frame rate profile

    Returns:
        ExistingMarker list; rows with invalid timecodes are skipped

    Raises:
        FileNotFoundError: If the file does not exist
        MarkerFileError: If the file cannot be read or lacks required columns
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Marker file not found: {path}")

    logger.info(f"Loading existing markers from {path}")
    data = _load_table(path)

    if NAME_COLUMN not in data.columns:
        raise MarkerFileError("Missing marker name column", str(path), NAME_COLUMN)
    timecode_column = _timecode_column(data, path)

    calc = TimecodeCalculator(profile)
    markers = []

    for row_number, (name, raw) in enumerate(
        zip(data[NAME_COLUMN].astype(str), data[timecode_column].astype(str)), start=2
    ):
        name = name.strip()
        raw = raw.strip()

        if not raw:
            continue

        try:
            timecode = calc.parse_lenient(raw)
        except TimecodeError as e:
            logger.warning(f"Skipping marker '{name}' on row {row_number}: {e}")
            continue

        markers.append(ExistingMarker(name, timecode))

    logger.info(f"Loaded {len(markers)} existing markers from {path.name}")
    return markers


def markers_to_dataframe(markers: list[Marker]) -> pd.DataFrame:
    """Tabulate markers, one row per marker."""
    rows = []
    for marker in markers:
        source = marker.source_comment
        offset = marker.offset_info
        rows.append(
            {
                NAME_COLUMN: marker.name,
                TIMECODE_COLUMN: str(marker.timecode),
                "Color": marker.color.label,
                "Comment": marker.comments,
                "Author": source.author if source else "",
                "Reply": bool(source and source.is_reply),
                "Original Timecode": str(offset.original_timecode) if offset else "",
                "Offset Frames": offset.offset_frames if offset else 0,
            }
        )
    return pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)


def write_markers(markers: list[Marker], file_path: str | Path) -> Path:
    """
    Write markers to a .csv file or an Avid marker .txt file.

    Returns:
        The path written

    Raises:
        MarkerFileError: Unsupported extension or write failure
    """
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix not in (".csv", ".txt"):
        raise MarkerFileError(f"Unsupported marker file format: {path.suffix}. Use .csv or .txt", str(path))

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".csv":
            markers_to_dataframe(markers).to_csv(path, index=False)
        else:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.writelines(format_marker_line(marker) for marker in markers)
    except OSError as e:
        raise MarkerFileError(f"Error writing marker file: {e}", str(path)) from e

    logger.info(f"Wrote {len(markers)} markers to {path}")
    return path


# ============================================================================
# File-backed marker service
# ============================================================================

class FileMarkerService:
    """MarkerService reading existing markers from a file and writing created ones to another.

    Args:
        existing_path: Marker file describing the timeline (None = empty timeline)
        output_path: File the created markers are written to (None = keep in memory)
        profile: Session frame rate profile

    Raises:
        MarkerFileError: If output_path is the existing marker file, which
                         would be overwritten by the created markers alone
    """

    def __init__(
        self,
        existing_path: str | Path | None = None,
        output_path: str | Path | None = None,
        profile: FrameRateProfile = DEFAULT_PROFILE,
    ) -> None:
        self.existing_path = Path(existing_path) if existing_path else None
        self.output_path = Path(output_path) if output_path else None

        if self.existing_path and self.output_path and self.existing_path.resolve() == self.output_path.resolve():
            raise MarkerFileError(f"Output would overwrite the existing marker file '{self.output_path}'; choose another output")

        self.profile = profile
        self.created: list[Marker] = []

    def list_markers(self) -> list[ExistingMarker]:
        if self.existing_path is None:
            return []
        try:
            return read_existing_markers(self.existing_path, self.profile)
        except (FileNotFoundError, MarkerFileError) as e:
            raise MarkerServiceError(str(e), "list_markers") from e

    def create_markers(self, markers: list[Marker]) -> int:
        """Record a batch of markers and rewrite the output file."""
        pending = self.created + list(markers)

        if self.output_path is not None:
            try:
                write_markers(pending, self.output_path)
            except MarkerFileError as e:
                raise MarkerServiceError(str(e), "create_markers") from e

        self.created = pending
        return len(markers)
