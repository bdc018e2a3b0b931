"""Configuration data models for comment marker import.

This module defines type-safe configuration dataclasses that encapsulate
all settings for parsing, conflict handling and marker creation. These
models support:
- JSON serialization/deserialization
- Validation
- Default values
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from notemarker.core.frame_rates import get_profile
from notemarker.core.models import FrameRateProfile, ResolutionStrategy
from notemarker.utils.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_FRAME_RATE,
    DEFAULT_MAX_OFFSET_ATTEMPTS,
    DEFAULT_NEAR_THRESHOLD_FRAMES,
    DEFAULT_OFFSET_FRAMES,
    MAX_COMMENTS,
    MAX_MARKER_NAME_LENGTH,
    MIN_EXPORT_LENGTH,
    TEXT_MARKER_NAME_LENGTH,
    ZERO_TIMECODE,
)
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ParserConfig:
    """Configuration for the comment parser.

    Attributes:
        diagnostic_mode: Collect a diagnostic report while parsing
        max_comments: Stop parsing after this many comments
        min_input_length: Reject exports shorter than this
    """

    diagnostic_mode: bool = False
    max_comments: int = MAX_COMMENTS
    min_input_length: int = MIN_EXPORT_LENGTH

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        if self.max_comments < 1:
            raise ValueError(f"max_comments must be at least 1, got {self.max_comments}")
        if self.min_input_length < 0:
            raise ValueError(f"min_input_length cannot be negative, got {self.min_input_length}")


@dataclass
class ConflictConfig:
    """Configuration for marker conflict detection and resolution.

    Attributes:
        near_timecode_threshold_frames: Markers this close count as near conflicts
        default_offset_frames: Shift applied by the offset strategy
        enable_near_detection: Detect near-timecode conflicts at all
        case_sensitive_names: Compare marker names case-sensitively
        recheck_offsets: Re-check shifted markers and shift again while they collide
        max_offset_attempts: Shifts tried before a colliding marker is skipped

    Example:
        >>> config = ConflictConfig(near_timecode_threshold_frames=10, default_offset_frames=48)
    """

    near_timecode_threshold_frames: int = DEFAULT_NEAR_THRESHOLD_FRAMES
    default_offset_frames: int = DEFAULT_OFFSET_FRAMES
    enable_near_detection: bool = True
    case_sensitive_names: bool = False
    recheck_offsets: bool = False
    max_offset_attempts: int = DEFAULT_MAX_OFFSET_ATTEMPTS

    def __post_init__(self) -> None:
        """Validate conflict configuration."""
        if self.near_timecode_threshold_frames < 0:
            raise ValueError(
                f"Near timecode threshold cannot be negative, got {self.near_timecode_threshold_frames}"
            )
        if self.default_offset_frames < 1:
            raise ValueError(f"Offset must be at least 1 frame, got {self.default_offset_frames}")
        if self.max_offset_attempts < 1:
            raise ValueError(f"max_offset_attempts must be at least 1, got {self.max_offset_attempts}")


@dataclass
class MarkerConfig:
    """Configuration for marker naming.

    Attributes:
        max_name_length: Marker names are cut to this length
        text_name_length: Characters of comment text used when there is no author
    """

    max_name_length: int = MAX_MARKER_NAME_LENGTH
    text_name_length: int = TEXT_MARKER_NAME_LENGTH

    def __post_init__(self) -> None:
        """Validate marker configuration."""
        if self.max_name_length < 1:
            raise ValueError(f"max_name_length must be positive, got {self.max_name_length}")
        if self.text_name_length < 1:
            raise ValueError(f"text_name_length must be positive, got {self.text_name_length}")


@dataclass
class ImportConfig:
    """Complete configuration for one comment import.

    Attributes:
        frame_rate: Session frame rate key (e.g. "29.97drop")
        session_start: Session start timecode
        strategy: Conflict resolution strategy
        batch_size: Markers handed to the marker service per call
        dry_run: Resolve conflicts but create nothing
        parser: Parser configuration
        conflicts: Conflict configuration
        markers: Marker naming configuration
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Example:
        >>> config = ImportConfig(
        ...     frame_rate="25",
        ...     session_start="10:00:00:00",
        ...     strategy="offset",
        ... )
    """

    frame_rate: str = DEFAULT_FRAME_RATE
    session_start: str = ZERO_TIMECODE
    strategy: str = ResolutionStrategy.ASK_EACH.value
    batch_size: int = DEFAULT_BATCH_SIZE
    dry_run: bool = False
    parser: ParserConfig = field(default_factory=ParserConfig)
    conflicts: ConflictConfig = field(default_factory=ConflictConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {self.batch_size}")
        if isinstance(self.strategy, ResolutionStrategy):
            self.strategy = self.strategy.value

    @property
    def profile(self) -> FrameRateProfile:
        """Frame rate profile for frame_rate.

        Raises:
            UnsupportedFrameRateError: If frame_rate is not supported
        """
        return get_profile(self.frame_rate)

    @property
    def resolution_strategy(self) -> ResolutionStrategy:
        return ResolutionStrategy(self.strategy)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, filepath: str | Path) -> None:
        """Save configuration to JSON file.

        Args:
            filepath: Path to JSON file
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

        logger.info(f"Saved configuration to {path}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportConfig":
        """Create configuration from dictionary.

        Args:
            data: Dictionary with configuration data

        Returns:
            ImportConfig instance

        Example:
            >>> config = ImportConfig.from_dict({"frame_rate": "25", "conflicts": {"default_offset_frames": 25}})
        """
        data = dict(data)

        # Handle nested dataclasses
        if isinstance(data.get("parser"), dict):
            data["parser"] = ParserConfig(**data["parser"])
        if isinstance(data.get("conflicts"), dict):
            data["conflicts"] = ConflictConfig(**data["conflicts"])
        if isinstance(data.get("markers"), dict):
            data["markers"] = MarkerConfig(**data["markers"])

        return cls(**data)

    @classmethod
    def from_json(cls, filepath: str | Path) -> "ImportConfig":
        """Load configuration from JSON file.

        Args:
            filepath: Path to JSON file

        Returns:
            ImportConfig instance
        """
        path = Path(filepath)

        with open(path, "r") as f:
            data = json.load(f)

        logger.info(f"Loaded configuration from {path}")
        return cls.from_dict(data)
