"""Configuration validation utilities.

This module provides validation functions for import configuration,
ensuring the frame rate, session start and strategy are usable together.
"""

from pathlib import Path

from notemarker.config.models import ImportConfig
from notemarker.core.frame_rates import get_profile, supported_frame_rates
from notemarker.core.models import ResolutionStrategy
from notemarker.core.timecode_calc import TimecodeCalculator
from notemarker.utils.exceptions import ConfigurationError, TimecodeError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigValidator:
    """Validator for import configuration.

    Example:
        >>> config = ImportConfig(frame_rate="48")
        >>> ConfigValidator.validate(config)  # Raises ConfigurationError
    """

    @classmethod
    def validate(cls, config: ImportConfig, input_file: str | None = None) -> None:
        """Validate entire configuration.

        Args:
            config: Configuration to validate
            input_file: Optional export file path to check

        Raises:
            ConfigurationError: If configuration is invalid
        """
        cls.validate_frame_rate(config)
        cls.validate_session_start(config)
        cls.validate_strategy(config)
        cls.validate_limits(config)
        cls.validate_log_level(config)

        if input_file:
            cls.validate_input_file(input_file)

        logger.debug("Configuration validated")

    @classmethod
    def validate_frame_rate(cls, config: ImportConfig) -> None:
        try:
            get_profile(config.frame_rate)
        except TimecodeError:
            raise ConfigurationError(
                f"Unsupported frame rate (supported: {', '.join(supported_frame_rates())})",
                config_key="frame_rate",
                invalid_value=config.frame_rate,
            )

    @classmethod
    def validate_session_start(cls, config: ImportConfig) -> None:
        """Session start must parse under the configured frame rate."""
        try:
            TimecodeCalculator(config.frame_rate).parse_lenient(config.session_start)
        except TimecodeError as e:
            raise ConfigurationError(
                f"Invalid session start timecode: {e}",
                config_key="session_start",
                invalid_value=config.session_start,
            )

    @classmethod
    def validate_strategy(cls, config: ImportConfig) -> None:
        valid = [strategy.value for strategy in ResolutionStrategy]
        if config.strategy not in valid:
            raise ConfigurationError(
                f"Unknown conflict strategy (valid: {', '.join(valid)})",
                config_key="strategy",
                invalid_value=config.strategy,
            )

    @classmethod
    def validate_limits(cls, config: ImportConfig) -> None:
        """Re-check numeric settings that may have been changed after construction."""
        checks = (
            ("batch_size", config.batch_size, 1),
            ("conflicts.default_offset_frames", config.conflicts.default_offset_frames, 1),
            ("conflicts.near_timecode_threshold_frames", config.conflicts.near_timecode_threshold_frames, 0),
            ("conflicts.max_offset_attempts", config.conflicts.max_offset_attempts, 1),
            ("parser.max_comments", config.parser.max_comments, 1),
        )
        for key, value, minimum in checks:
            if value < minimum:
                raise ConfigurationError(
                    f"Value must be at least {minimum}",
                    config_key=key,
                    invalid_value=value,
                )

    @classmethod
    def validate_log_level(cls, config: ImportConfig) -> None:
        if str(config.log_level).upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level (valid: {', '.join(VALID_LOG_LEVELS)})",
                config_key="log_level",
                invalid_value=config.log_level,
            )

    @classmethod
    def validate_input_file(cls, input_file: str) -> None:
        """Check that the export file exists and is a file.

        Raises:
            ConfigurationError: If the file is missing or is a directory
        """
        path = Path(input_file)

        if not path.exists():
            raise ConfigurationError(
                "Comment export not found",
                config_key="input_file",
                invalid_value=input_file,
            )

        if not path.is_file():
            raise ConfigurationError(
                "Comment export path is not a file",
                config_key="input_file",
                invalid_value=input_file,
            )
