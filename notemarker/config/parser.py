"""Command-line argument parser for the comment marker importer.

This module converts command-line arguments into an ImportConfig. Values
given on the command line override values loaded from --config.
"""

import argparse
from typing import Any

from notemarker.config.models import ImportConfig
from notemarker.core.frame_rates import supported_frame_rates
from notemarker.core.models import ResolutionStrategy
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)


class ConfigParser:
    """Parser for command-line arguments.

    Example:
        >>> parser = ConfigParser()
        >>> config, extra = parser.parse_args(["comments.txt", "--session-start", "01:00:00:00"])
        >>> config.session_start
        '01:00:00:00'
    """

    def __init__(self) -> None:
        """Initialize the argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser with all options.

        Returns:
            Configured ArgumentParser
        """
        parser = argparse.ArgumentParser(
            prog="notemarker-import",
            description="Import review comment exports as timeline markers.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_epilog(),
        )

        parser.add_argument("export_file", help="Path to the comment export text file")

        # Configuration file
        parser.add_argument(
            "--config",
            type=str,
            help="Load settings from JSON configuration file",
        )

        # Timing
        timing_group = parser.add_argument_group("Timing")
        timing_group.add_argument(
            "--frame-rate",
            default=None,
            help=f"Session frame rate (default: 29.97). One of: {', '.join(supported_frame_rates())}",
        )
        timing_group.add_argument(
            "--session-start",
            default=None,
            help="Session start timecode HH:MM:SS:FF (default: 00:00:00:00)",
        )

        # Conflicts
        conflict_group = parser.add_argument_group("Conflicts")
        conflict_group.add_argument(
            "--strategy",
            default=None,
            choices=[strategy.value for strategy in ResolutionStrategy],
            help="Conflict resolution strategy (default: ask_each)",
        )
        conflict_group.add_argument(
            "--near-threshold",
            type=int,
            default=None,
            help="Frames within which markers count as near conflicts (default: 15)",
        )
        conflict_group.add_argument(
            "--offset-frames",
            type=int,
            default=None,
            help="Frames to shift a conflicting marker with the offset strategy (default: 30)",
        )
        conflict_group.add_argument(
            "--no-near-detection",
            action="store_true",
            help="Only treat exact name/timecode matches as conflicts",
        )
        conflict_group.add_argument(
            "--case-sensitive",
            action="store_true",
            help="Compare marker names case-sensitively",
        )
        conflict_group.add_argument(
            "--recheck-offsets",
            action="store_true",
            help="Re-check offset markers and shift again while they still collide",
        )

        # Output
        output_group = parser.add_argument_group("Output")
        output_group.add_argument(
            "--existing",
            default=None,
            help="CSV of markers already in the timeline (Name, Timecode columns)",
        )
        output_group.add_argument(
            "--output",
            default=None,
            help="Write the created markers to this .csv or Avid .txt file",
        )
        output_group.add_argument(
            "--batch-size",
            type=int,
            default=None,
            help="Markers created per batch (default: 10)",
        )
        output_group.add_argument(
            "--dry-run",
            action="store_true",
            help="Resolve conflicts and report, but create nothing",
        )
        output_group.add_argument(
            "--diagnostics",
            metavar="REPORT_JSON",
            default=None,
            help="Write a parser diagnostic report to this JSON file",
        )

        # Logging
        log_group = parser.add_argument_group("Logging")
        log_group.add_argument(
            "--log-level",
            default=None,
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            help="Logging level (default: INFO)",
        )
        log_group.add_argument(
            "--log-file",
            type=str,
            default=None,
            help="Write log output to file",
        )
        log_group.add_argument(
            "--verbose",
            action="store_true",
            help="Enable verbose logging output",
        )

        return parser

    def _get_epilog(self) -> str:
        """Get epilog text for help message.

        Returns:
            Epilog text
        """
        return """
Export format:
  001 - Jane Doe - 06:56PM April 06, 2025
  00:00:10:00 - Fix the color
    John Smith - 07:02PM April 06, 2025
    Agreed

Examples:
  Basic usage:
    notemarker-import comments.txt --session-start 01:00:00:00 --output markers.txt

  Check against markers already in the timeline, offsetting collisions:
    notemarker-import comments.txt --existing timeline.csv --strategy offset

  Drop-frame session with a diagnostic report:
    notemarker-import comments.txt --frame-rate 29.97drop --diagnostics report.json
"""

    def parse_args(self, args: list[str] | None = None) -> tuple[ImportConfig, dict[str, Any]]:
        """Parse command-line arguments.

        Args:
            args: Arguments to parse (None = use sys.argv)

        Returns:
            Tuple of (config, extra_args) where extra_args contains
            export_file, existing, output, diagnostics and verbose
        """
        parsed = self.parser.parse_args(args)

        # Load base config from file if specified
        if parsed.config:
            logger.info(f"Loading configuration from {parsed.config}")
            config = ImportConfig.from_json(parsed.config)
        else:
            config = ImportConfig()

        # Override with command-line arguments
        self._apply_args_to_config(config, parsed)

        extra_args = {
            "export_file": parsed.export_file,
            "existing": parsed.existing,
            "output": parsed.output,
            "diagnostics": parsed.diagnostics,
            "verbose": parsed.verbose,
        }

        return config, extra_args

    def _apply_args_to_config(self, config: ImportConfig, args: argparse.Namespace) -> None:
        """Apply parsed arguments to configuration object.

        Args:
            config: Configuration to modify
            args: Parsed arguments
        """
        # Timing
        if args.frame_rate is not None:
            config.frame_rate = args.frame_rate
        if args.session_start is not None:
            config.session_start = args.session_start

        # Conflicts
        if args.strategy is not None:
            config.strategy = args.strategy
        if args.near_threshold is not None:
            config.conflicts.near_timecode_threshold_frames = args.near_threshold
        if args.offset_frames is not None:
            config.conflicts.default_offset_frames = args.offset_frames
        if args.no_near_detection:
            config.conflicts.enable_near_detection = False
        if args.case_sensitive:
            config.conflicts.case_sensitive_names = True
        if args.recheck_offsets:
            config.conflicts.recheck_offsets = True

        # Output
        if args.batch_size is not None:
            config.batch_size = args.batch_size
        if args.dry_run:
            config.dry_run = True
        if args.diagnostics:
            config.parser.diagnostic_mode = True

        # Logging
        if args.verbose:
            config.log_level = "DEBUG"
        elif args.log_level is not None:
            config.log_level = args.log_level
        if args.log_file is not None:
            config.log_file = args.log_file
