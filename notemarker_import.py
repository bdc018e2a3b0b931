#!/usr/bin/env python3
"""
Review Comment Marker Import - CLI

Imports a review-platform comment export into a timeline as markers.
Each comment becomes a marker at session start + comment timecode,
checked against the markers already in the timeline.

EXPORT FORMAT:
    001 - Jane Doe - 06:56PM April 06, 2025
    00:00:10:00 - Fix the color in this shot
        John Smith - 07:02PM April 06, 2025
        Agreed, will fix

EXISTING MARKERS:
    CSV with Name and Timecode (or Start / Start Location) columns,
    or an Avid marker .txt file.

OUTPUT:
    .csv  - one row per marker
    .txt  - Avid marker text, importable from the Markers window

USAGE:
    python notemarker_import.py comments.txt --session-start 01:00:00:00 --output markers.txt

For full help:
    python notemarker_import.py --help
"""

import sys
from pathlib import Path

from notemarker.config.parser import ConfigParser
from notemarker.config.validator import ConfigValidator
from notemarker.core.models import ResolutionStrategy
from notemarker.data.loader import load_export_text
from notemarker.io.marker_files import FileMarkerService
from notemarker.markers.pipeline import MarkerImportPipeline
from notemarker.markers.prompts import ConsolePrompt
from notemarker.utils.exceptions import ConflictResolutionCancelled, NotemarkerException
from notemarker.utils.logger import get_logger, setup_logging


def print_summary(report, output_path) -> None:
    summary = report.summary()

    print()
    print("=" * 80)
    print(f"Comments parsed:    {summary['comments']}")
    print(f"Candidate markers:  {summary['candidates']}")
    print(f"Conflicts found:    {summary['conflicts']}")
    print(f"Offset markers:     {summary['offset']}")
    print(f"Skipped markers:    {summary['skipped']}")
    print(f"Markers created:    {summary['created']}")
    if summary["failed"]:
        print(f"Warning: {summary['failed']} markers failed to create")
    if output_path:
        print(f"Output file: {Path(output_path).absolute()}")
    print("=" * 80)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (None = use sys.argv)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    # Print banner
    print("=" * 80)
    print("Review Comment Marker Import".center(80))
    print("=" * 80)
    print()

    try:
        # Parse arguments
        parser = ConfigParser()
        config, extra_args = parser.parse_args(argv)

        # Setup logging
        setup_logging(config.log_level, config.log_file, verbose=extra_args["verbose"])
        logger = get_logger(__name__)
        logger.info("Starting comment marker import")

        # Validate configuration
        ConfigValidator.validate(config, extra_args["export_file"])

        # Load export
        text = load_export_text(extra_args["export_file"])

        service = FileMarkerService(extra_args["existing"], extra_args["output"], config.profile)
        prompt = ConsolePrompt() if config.resolution_strategy is ResolutionStrategy.ASK_EACH else None

        pipeline = MarkerImportPipeline(service, config, prompt)
        report = pipeline.run(text)

        # Diagnostic report
        if extra_args["diagnostics"] and report.diagnostics is not None:
            report_path = Path(extra_args["diagnostics"])
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(report.diagnostics.to_json(), encoding="utf-8")
            print(f"Diagnostic report: {report_path.absolute()}")

        if config.dry_run:
            print(f"\nDry run: {len(report.final_markers)} markers would be created")
            for marker in report.final_markers:
                print(f"  {marker.timecode}  {marker.name}")

        print_summary(report, None if config.dry_run else extra_args["output"])

        return 0 if report.success else 1

    except ConflictResolutionCancelled as e:
        print(f"\n{e}. No markers were created.", file=sys.stderr)
        return 1

    except NotemarkerException as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
