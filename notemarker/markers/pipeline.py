"""
Import Pipeline - comment export to created timeline markers

Runs once per import:

    validate session -> parse -> build candidates -> list existing markers
    -> detect conflicts -> resolve -> create in batches

The timeline application is reached only through a MarkerService. The
pipeline never retries a failed call; a failed batch is logged and
counted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from notemarker.config.models import ImportConfig
from notemarker.config.validator import ConfigValidator
from notemarker.core.models import CommentRecord, ExistingMarker, Marker
from notemarker.core.timecode_calc import TimecodeCalculator
from notemarker.data.comment_parser import CommentParser
from notemarker.data.diagnostics import DiagnosticReport
from notemarker.markers.builder import MarkerBuilder
from notemarker.markers.conflicts import DetectionResult, MarkerConflictDetector, ResolutionResult
from notemarker.markers.prompts import ResolutionPrompt
from notemarker.utils.exceptions import ConflictResolutionCancelled, MarkerServiceError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[str, float], None]


class MarkerService(Protocol):
    """Access to the timeline application's markers.

    Implementations raise MarkerServiceError when a call fails.
    """

    def list_markers(self) -> list[ExistingMarker]: ...

    def create_markers(self, markers: list[Marker]) -> int: ...


@dataclass
class ImportReport:
    """Everything one import produced.

    Attributes:
        comments: Parsed comments
        candidates: Candidate markers built from them
        final_markers: Markers left after conflict resolution
        detection: Conflict detection result
        resolution: Conflict resolution result
        created: Markers the service reported as created
        failed: Markers in batches the service rejected
        skipped: Candidates left out by conflict resolution
        diagnostics: Parser diagnostic report, when requested
    """

    comments: list[CommentRecord] = field(default_factory=list)
    candidates: list[Marker] = field(default_factory=list)
    final_markers: list[Marker] = field(default_factory=list)
    detection: DetectionResult | None = None
    resolution: ResolutionResult | None = None
    created: int = 0
    failed: int = 0
    skipped: int = 0
    diagnostics: DiagnosticReport | None = None

    @property
    def success(self) -> bool:
        return self.failed == 0

    def summary(self) -> dict[str, Any]:
        return {
            "comments": len(self.comments),
            "candidates": len(self.candidates),
            "conflicts": self.detection.total_conflicts if self.detection else 0,
            "final_markers": len(self.final_markers),
            "created": self.created,
            "failed": self.failed,
            "skipped": self.skipped,
            "offset": len(self.resolution.modified_markers) if self.resolution else 0,
            "replacing": len(self.resolution.replacements) if self.resolution else 0,
        }


class MarkerImportPipeline:
    """Imports a comment export into the timeline as markers.

    Args:
        service: MarkerService for the target timeline
        config: Import configuration
        prompt: Resolution prompt used by the ask_each strategy
        on_progress: Optional callback(stage, fraction) with fraction in 0..1

    Example:
        >>> pipeline = MarkerImportPipeline(service, ImportConfig(session_start="01:00:00:00", strategy="offset"))
        >>> report = pipeline.run(export_text)
        >>> report.created
        12
    """

    def __init__(
        self,
        service: MarkerService,
        config: ImportConfig | None = None,
        prompt: ResolutionPrompt | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.service = service
        self.config = config or ImportConfig()
        self.prompt = prompt
        self.on_progress = on_progress

    def _progress(self, stage: str, fraction: float) -> None:
        logger.debug(f"Import progress: {stage} ({fraction:.0%})")
        if self.on_progress is not None:
            self.on_progress(stage, min(max(fraction, 0.0), 1.0))

    def run(self, text: str) -> ImportReport:
        """
        Import a comment export.

        Args:
            text: Raw export text

        Returns:
            ImportReport

        Raises:
            ConfigurationError: Unsupported frame rate or bad session start
            ConflictResolutionCancelled: Resolution was cancelled
            MarkerServiceError: Existing markers could not be listed
        """
        self._progress("validating", 0.0)
        ConfigValidator.validate(self.config)

        self._progress("parsing", 0.1)
        parser = CommentParser(
            self.config.profile,
            diagnostic_mode=self.config.parser.diagnostic_mode,
            max_comments=self.config.parser.max_comments,
            min_length=self.config.parser.min_input_length,
        )
        parsed = parser.parse_with_report(text)

        return self._import(parsed.comments, parsed.report)

    def run_comments(self, comments: list[CommentRecord]) -> ImportReport:
        """Import comments that were already parsed."""
        self._progress("validating", 0.0)
        ConfigValidator.validate(self.config)
        return self._import(list(comments), None)

    def _import(self, comments: list[CommentRecord], diagnostics: DiagnosticReport | None) -> ImportReport:
        config = self.config
        profile = config.profile
        report = ImportReport(comments=comments, diagnostics=diagnostics)

        if not comments:
            logger.warning("No comments found - nothing to import")
            self._progress("complete", 1.0)
            return report

        self._progress("building", 0.2)
        session_start = TimecodeCalculator(profile).parse_lenient(config.session_start)
        builder = MarkerBuilder(profile, session_start, config.markers)
        report.candidates = builder.build(comments)

        self._progress("listing", 0.25)
        try:
            existing = list(self.service.list_markers())
        except MarkerServiceError as e:
            logger.error(f"Could not list existing markers: {e}")
            raise
        logger.info(f"Found {len(existing)} existing markers")

        self._progress("detecting", 0.3)
        detector = MarkerConflictDetector(profile, config.conflicts, self.prompt)
        report.detection = detector.detect_conflicts(report.candidates, existing)

        self._progress("resolving", 0.4)
        report.resolution = detector.resolve_conflicts(report.detection, config.resolution_strategy)
        if report.resolution.cancelled:
            raise ConflictResolutionCancelled(resolution=report.resolution)

        report.final_markers = report.resolution.final_markers
        report.skipped = len(report.resolution.skipped_indices)

        if config.dry_run:
            logger.info(f"Dry run: {len(report.final_markers)} markers would be created")
        else:
            self._create(report)

        self._progress("complete", 1.0)
        logger.info(f"Import complete: {report.summary()}")
        return report

    def _create(self, report: ImportReport) -> None:
        markers = report.final_markers
        batch_size = self.config.batch_size
        total = len(markers)

        for start in range(0, total, batch_size):
            batch = markers[start : start + batch_size]
            number = start // batch_size + 1
            logger.debug(f"Creating batch {number} ({len(batch)} markers)")

            try:
                report.created += self.service.create_markers(batch)
            except MarkerServiceError as e:
                logger.error(f"Batch {number} failed: {e}")
                report.failed += len(batch)

            done = min(start + batch_size, total)
            self._progress("creating", 0.4 + 0.6 * done / total)
