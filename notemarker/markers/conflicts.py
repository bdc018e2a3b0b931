"""
Conflict Engine - marker collision detection and resolution

Candidate markers are compared with the markers already in the timeline
before anything is created, so an import never overwrites or duplicates
a marker without an explicit decision.

Classification, first match wins per (candidate, existing) pair:

    exact_match     same name and timecode         high
    exact_name      same name, other timecode      medium
    exact_timecode  same timecode, other name      medium
    near_timecode   0 < distance <= threshold      low

Resolution strategies: skip, replace, offset, ask_each, cancel.
Conflicts are data; nothing here raises for a detected conflict.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace

from notemarker.config.models import ConflictConfig
from notemarker.core.frame_rates import DEFAULT_PROFILE, get_profile
from notemarker.core.models import (
    Conflict,
    ConflictType,
    ExistingMarker,
    FrameRateProfile,
    Marker,
    OffsetInfo,
    ResolutionStrategy,
    Severity,
)
from notemarker.core.timecode_calc import TimecodeCalculator
from notemarker.markers.prompts import ResolutionDecision, ResolutionPrompt, ResolutionRequest
from notemarker.utils.exceptions import TimecodeError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

SKIP = ResolutionStrategy.SKIP
REPLACE = ResolutionStrategy.REPLACE
OFFSET = ResolutionStrategy.OFFSET
ASK_EACH = ResolutionStrategy.ASK_EACH
CANCEL = ResolutionStrategy.CANCEL


# ============================================================================
# Result types
# ============================================================================

@dataclass
class ConflictStatistics:
    """Running totals for one detector instance."""

    checked: int = 0
    conflicts: int = 0
    resolved: int = 0
    skipped: int = 0
    replaced: int = 0
    offset: int = 0
    cancelled: int = 0

    def reset(self) -> None:
        for name in self.to_dict():
            setattr(self, name, 0)

    def copy(self) -> ConflictStatistics:
        return ConflictStatistics(**self.to_dict())

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ConflictGroup:
    """All conflicts found for one candidate."""

    candidate: Marker
    candidate_index: int
    conflicts: tuple[Conflict, ...]

    @property
    def types(self) -> set[ConflictType]:
        return {conflict.type for conflict in self.conflicts}


@dataclass(frozen=True)
class ConflictSummary:
    exact_matches: int = 0
    name_conflicts: int = 0
    timecode_conflicts: int = 0
    near_timecode_conflicts: int = 0

    @property
    def total(self) -> int:
        return self.exact_matches + self.name_conflicts + self.timecode_conflicts + self.near_timecode_conflicts

    def to_dict(self) -> dict[str, int]:
        return {**asdict(self), "total": self.total}


@dataclass(frozen=True)
class DetectionResult:
    """Output of detect_conflicts().

    Attributes:
        candidates: Every candidate that was checked, in order
        existing: The existing markers they were checked against
        groups: One group per conflicting candidate, in candidate order
        conflicts_by_type: Every conflict, keyed by type
        summary: Conflict counts per type
    """

    candidates: tuple[Marker, ...]
    existing: tuple[ExistingMarker, ...]
    groups: tuple[ConflictGroup, ...]
    conflicts_by_type: dict[ConflictType, list[Conflict]]
    summary: ConflictSummary

    @property
    def has_conflicts(self) -> bool:
        return bool(self.groups)

    @property
    def total_conflicts(self) -> int:
        """Number of conflicting candidates."""
        return len(self.groups)


@dataclass(frozen=True)
class ResolutionOutcome:
    candidate_index: int
    action: ResolutionStrategy
    marker: Marker | None = None
    reason: str = ""


@dataclass
class ResolutionResult:
    """Output of resolve_conflicts().

    Attributes:
        strategy: Policy in force when resolution finished
        resolved: True unless resolution was cancelled
        cancelled: True when a cancel decision aborted resolution
        final_markers: Markers to create, in candidate order
        skipped_indices: Candidate indices left out
        replacements: Candidate index -> existing markers the collaborator
                      must overwrite or remove
        modified_markers: Candidate index -> offset marker
        outcomes: One entry per conflicting candidate handled
        statistics: Snapshot of the detector statistics
    """

    strategy: ResolutionStrategy
    resolved: bool = True
    cancelled: bool = False
    final_markers: list[Marker] = field(default_factory=list)
    skipped_indices: list[int] = field(default_factory=list)
    replacements: dict[int, tuple[ExistingMarker, ...]] = field(default_factory=dict)
    modified_markers: dict[int, Marker] = field(default_factory=dict)
    outcomes: list[ResolutionOutcome] = field(default_factory=list)
    statistics: ConflictStatistics = field(default_factory=ConflictStatistics)


# ============================================================================
# Detector
# ============================================================================

class MarkerConflictDetector:
    """Detects and resolves collisions between candidate and existing markers.

    Statistics are kept per instance; call reset() between imports or use
    a fresh detector.

    Example:
        >>> detector = MarkerConflictDetector("30", prompt=BatchPrompt("offset"))
        >>> detection = detector.detect_conflicts(candidates, existing)
        >>> result = detector.resolve_conflicts(detection)
        >>> result.final_markers
    """

    def __init__(
        self,
        profile: FrameRateProfile | str | None = None,
        config: ConflictConfig | None = None,
        prompt: ResolutionPrompt | None = None,
    ) -> None:
        self.profile = get_profile(profile) if profile is not None else DEFAULT_PROFILE
        self.calc = TimecodeCalculator(self.profile)
        self.config = config or ConflictConfig()
        self.prompt = prompt
        self.statistics = ConflictStatistics()

        logger.debug(f"MarkerConflictDetector initialized at {self.profile.key} with {self.config}")

    def reset(self) -> None:
        self.statistics.reset()
        logger.debug("MarkerConflictDetector reset")

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def normalize_name(self, name: str | None) -> str:
        if not name:
            return ""
        name = name.strip()
        return name if self.config.case_sensitive_names else name.casefold()

    def _distance(self, candidate: Marker, existing: ExistingMarker) -> int | None:
        try:
            return self.calc.frame_distance(candidate.timecode, existing.start_location)
        except TimecodeError as e:
            logger.error(f"Cannot measure distance from '{candidate.name}' to '{existing.name}': {e}")
            return None

    def compare_markers(self, candidate: Marker, existing: ExistingMarker, index: int) -> Conflict | None:
        """
        Classify one (candidate, existing) pair.

        Args:
            candidate: Candidate marker
            existing: Marker already in the timeline
            index: Candidate position, recorded on the conflict

        Returns:
            The strongest conflict, or None
        """
        candidate_name = self.normalize_name(candidate.name)
        existing_name = self.normalize_name(existing.name)
        same_name = candidate_name == existing_name
        same_timecode = candidate.timecode == existing.start_location

        if same_name and same_timecode:
            return Conflict(
                ConflictType.EXACT_MATCH,
                existing,
                index,
                Severity.HIGH,
                description=f'Exact match: same name "{candidate_name}" and timecode {candidate.timecode}',
                suggestions=(SKIP, REPLACE),
            )

        if same_name:
            return Conflict(
                ConflictType.EXACT_NAME,
                existing,
                index,
                Severity.MEDIUM,
                description=f'Name conflict: marker "{candidate_name}" already exists at {existing.start_location}',
                suggestions=(SKIP, REPLACE, OFFSET),
            )

        if same_timecode:
            return Conflict(
                ConflictType.EXACT_TIMECODE,
                existing,
                index,
                Severity.MEDIUM,
                description=f'Timecode conflict: timecode {candidate.timecode} already has marker "{existing_name}"',
                suggestions=(SKIP, REPLACE, OFFSET),
            )

        if self.config.enable_near_detection:
            distance = self._distance(candidate, existing)
            if distance is not None and 0 < distance <= self.config.near_timecode_threshold_frames:
                return Conflict(
                    ConflictType.NEAR_TIMECODE,
                    existing,
                    index,
                    Severity.LOW,
                    distance_frames=distance,
                    description=(
                        f'Near timecode: "{candidate_name}" at {candidate.timecode} is {distance} frames '
                        f'from "{existing_name}" at {existing.start_location}'
                    ),
                    suggestions=(SKIP, OFFSET),
                )

        return None

    def find_conflicts(self, candidate: Marker, existing: list[ExistingMarker], index: int) -> list[Conflict]:
        conflicts = []
        for marker in existing:
            conflict = self.compare_markers(candidate, marker, index)
            if conflict is not None:
                conflicts.append(conflict)
        return conflicts

    def detect_conflicts(self, candidates: list[Marker], existing: list[ExistingMarker]) -> DetectionResult:
        """
        Compare every candidate with every existing marker.

        Args:
            candidates: Candidate markers, in creation order
            existing: Markers already in the timeline

        Returns:
            DetectionResult; each conflicting candidate collects all of its conflicts
        """
        logger.info(f"Checking {len(candidates)} candidate markers against {len(existing)} existing markers")

        self.statistics.checked += len(candidates)
        groups = []
        by_type: dict[ConflictType, list[Conflict]] = {conflict_type: [] for conflict_type in ConflictType}

        for index, candidate in enumerate(candidates):
            conflicts = self.find_conflicts(candidate, existing, index)
            if not conflicts:
                continue

            groups.append(ConflictGroup(candidate, index, tuple(conflicts)))
            for conflict in conflicts:
                by_type[conflict.type].append(conflict)
            self.statistics.conflicts += 1

        summary = ConflictSummary(
            exact_matches=len(by_type[ConflictType.EXACT_MATCH]),
            name_conflicts=len(by_type[ConflictType.EXACT_NAME]),
            timecode_conflicts=len(by_type[ConflictType.EXACT_TIMECODE]),
            near_timecode_conflicts=len(by_type[ConflictType.NEAR_TIMECODE]),
        )

        logger.info(f"Conflict detection complete: {len(groups)} conflicting markers, {summary.to_dict()}")

        return DetectionResult(tuple(candidates), tuple(existing), tuple(groups), by_type, summary)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @staticmethod
    def group_summary(group: ConflictGroup) -> str:
        """Human-readable description of a candidate's conflicts."""
        lines = [
            f'Marker "{group.candidate.name}" at {group.candidate.timecode} '
            f"has {len(group.conflicts)} conflict(s):"
        ]
        for number, conflict in enumerate(group.conflicts, 1):
            lines.append(f"{number}. {conflict.description}")
        return "\n".join(lines) + "\n"

    def _ask(self, group: ConflictGroup) -> ResolutionDecision | None:
        if self.prompt is None:
            logger.warning("No resolution prompt available, defaulting to skip")
            return ResolutionDecision(SKIP)

        request = ResolutionRequest(group.candidate, group.candidate_index, group.conflicts, self.group_summary(group))
        try:
            return self.prompt(request)
        except Exception as e:
            logger.error(f"Resolution prompt failed for '{group.candidate.name}', skipping marker: {e}")
            return ResolutionDecision(SKIP)

    def calculate_offset_frames(self, conflicts: tuple[Conflict, ...] | list[Conflict]) -> int:
        """
        Smallest shift that clears every conflict of one candidate.

        Starts from default_offset_frames; a near conflict needs its
        distance plus the default.
        """
        default = self.config.default_offset_frames
        frames = default

        for conflict in conflicts:
            if conflict.type in (ConflictType.EXACT_TIMECODE, ConflictType.EXACT_MATCH):
                frames = max(frames, default)
            elif conflict.type is ConflictType.NEAR_TIMECODE and conflict.distance_frames is not None:
                frames = max(frames, conflict.distance_frames + default)

        return frames

    def offset_marker(self, marker: Marker, frames: int) -> Marker:
        """
        Shift a marker later by a number of frames.

        The name gets a " (+N.Ns)" suffix and offset_info records the
        original position.
        """
        moved = self.calc.offset(marker.timecode, frames)
        if moved.day_overflow:
            logger.warning(f"Offset marker '{marker.name}' passes midnight; wrapped to {moved.timecode}")

        seconds = self.calc.frames_to_seconds(frames)
        return replace(
            marker,
            timecode=moved.timecode,
            name=f"{marker.name} (+{seconds:.1f}s)",
            offset_info=OffsetInfo(marker.timecode, frames, seconds),
        )

    def _collides(self, marker: Marker, others: list[Marker]) -> bool:
        threshold = self.config.near_timecode_threshold_frames if self.config.enable_near_detection else 0
        for other in others:
            try:
                distance = self.calc.frame_distance(marker.timecode, other.timecode)
            except TimecodeError:
                continue
            if distance <= threshold:
                return True
        return False

    def _place_offset(self, group: ConflictGroup, detection: DetectionResult, accepted: dict[int, Marker]) -> Marker | None:
        """Offset a candidate; with recheck_offsets keep shifting while it still collides."""
        frames = self.calculate_offset_frames(group.conflicts)
        shifted = self.offset_marker(group.candidate, frames)

        if not self.config.recheck_offsets:
            return shifted

        others = [
            Marker(existing.name, existing.start_location) for existing in detection.existing
        ] + [marker for index, marker in accepted.items() if index != group.candidate_index]

        for attempt in range(1, self.config.max_offset_attempts + 1):
            if not self._collides(shifted, others):
                return shifted
            if attempt == self.config.max_offset_attempts:
                break
            frames += self.config.default_offset_frames
            shifted = self.offset_marker(group.candidate, frames)
            logger.debug(f"Re-offsetting '{group.candidate.name}' by {frames} frames (attempt {attempt + 1})")

        logger.warning(
            f"Marker '{group.candidate.name}' still collides after "
            f"{self.config.max_offset_attempts} offset attempts, skipping"
        )
        return None

    def resolve_conflicts(
        self,
        detection: DetectionResult,
        policy: ResolutionStrategy | str = ASK_EACH,
    ) -> ResolutionResult:
        """
        Decide what happens to every conflicting candidate.

        Args:
            detection: Result of detect_conflicts()
            policy: Fixed strategy, or ask_each to consult the prompt

        Returns:
            ResolutionResult. On cancel, final_markers is empty and
            cancelled is set.
        """
        policy = ResolutionStrategy(policy)

        if not detection.has_conflicts:
            logger.debug("No conflicts to resolve")
            return ResolutionResult(
                strategy=policy,
                final_markers=list(detection.candidates),
                statistics=self.statistics.copy(),
            )

        logger.info(f"Resolving {detection.total_conflicts} conflicting markers with policy '{policy.value}'")

        conflicting = {group.candidate_index for group in detection.groups}
        accepted = {
            index: candidate for index, candidate in enumerate(detection.candidates) if index not in conflicting
        }

        batch = policy
        result = ResolutionResult(strategy=policy)

        for group in detection.groups:
            strategy = batch

            if strategy is ASK_EACH:
                decision = self._ask(group)
                if decision is None:
                    strategy = CANCEL
                else:
                    strategy = ResolutionStrategy(decision.strategy)
                    if decision.apply_to_all:
                        batch = strategy
                        logger.info(f"Applying '{strategy.value}' to all remaining conflicts")
                if strategy is ASK_EACH:
                    logger.warning(f"Prompt answered ask_each for '{group.candidate.name}', skipping marker")
                    strategy = SKIP

            index = group.candidate_index

            if strategy is CANCEL:
                self.statistics.cancelled += 1
                result.outcomes.append(ResolutionOutcome(index, CANCEL, reason="Resolution cancelled"))
                logger.info("Conflict resolution cancelled")
                return ResolutionResult(
                    strategy=batch,
                    resolved=False,
                    cancelled=True,
                    outcomes=result.outcomes,
                    statistics=self.statistics.copy(),
                )

            if strategy is SKIP:
                result.skipped_indices.append(index)
                self.statistics.skipped += 1
                result.outcomes.append(ResolutionOutcome(index, SKIP, reason="Skipped conflicting marker"))

            elif strategy is REPLACE:
                accepted[index] = group.candidate
                result.replacements[index] = tuple(conflict.existing_marker for conflict in group.conflicts)
                self.statistics.replaced += 1
                result.outcomes.append(
                    ResolutionOutcome(index, REPLACE, group.candidate, "Replacing existing marker(s)")
                )

            elif strategy is OFFSET:
                shifted = self._place_offset(group, detection, accepted)
                if shifted is None:
                    result.skipped_indices.append(index)
                    self.statistics.skipped += 1
                    result.outcomes.append(
                        ResolutionOutcome(index, SKIP, reason="No free position within offset attempts")
                    )
                else:
                    accepted[index] = shifted
                    result.modified_markers[index] = shifted
                    self.statistics.offset += 1
                    result.outcomes.append(
                        ResolutionOutcome(index, OFFSET, shifted, f"Marker offset to {shifted.timecode}")
                    )

            self.statistics.resolved += 1

        skipped = set(result.skipped_indices)
        result.final_markers = [
            result.modified_markers.get(index, candidate)
            for index, candidate in enumerate(detection.candidates)
            if index not in skipped
        ]
        result.strategy = batch
        result.statistics = self.statistics.copy()

        logger.info(
            f"Conflict resolution complete: {len(result.final_markers)} markers to create, "
            f"{len(skipped)} skipped, {len(result.modified_markers)} offset, {len(result.replacements)} replacing"
        )
        return result
