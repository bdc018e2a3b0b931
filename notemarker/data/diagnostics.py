"""
Diagnostic trace of a comment export parse.

A DiagnosticReport is filled in by the comment parser when diagnostic
mode is on. It is an inert record for debugging: per-line
classifications, state transitions, anomalies, author normalization,
the timecode format histogram and the duplicate analysis. It never
influences parsing results.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from notemarker.core.models import CommentRecord
from notemarker.utils.constants import DIAGNOSTIC_PREVIEW_LENGTH, TAB_WIDTH

TIMECODE_FORMATS = ("standard", "bracketed_range", "bracketed_single", "line_start", "anywhere", "invalid")

# Classification -> statistics counter
CLASSIFICATION_COUNTERS = {
    "empty": "empty_lines",
    "author_header": "author_header_lines",
    "comment_start": "comment_lines",
    "comment_extracted": "comment_lines",
    "reply_author": "reply_lines",
    "reply_text": "reply_lines",
    "continuation": "continuation_lines",
    "skipped": "skipped_lines",
    "unrecognized": "unrecognized_lines",
}


def indent_level(raw_line: str) -> int:
    """Width of a line's leading whitespace, tabs counted as 4 spaces."""
    leading = raw_line[: len(raw_line) - len(raw_line.lstrip(" \t"))]
    return len(leading.replace("\t", " " * TAB_WIDTH))


def preview(text: str, length: int = DIAGNOSTIC_PREVIEW_LENGTH) -> str:
    text = text.strip()
    return text if len(text) <= length else text[:length] + "..."


@dataclass
class LineClassification:
    line_number: int
    classification: str
    state: str
    indent_level: int
    text: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class StateTransition:
    from_state: str
    to_state: str
    reason: str
    line_number: int


@dataclass
class Anomaly:
    kind: str
    description: str
    line_number: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthorEntry:
    normalized: str
    occurrences: int = 0
    contexts: list[str] = field(default_factory=list)


@dataclass
class DiagnosticReport:
    """Structured trace of one parse run."""

    input_size: int = 0
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    line_classifications: list[LineClassification] = field(default_factory=list)
    state_transitions: list[StateTransition] = field(default_factory=list)
    anomalies: list[Anomaly] = field(default_factory=list)
    authors: dict[str, AuthorEntry] = field(default_factory=dict)
    timecode_formats: dict[str, int] = field(default_factory=lambda: dict.fromkeys(TIMECODE_FORMATS, 0))
    duplicate_analysis: list[dict[str, Any]] = field(default_factory=list)
    statistics: dict[str, int] = field(
        default_factory=lambda: {
            "total_lines": 0,
            **dict.fromkeys(sorted(set(CLASSIFICATION_COUNTERS.values())), 0),
            "state_transitions": 0,
            "comments_emitted": 0,
            "replies_emitted": 0,
            "comments_discarded": 0,
        }
    )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_line(self, line_number: int, raw_line: str, classification: str, state: str, **details) -> None:
        self.line_classifications.append(
            LineClassification(
                line_number=line_number,
                classification=classification,
                state=str(state),
                indent_level=indent_level(raw_line),
                text=preview(raw_line),
                details=details,
            )
        )
        self.statistics["total_lines"] += 1
        counter = CLASSIFICATION_COUNTERS.get(classification)
        if counter:
            self.statistics[counter] += 1

    def record_transition(self, from_state: str, to_state: str, reason: str, line_number: int) -> None:
        self.state_transitions.append(StateTransition(str(from_state), str(to_state), reason, line_number))
        self.statistics["state_transitions"] += 1

    def record_anomaly(self, kind: str, description: str, line_number: int | None = None, **data) -> None:
        self.anomalies.append(Anomaly(kind, description, line_number, data))

    def record_author(self, original: str, normalized: str, context: str) -> None:
        entry = self.authors.get(original)
        if entry is None:
            entry = self.authors[original] = AuthorEntry(normalized)
        elif entry.normalized != normalized:
            self.record_anomaly(
                "author_normalization_inconsistency",
                f"Author '{original}' mapped to different normalized forms",
                original=original,
                existing=entry.normalized,
                new=normalized,
            )
        entry.occurrences += 1
        entry.contexts.append(context)

    def record_timecode_format(self, source: str) -> None:
        self.timecode_formats[source] = self.timecode_formats.get(source, 0) + 1

    def record_emitted(self, comment: CommentRecord) -> None:
        key = "replies_emitted" if comment.is_reply else "comments_emitted"
        self.statistics[key] += 1

    def record_discarded(self, reason: str, line_number: int | None, **data) -> None:
        self.statistics["comments_discarded"] += 1
        self.record_anomaly("discarded_comment", reason, line_number, **data)

    def record_duplicate(
        self,
        kind: str,
        duplicate: CommentRecord,
        original: CommentRecord,
        duplicate_index: int,
        original_index: int,
    ) -> None:
        def describe(comment: CommentRecord) -> dict[str, Any]:
            return {
                "timecode": str(comment.timecode),
                "text": comment.text[:100],
                "author": comment.author,
                "is_reply": comment.is_reply,
            }

        self.duplicate_analysis.append(
            {
                "type": kind,
                "duplicate": describe(duplicate),
                "original": describe(original),
                "indices": {"duplicate": duplicate_index, "original": original_index},
            }
        )

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def classification_summary(self) -> dict[str, int]:
        summary: dict[str, int] = {}
        for entry in self.line_classifications:
            summary[entry.classification] = summary.get(entry.classification, 0) + 1
        return summary

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to a JSON-serializable dictionary."""
        return {
            "metadata": {"generated_at": self.generated_at, "input_size": self.input_size},
            "statistics": dict(self.statistics),
            "classification_summary": self.classification_summary(),
            "timecode_formats": dict(self.timecode_formats),
            "line_classifications": [asdict(entry) for entry in self.line_classifications],
            "state_transitions": [asdict(entry) for entry in self.state_transitions],
            "anomalies": [asdict(entry) for entry in self.anomalies],
            "authors": {name: asdict(entry) for name, entry in self.authors.items()},
            "duplicate_analysis": list(self.duplicate_analysis),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def log_summary(self, logger: logging.Logger) -> None:
        """Log the headline numbers of the report at info level."""
        stats = self.statistics
        logger.info(
            f"Diagnostic report: {stats['total_lines']} lines, "
            f"{stats['comment_lines']} comment, {stats['reply_lines']} reply, "
            f"{stats['continuation_lines']} continuation, "
            f"{stats['state_transitions']} state transitions, "
            f"{len(self.anomalies)} anomalies, {len(self.authors)} authors"
        )
        logger.info(f"Line classifications: {self.classification_summary()}")
        logger.info(f"Timecode formats: {self.timecode_formats}")

        for name, entry in self.authors.items():
            logger.debug(f"Author '{name}' -> '{entry.normalized}' ({entry.occurrences} occurrences)")

        if self.duplicate_analysis:
            logger.info(f"Duplicates removed: {len(self.duplicate_analysis)}")
