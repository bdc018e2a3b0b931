"""Marker building, conflict handling and the import pipeline."""

from .builder import MarkerBuilder
from .conflicts import MarkerConflictDetector
from .pipeline import ImportReport, MarkerImportPipeline
from .prompts import BatchPrompt, ConsolePrompt

__all__ = [
    'MarkerBuilder',
    'MarkerConflictDetector',
    'ImportReport',
    'MarkerImportPipeline',
    'BatchPrompt',
    'ConsolePrompt',
]
