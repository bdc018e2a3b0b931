"""
Review Comment Marker Import

Converts review-platform comment exports into timeline markers, with
frame-accurate timecode arithmetic and conflict handling against the
markers already in the session.
"""

from .core.frame_rates import get_profile, supported_frame_rates
from .core.timecode_calc import TimecodeCalculator
from .data.comment_parser import CommentParser, parse_comments
from .markers.pipeline import ImportReport, MarkerImportPipeline

__all__ = [
    'get_profile',
    'supported_frame_rates',
    'TimecodeCalculator',
    'CommentParser',
    'parse_comments',
    'ImportReport',
    'MarkerImportPipeline',
]

__version__ = '1.0.0'
