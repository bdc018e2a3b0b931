"""Timecode arithmetic, frame rate profiles and shared data types."""

from .frame_rates import DEFAULT_PROFILE, FRAME_RATES, get_profile, supported_frame_rates
from .models import CommentRecord, ExistingMarker, FrameRateProfile, Marker, TimecodeValue
from .timecode_calc import TimecodeCalculator

__all__ = [
    'DEFAULT_PROFILE',
    'FRAME_RATES',
    'get_profile',
    'supported_frame_rates',
    'CommentRecord',
    'ExistingMarker',
    'FrameRateProfile',
    'Marker',
    'TimecodeValue',
    'TimecodeCalculator',
]
