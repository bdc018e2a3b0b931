"""Marker file I/O."""

from .marker_files import FileMarkerService, read_existing_markers, write_markers

__all__ = ['FileMarkerService', 'read_existing_markers', 'write_markers']
