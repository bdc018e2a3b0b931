"""Comment export loading and parsing."""

from .comment_parser import CommentParser, ParseResult, parse_comments
from .diagnostics import DiagnosticReport
from .loader import load_export_text

__all__ = ['CommentParser', 'ParseResult', 'parse_comments', 'DiagnosticReport', 'load_export_text']
