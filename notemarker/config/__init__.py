"""Import configuration, command-line parsing and validation."""

from .models import ConflictConfig, ImportConfig, MarkerConfig, ParserConfig
from .parser import ConfigParser
from .validator import ConfigValidator

__all__ = ['ConflictConfig', 'ImportConfig', 'MarkerConfig', 'ParserConfig', 'ConfigParser', 'ConfigValidator']
