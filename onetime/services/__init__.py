"""
Services — Work around the engine that touches the outside world

- SourceDiscovery: Expands CLI paths to source files (git-aware)
"""

from .discovery import SourceDiscovery

__all__ = ["SourceDiscovery"]
