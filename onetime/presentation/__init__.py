"""
Presentation — Display helpers for the CLI

- Symbols: Visual vocabulary (unicode/ascii), safe printing
"""

from .symbols import (
    ASCII, UNICODE, SymbolSet, get_symbols,
    safe_print, sanitize_control_chars, supports_unicode,
)

__all__ = [
    "SymbolSet", "UNICODE", "ASCII", "get_symbols", "supports_unicode",
    "safe_print", "sanitize_control_chars",
]
