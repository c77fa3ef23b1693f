"""
Errors — Exception types raised across onetime

Nothing here is fatal to a lint run: the engine turns rewrite problems into
"report without a fix", and the CLI turns per-file problems into an error
line for that file only.
"""

from typing import Optional


class OneTimeError(Exception):
    """Base class for all onetime errors."""


class ParserUnavailableError(OneTimeError):
    """
    Raised when no tree-sitter parser can be created for a language.

    Usually means tree-sitter-language-pack is not installed, or the
    installed pack does not ship the requested grammar.
    """

    def __init__(self, language: str, reason: Optional[str] = None):
        self.language = language
        self.reason = reason
        message = f"No tree-sitter parser available for '{language}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnsupportedLanguageError(OneTimeError):
    """Raised when a file extension is not routed to any language config."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Unsupported file type: {path}")


class SourceTooLargeError(OneTimeError):
    """Raised when a source unit exceeds the language's max_file_size."""

    def __init__(self, path: str, size: int, limit: int):
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(f"{path} is {size} bytes (limit {limit})")


class UnsupportedRewrite(OneTimeError):
    """
    Raised by the fix synthesizer when a reported binding has no safe rewrite.

    The finding is still reported, just without an automatic fix.
    """

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot inline '{name}': {reason}")
