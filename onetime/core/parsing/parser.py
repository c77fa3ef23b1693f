"""
SourceParser — Lazily created tree-sitter parsers

Wraps tree-sitter-language-pack. Parsers are created on first use and
cached per SourceParser instance; nothing is shared between instances.

Usage:
    from onetime.core.parsing import SourceParser
    from onetime.core.parsing.languages import JAVASCRIPT_CONFIG

    tree = SourceParser().parse(b"const x = 1;", JAVASCRIPT_CONFIG)
"""

import logging
from typing import Dict, TYPE_CHECKING

from ...errors import ParserUnavailableError, SourceTooLargeError
from .config import LanguageConfig

if TYPE_CHECKING:
    from tree_sitter import Parser, Tree

logger = logging.getLogger(__name__)


class SourceParser:
    """Parses source bytes with the grammar a LanguageConfig names."""

    def __init__(self):
        self._parsers: Dict[str, 'Parser'] = {}  # grammar name -> parser

    def get_parser(self, tree_sitter_name: str) -> 'Parser':
        """
        Get (and cache) the parser for a grammar.

        Raises:
            ParserUnavailableError: If the language pack or the grammar is missing
        """
        parser = self._parsers.get(tree_sitter_name)
        if parser is not None:
            return parser

        try:
            from tree_sitter_language_pack import get_parser
        except ImportError as e:
            raise ParserUnavailableError(
                tree_sitter_name, "tree-sitter-language-pack is not installed") from e

        try:
            parser = get_parser(tree_sitter_name)
        except Exception as e:
            raise ParserUnavailableError(tree_sitter_name, str(e)) from e

        logger.debug("Loaded tree-sitter grammar '%s'", tree_sitter_name)
        self._parsers[tree_sitter_name] = parser
        return parser

    def parse(self, source: bytes, config: LanguageConfig, path: str = "<source>") -> 'Tree':
        """
        Parse one source unit.

        Args:
            source: UTF-8 encoded source text
            config: Language to parse as
            path: Name used in error messages

        Raises:
            SourceTooLargeError: If the source exceeds config.max_file_size
            ParserUnavailableError: If no parser is available
        """
        if len(source) > config.max_file_size:
            raise SourceTooLargeError(path, len(source), config.max_file_size)
        return self.get_parser(config.tree_sitter_name).parse(source)
