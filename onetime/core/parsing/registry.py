"""
Parser Registry — Routes files to language-specific configurations.

Maps file extensions to LanguageConfig instances, so adding a dialect
never touches the engine.

Usage:
    registry = default_registry()
    config = registry.get_config(Path("src/app.tsx"))   # TSX_CONFIG
    config = registry.require(Path("notes.txt"))        # UnsupportedLanguageError
"""

from pathlib import Path
from typing import Dict, List, Optional, Set

from ...errors import UnsupportedLanguageError
from .config import LanguageConfig


class ParserRegistry:
    """
    Registry of language configurations.

    Lookups work by extension, by display name ("TypeScript") or by
    grammar name ("typescript").
    """

    def __init__(self):
        self._configs: Dict[str, LanguageConfig] = {}  # name -> config
        self._extension_map: Dict[str, str] = {}  # ext -> config name

    def register(self, config: LanguageConfig) -> None:
        """
        Register a language configuration.

        Raises:
            ValueError: If an extension is already routed to a different config
        """
        for ext in config.extensions:
            owner = self._extension_map.get(ext.lower())
            if owner is not None and owner != config.name:
                raise ValueError(
                    f"Extension {ext} already registered to {owner}, "
                    f"cannot register to {config.name}"
                )

        self._configs[config.name] = config
        for ext in config.extensions:
            self._extension_map[ext.lower()] = config.name

    def unregister(self, name: str) -> bool:
        """Unregister a configuration by name. Returns True if it was registered."""
        config = self._configs.pop(name, None)
        if config is None:
            return False
        for ext in config.extensions:
            if self._extension_map.get(ext.lower()) == name:
                del self._extension_map[ext.lower()]
        return True

    def get_config(self, file_path: Path) -> Optional[LanguageConfig]:
        """Language config for a file, based on its extension."""
        config_name = self._extension_map.get(Path(file_path).suffix.lower())
        return self._configs.get(config_name) if config_name else None

    def require(self, file_path: Path) -> LanguageConfig:
        """
        Like get_config(), but unknown extensions are an error.

        Raises:
            UnsupportedLanguageError: If no config handles the extension
        """
        config = self.get_config(file_path)
        if config is None:
            raise UnsupportedLanguageError(str(file_path))
        return config

    def get_config_by_name(self, name: str) -> Optional[LanguageConfig]:
        """Config by display name or grammar name (case-insensitive)."""
        if name in self._configs:
            return self._configs[name]
        lowered = name.lower()
        for config in self._configs.values():
            if config.name.lower() == lowered or config.tree_sitter_name == lowered:
                return config
        return None

    def supported_extensions(self) -> Set[str]:
        return set(self._extension_map.keys())

    def glob_patterns(self) -> List[str]:
        """Glob patterns for every supported file type (e.g., "**/*.ts"), sorted."""
        return sorted(f"**/*{ext}" for ext in self.supported_extensions())

    def is_supported(self, file_path: Path) -> bool:
        return Path(file_path).suffix.lower() in self._extension_map

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, name: str) -> bool:
        return name in self._configs


def default_registry() -> ParserRegistry:
    """Registry with JavaScript, TypeScript and TSX."""
    from .languages import JAVASCRIPT_CONFIG, TSX_CONFIG, TYPESCRIPT_CONFIG

    registry = ParserRegistry()
    registry.register(JAVASCRIPT_CONFIG)
    registry.register(TYPESCRIPT_CONFIG)
    registry.register(TSX_CONFIG)
    return registry
