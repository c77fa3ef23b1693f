"""
SourceDiscovery — Expands command-line paths into the files to check

Explicit files are taken as given (when their extension is supported).
Directories are walked with the registry's glob patterns; inside a git work
tree the walk uses `git ls-files` so .gitignore is respected, otherwise it
falls back to a plain glob. Walked files are then filtered by the exclusion
patterns of their language.

Usage:
    discovery = SourceDiscovery(default_registry(), ExclusionConfig(extra=["**/legacy/*"]))
    for path in discovery.discover(["src", "scripts/build.js"]):
        ...
"""

import logging
import subprocess
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from ..core.parsing import ExclusionConfig, ParserRegistry, matches_any

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30  # seconds


class SourceDiscovery:
    """
    Resolve paths to a sorted, de-duplicated list of source files.

    Args:
        registry: Supported languages (decides which extensions count)
        exclusions: Exclude patterns applied to walked directories
        respect_gitignore: Use `git ls-files` when walking a git work tree
    """

    def __init__(self, registry: ParserRegistry, exclusions: Optional[ExclusionConfig] = None,
                 respect_gitignore: bool = True):
        self.registry = registry
        self.exclusions = exclusions or ExclusionConfig()
        self.respect_gitignore = respect_gitignore

    def discover(self, paths: Iterable[Union[str, Path]]) -> List[Path]:
        """
        Expand paths into files.

        Raises:
            FileNotFoundError: If a path does not exist
        """
        found: Set[Path] = set()
        for raw in paths:
            path = Path(raw)
            if not path.exists():
                raise FileNotFoundError(f"No such file or directory: {path}")
            if path.is_dir():
                found.update(self.walk(path))
            elif self.registry.is_supported(path):
                found.add(path)
            else:
                logger.info("Skipping %s: unsupported file type", path)
        return sorted(found)

    def walk(self, directory: Path) -> List[Path]:
        """All supported, non-excluded files under a directory."""
        candidates = None
        if self.respect_gitignore:
            candidates = self._tracked_files(directory)
        if candidates is None:
            candidates = self._globbed_files(directory)

        files = []
        for rel_path in candidates:
            if not self.registry.is_supported(rel_path):
                continue
            if self.is_excluded(rel_path):
                logger.debug("Excluded %s", rel_path)
                continue
            files.append(directory / rel_path)
        return files

    def is_excluded(self, rel_path: Path) -> bool:
        """Check a path (relative to the walked directory) against its language's patterns."""
        config = self.registry.get_config(rel_path)
        if config is None:
            return True
        posix = rel_path.as_posix()
        if matches_any(posix, self.exclusions.get_patterns(config.exclusion_key)):
            return True
        return config.should_exclude(posix)

    # =========================================================================
    # Candidate Sources
    # =========================================================================

    def _globbed_files(self, directory: Path) -> List[Path]:
        files = set()
        for pattern in self.registry.glob_patterns():
            for file_path in directory.glob(pattern):
                if file_path.is_file():
                    files.add(file_path.relative_to(directory))
        return sorted(files)

    def _tracked_files(self, directory: Path) -> Optional[List[Path]]:
        """
        Files git knows about under a directory, respecting .gitignore.

        Uses `git ls-files` for tracked files (--cached) and untracked but
        not ignored ones (--others --exclude-standard).

        Returns:
            Paths relative to directory, or None if git is unavailable or the
            directory is not in a work tree (use the glob fallback)
        """
        try:
            result = subprocess.run(
                ['git', 'ls-files', '--cached', '--others', '--exclude-standard'],
                cwd=directory,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("git ls-files unavailable in %s: %s", directory, e)
            return None

        if result.returncode != 0:
            return None

        patterns = [f"*{ext}" for ext in self.registry.supported_extensions()]
        files = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line or not any(fnmatch(line.lower(), p) for p in patterns):
                continue
            # Deleted but still tracked files show up in --cached
            if (directory / line).is_file():
                files.append(Path(line))
        return files
