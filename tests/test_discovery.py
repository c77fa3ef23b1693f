"""
Tests for SourceDiscovery — path expansion, walking and exclusions

Directory walks use the glob fallback (respect_gitignore=False) unless a
test sets up its own git repository.
"""

import logging
import shutil
import subprocess
from pathlib import Path

import pytest

from onetime.core.parsing import ExclusionConfig, default_registry
from onetime.services.discovery import SourceDiscovery


def make_tree(root: Path, files):
    for rel in files:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("const a = 1;\n", encoding="utf-8")


def relative(paths, root):
    return [p.relative_to(root).as_posix() for p in paths]


@pytest.fixture
def discovery():
    return SourceDiscovery(default_registry(), respect_gitignore=False)


class TestWalk:
    """Directory walks."""

    def test_supported_files_only(self, tmp_path, discovery):
        """Only registered extensions are picked up, sorted."""
        make_tree(tmp_path, ["src/b.ts", "src/a.js", "src/c.tsx", "README.md", "setup.py"])

        assert relative(discovery.discover([tmp_path]), tmp_path) == [
            "src/a.js", "src/b.ts", "src/c.tsx",
        ]

    def test_default_exclusions(self, tmp_path, discovery):
        """Vendored, built and declaration files are skipped."""
        make_tree(tmp_path, [
            "app.js",
            "node_modules/lib/index.js",
            "dist/app.js",
            "types/api.d.ts",
            "vendor/jquery.js",
            "lib/app.min.js",
        ])

        assert relative(discovery.discover([tmp_path]), tmp_path) == ["app.js"]

    def test_extra_exclusions(self, tmp_path):
        """files.exclude style patterns apply to every language."""
        make_tree(tmp_path, ["src/a.js", "legacy/b.ts", "src/legacy/c.js"])
        discovery = SourceDiscovery(default_registry(), ExclusionConfig(extra=["**/legacy/*"]),
                                    respect_gitignore=False)

        assert relative(discovery.discover([tmp_path]), tmp_path) == ["src/a.js"]

    def test_test_files_optional(self, tmp_path):
        """Test files are walked unless include_tests is off."""
        make_tree(tmp_path, ["a.js", "a.test.js", "__tests__/b.ts"])
        with_tests = SourceDiscovery(default_registry(), respect_gitignore=False)
        without = SourceDiscovery(default_registry(), ExclusionConfig(include_tests=False),
                                  respect_gitignore=False)

        assert len(with_tests.discover([tmp_path])) == 3
        assert relative(without.discover([tmp_path]), tmp_path) == ["a.js"]


class TestExplicitPaths:
    """Files named on the command line."""

    def test_explicit_file_never_excluded(self, tmp_path, discovery):
        """Exclusions only apply to walks."""
        make_tree(tmp_path, ["dist/app.js"])

        assert discovery.discover([tmp_path / "dist" / "app.js"]) == [tmp_path / "dist" / "app.js"]

    def test_unsupported_file_skipped(self, tmp_path, discovery, caplog):
        """An explicit file with an unknown extension is skipped with a note."""
        make_tree(tmp_path, ["notes.txt"])

        with caplog.at_level(logging.INFO, logger="onetime.services.discovery"):
            assert discovery.discover([tmp_path / "notes.txt"]) == []
        assert "unsupported file type" in caplog.text

    def test_missing_path(self, tmp_path, discovery):
        with pytest.raises(FileNotFoundError, match="missing.js"):
            discovery.discover([tmp_path / "missing.js"])

    def test_duplicates_merged(self, tmp_path, discovery):
        """A file reached twice is listed once."""
        make_tree(tmp_path, ["src/a.js"])

        found = discovery.discover([tmp_path, tmp_path / "src", tmp_path / "src" / "a.js"])
        assert relative(found, tmp_path) == ["src/a.js"]


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestGitWalk:
    """Walking a git work tree."""

    def test_gitignored_files_skipped(self, tmp_path):
        """Ignored files are left out; untracked ones are kept."""
        subprocess.run(["git", "init", "-q"], cwd=tmp_path, check=True)
        (tmp_path / ".gitignore").write_text("generated/\n", encoding="utf-8")
        make_tree(tmp_path, ["src/a.js", "generated/b.js"])

        discovery = SourceDiscovery(default_registry())

        assert relative(discovery.discover([tmp_path]), tmp_path) == ["src/a.js"]

    def test_outside_work_tree_falls_back(self, tmp_path, monkeypatch):
        """Without a repository the glob walk is used."""
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
        make_tree(tmp_path, ["src/a.js"])

        discovery = SourceDiscovery(default_registry())

        assert relative(discovery.discover([tmp_path]), tmp_path) == ["src/a.js"]
