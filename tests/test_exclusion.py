"""
Tests for ExclusionPolicy and FileEnumerator
"""

import os
from pathlib import Path

from aegis.core.config import AegisConfig
from aegis.core.enumerator import FileEnumerator
from aegis.core.exclusion import ExclusionPolicy


class TestExclusionPolicy:
    """Tests for the path predicate."""

    def test_excluded_directories(self):
        policy = ExclusionPolicy()
        for name in ("node_modules", ".git", "dist", "build", "__pycache__"):
            assert policy.should_exclude(name, is_directory=True)
        assert not policy.should_exclude("src", is_directory=True)

    def test_directory_globs(self):
        policy = ExclusionPolicy()
        assert policy.should_exclude("aegis_scanner.egg-info", is_directory=True)

    def test_test_marker_excludes_files_only(self):
        """Legacy asymmetry: test-named directories are still traversed."""
        policy = ExclusionPolicy()
        assert policy.should_exclude("user.test.js", is_directory=False)
        assert policy.should_exclude("tests.py", is_directory=False)
        assert not policy.should_exclude("tests", is_directory=True)
        assert not policy.should_exclude("__tests__", is_directory=True)

    def test_test_directories_can_be_excluded(self):
        policy = ExclusionPolicy(exclude_test_directories=True)
        assert policy.should_exclude("__tests__", is_directory=True)

    def test_excluded_file_names(self):
        policy = ExclusionPolicy()
        assert policy.should_exclude(".env.example", is_directory=False)
        assert policy.should_exclude("aegis-security-report.json", is_directory=False)

    def test_directory_named_like_excluded_file_is_kept(self):
        policy = ExclusionPolicy()
        assert not policy.should_exclude(".env.example", is_directory=True)

    def test_accepts_paths(self):
        policy = ExclusionPolicy()
        assert policy.should_exclude(Path("a/b/node_modules"), is_directory=True)

    def test_eligible_extensions(self):
        policy = ExclusionPolicy()
        assert policy.is_eligible("app.ts")
        assert policy.is_eligible("server.pem")
        assert policy.is_eligible(".env")
        assert policy.is_eligible("settings.config")
        assert not policy.is_eligible("README.md")
        assert not policy.is_eligible("logo.png")

    def test_from_config(self):
        config = AegisConfig(exclude_dirs=["vendor"], extensions=[".php"])
        policy = ExclusionPolicy.from_config(config)
        assert policy.should_exclude("vendor", is_directory=True)
        assert not policy.should_exclude("node_modules", is_directory=True)
        assert policy.is_eligible("index.php")
        assert not policy.is_eligible("index.js")


class TestFileEnumerator:
    """Tests for the recursive walk."""

    def _touch(self, path: Path, content: str = "x = 1\n") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def test_empty_directory(self, temp_dir: Path):
        assert FileEnumerator().enumerate(temp_dir) == []

    def test_collects_eligible_files(self, temp_dir: Path):
        self._touch(temp_dir / "app.py")
        self._touch(temp_dir / "src" / "lib" / "util.js")
        self._touch(temp_dir / "README.md")

        files = FileEnumerator().enumerate(temp_dir)
        rel = sorted(p.relative_to(temp_dir).as_posix() for p in files)
        assert rel == ["app.py", "src/lib/util.js"]

    def test_prunes_excluded_directories(self, temp_dir: Path):
        self._touch(temp_dir / "node_modules" / "pkg" / "index.js")
        self._touch(temp_dir / ".git" / "config.json")
        self._touch(temp_dir / "src" / "node_modules" / "deep.js")
        self._touch(temp_dir / "src" / "main.js")

        files = FileEnumerator().enumerate(temp_dir)
        assert [p.name for p in files] == ["main.js"]

    def test_traverses_test_directories_but_skips_test_files(self, temp_dir: Path):
        self._touch(temp_dir / "tests" / "helpers.js")
        self._touch(temp_dir / "tests" / "login.test.js")

        files = FileEnumerator().enumerate(temp_dir)
        assert [p.name for p in files] == ["helpers.js"]

    def test_deterministic_order(self, temp_dir: Path):
        for name in ("b.js", "a.js", "c.js"):
            self._touch(temp_dir / name)
        enumerator = FileEnumerator()
        first = enumerator.enumerate(temp_dir)
        assert first == enumerator.enumerate(temp_dir)
        assert [p.name for p in first] == ["a.js", "b.js", "c.js"]

    def test_unreadable_subtree_is_skipped(self, temp_dir: Path, monkeypatch):
        self._touch(temp_dir / "locked" / "secret.js")
        self._touch(temp_dir / "open" / "app.js")
        locked = str(temp_dir / "locked")
        real_scandir = os.scandir

        def fake_scandir(path):
            if str(path) == locked:
                raise PermissionError(13, "Permission denied", locked)
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)

        files = FileEnumerator().enumerate(temp_dir)
        assert [p.name for p in files] == ["app.js"]
