"""
Aegis Exclusion Policy

Decides which paths are in scan scope.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Union

from aegis.core.config import (
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_EXCLUDE_FILES,
    DEFAULT_EXTENSIONS,
    DEFAULT_TEST_MARKERS,
    AegisConfig,
)


@dataclass(frozen=True)
class ExclusionPolicy:
    """
    Pure path predicate.

    - ``exclude_dirs``: directory names (globs) pruned with their subtree.
    - ``test_markers``: substrings that exclude *files* by name. Directories
      carrying a marker are still traversed unless
      ``exclude_test_directories`` is set.
    - ``exclude_files``: exact file names to skip.
    - ``extensions``: name suffixes eligible for scanning.
    """

    exclude_dirs: tuple[str, ...] = tuple(DEFAULT_EXCLUDE_DIRS)
    exclude_files: tuple[str, ...] = tuple(DEFAULT_EXCLUDE_FILES)
    test_markers: tuple[str, ...] = tuple(DEFAULT_TEST_MARKERS)
    extensions: tuple[str, ...] = tuple(DEFAULT_EXTENSIONS)
    exclude_test_directories: bool = False

    @classmethod
    def from_config(cls, config: AegisConfig) -> "ExclusionPolicy":
        return cls(
            exclude_dirs=tuple(config.exclude_dirs),
            exclude_files=tuple(config.exclude_files),
            test_markers=tuple(config.test_markers),
            extensions=tuple(config.extensions),
            exclude_test_directories=config.exclude_test_directories,
        )

    def should_exclude(self, path: Union[str, Path], is_directory: bool) -> bool:
        name = Path(path).name

        if is_directory:
            if any(fnmatchcase(name, pattern) for pattern in self.exclude_dirs):
                return True
            return self.exclude_test_directories and self._has_test_marker(name)

        if name in self.exclude_files:
            return True
        return self._has_test_marker(name)

    def is_eligible(self, path: Union[str, Path]) -> bool:
        """True if the file name ends with an allowlisted extension."""
        name = Path(path).name
        return any(name.endswith(ext) for ext in self.extensions)

    def _has_test_marker(self, name: str) -> bool:
        return any(marker in name for marker in self.test_markers)
