"""
Aegis File Enumerator

Walks a project tree and returns every file in scan scope.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from aegis.core.exclusion import ExclusionPolicy

logger = logging.getLogger(__name__)


class FileEnumerator:
    """
    Recursive walk applying an ExclusionPolicy.

    Entries are visited in sorted name order so the same tree always
    yields the same list. Symlinked directories are not followed. A
    directory that cannot be listed is logged and skipped; its siblings
    are still walked.
    """

    def __init__(self, policy: Optional[ExclusionPolicy] = None) -> None:
        self.policy = policy or ExclusionPolicy()

    def enumerate(self, root_path: Path) -> List[Path]:
        files: List[Path] = []
        self._walk(Path(root_path), files)
        logger.debug("Enumerated %d file(s) under %s", len(files), root_path)
        return files

    def _walk(self, directory: Path, files: List[Path]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Skipping unreadable directory %s: %s", directory, exc)
            return

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                logger.debug("Cannot stat %s: %s", entry.path, exc)
                continue

            if self.policy.should_exclude(entry.name, is_directory=is_dir):
                continue

            if is_dir:
                self._walk(Path(entry.path), files)
            elif is_file and self.policy.is_eligible(entry.name):
                files.append(Path(entry.path))
