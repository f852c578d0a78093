"""
Aegis Base Scanner

A scanner is one detection phase: it inspects the enumerated files (or
the project root) and returns findings. Phases never share mutable
state, so the orchestrator may run them concurrently.

Phases:
- PatternScanner (one per rule category)
- DependencyAuditor
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from aegis.core.finding import Finding


class BaseScanner(ABC):
    """
    Minimal phase interface.
    Each scanner must implement scan().
    """

    name: str = "base"

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root

    def is_applicable(self) -> bool:
        """Whether the phase has anything to do for this project."""
        return True

    @abstractmethod
    def scan(self, files: Sequence[Path]) -> List[Finding]:
        """
        Run the phase over the shared, read-only file list.
        Recoverable per-unit failures must be absorbed here.
        """
        raise NotImplementedError
