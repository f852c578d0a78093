"""
Aegis Scan Orchestrator

Idle -> Enumerating -> Scanning -> Aggregating -> Reported -> Done

Enumeration runs once. The three pattern phases and the dependency audit
then run concurrently over the same immutable file list and are joined
at a single barrier before aggregation.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from aegis.core.aggregator import ResultAggregator
from aegis.core.config import AegisConfig
from aegis.core.enumerator import FileEnumerator
from aegis.core.errors import ProjectRootError
from aegis.core.exclusion import ExclusionPolicy
from aegis.core.finding import RULE_CATEGORIES, Finding, ScanResult
from aegis.core.scanner import BaseScanner
from aegis.rules import load_catalog
from aegis.rules.base import RuleCatalog
from aegis.scanners.dependencies import DependencyAuditor
from aegis.scanners.patterns import PatternScanner

logger = logging.getLogger(__name__)


class ScanState(Enum):
    IDLE = "idle"
    ENUMERATING = "enumerating"
    SCANNING = "scanning"
    AGGREGATING = "aggregating"
    REPORTED = "reported"
    DONE = "done"


class ScanOrchestrator:
    """Top-level coordinator for one project scan."""

    def __init__(
        self,
        project_root: Union[str, Path],
        config: Optional[AegisConfig] = None,
        catalog: Optional[RuleCatalog] = None,
        include_dependencies: bool = True,
    ) -> None:
        self.project_root = Path(project_root)
        self.config = config or AegisConfig()
        self.catalog = catalog if catalog is not None else load_catalog(self.config)
        self.include_dependencies = include_dependencies
        self.enumerator = FileEnumerator(ExclusionPolicy.from_config(self.config))
        self.aggregator = ResultAggregator(deduplicate=self.config.deduplicate)
        self.state = ScanState.IDLE

    def build_phases(self) -> List[BaseScanner]:
        phases: List[BaseScanner] = [
            PatternScanner(self.project_root, self.catalog, category)
            for category in RULE_CATEGORIES
        ]

        if self.include_dependencies:
            auditor = DependencyAuditor(self.project_root, self.config.dependencies)
            if auditor.is_applicable():
                phases.append(auditor)
            else:
                logger.debug("No dependency manifest at %s, skipping audit", self.project_root)

        return phases

    def scan(self, report: Optional[Callable[[ScanResult], None]] = None) -> ScanResult:
        """
        Run a full scan and return its ScanResult.

        Raises:
            ProjectRootError: the root is missing or not a directory.
                Every other failure is absorbed by the phase it occurs in.
        """
        self._validate_root()
        started_at = datetime.now(timezone.utc)
        t0 = time.perf_counter()

        self.state = ScanState.ENUMERATING
        files = tuple(self.enumerator.enumerate(self.project_root))

        self.state = ScanState.SCANNING
        streams = self._run_phases(self.build_phases(), files)

        self.state = ScanState.AGGREGATING
        elapsed_ms = int((time.perf_counter() - t0) * 1000)
        result = self.aggregator.aggregate(
            streams,
            scanned_file_count=len(files),
            scan_duration_ms=elapsed_ms,
            scanned_at=started_at,
        )
        logger.info(
            "Scanned %d file(s) in %dms: %d finding(s)",
            result.scanned_file_count, result.scan_duration_ms, result.total_findings,
        )

        if report is not None:
            report(result)
        self.state = ScanState.REPORTED

        self.state = ScanState.DONE
        return result

    def _validate_root(self) -> None:
        if not self.project_root.exists():
            raise ProjectRootError(f"Project root does not exist: {self.project_root}")
        if not self.project_root.is_dir():
            raise ProjectRootError(f"Project root is not a directory: {self.project_root}")

    @staticmethod
    def _run_phases(phases: Sequence[BaseScanner], files: Sequence[Path]) -> List[List[Finding]]:
        if not phases:
            return []

        with ThreadPoolExecutor(max_workers=len(phases), thread_name_prefix="aegis-phase") as pool:
            futures: List[tuple[str, Future]] = [
                (phase.name, pool.submit(phase.scan, files)) for phase in phases
            ]

            # Single join point; stream order follows phase order.
            streams: List[List[Finding]] = []
            for name, future in futures:
                try:
                    streams.append(future.result())
                except Exception:
                    logger.exception("%s phase failed; contributing no findings", name)
                    streams.append([])
        return streams
