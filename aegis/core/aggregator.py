"""
Aegis Result Aggregator

Merges the finding streams of all phases into one ScanResult.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from aegis.core.finding import SEVERITIES, Finding, ScanResult


class ResultAggregator:
    """
    Concatenates phase outputs and buckets them by severity.

    Bucketing keeps phase order. With ``deduplicate`` set, findings that
    share (file, line, category, cwe) collapse to the most severe one,
    the first seen winning ties.
    """

    def __init__(self, deduplicate: bool = False) -> None:
        self.deduplicate = deduplicate

    def aggregate(
        self,
        finding_streams: Iterable[Sequence[Finding]],
        scanned_file_count: int = 0,
        scan_duration_ms: int = 0,
        scanned_at: Optional[datetime] = None,
    ) -> ScanResult:
        findings: List[Finding] = [f for stream in finding_streams for f in stream]
        if self.deduplicate:
            findings = self._deduplicate(findings)

        buckets = {
            sev: tuple(f for f in findings if f.severity is sev)
            for sev in SEVERITIES
        }

        return ScanResult(
            buckets=buckets,
            scan_duration_ms=scan_duration_ms,
            scanned_file_count=scanned_file_count,
            scanned_at=scanned_at or datetime.now(timezone.utc),
        )

    @staticmethod
    def _deduplicate(findings: List[Finding]) -> List[Finding]:
        kept: dict[tuple, Finding] = {}
        for finding in findings:
            key = (finding.file, finding.line, finding.category, finding.cwe)
            current = kept.get(key)
            if current is None or finding.severity > current.severity:
                kept[key] = finding
        # dict keeps first-insertion order per key
        return list(kept.values())
