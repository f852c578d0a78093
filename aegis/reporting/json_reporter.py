"""
Aegis JSON Reporter

Persisted, untruncated report:
{
    "summary": {
        "scanTime": "<ISO-8601>",
        "totalFindings": N,
        "scannedFiles": N,
        "scanDuration": <ms>
    },
    "findings": {
        "critical": [...], "high": [...], "medium": [...], "low": [...], "info": [...]
    }
}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from aegis.core.config import DEFAULT_REPORT_FILENAME
from aegis.core.finding import SEVERITIES, Finding, ScanResult

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class JSONReporter:
    """Builds, writes and reads the persisted report."""

    def __init__(self, project_root: Union[str, Path], report_filename: str = DEFAULT_REPORT_FILENAME) -> None:
        self.project_root = Path(project_root)
        self.report_filename = report_filename

    @staticmethod
    def to_dict(result: ScanResult) -> dict[str, Any]:
        return {
            "summary": {
                "scanTime": format_timestamp(result.scanned_at),
                "totalFindings": result.total_findings,
                "scannedFiles": result.scanned_file_count,
                "scanDuration": result.scan_duration_ms,
            },
            "findings": {
                sev.value: [f.to_dict() for f in result.bucket(sev)]
                for sev in SEVERITIES
            },
        }

    def render(self, result: ScanResult) -> str:
        return json.dumps(self.to_dict(result), indent=2, ensure_ascii=False)

    def default_path(self) -> Path:
        return self.project_root / self.report_filename

    def persist(self, result: ScanResult, output_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the full report and return where it went.

        Args:
            result: The scan to serialize; never modified.
            output_path: Target file; defaults to the report file under the project root.
        """
        path = Path(output_path) if output_path else self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(result) + "\n", encoding="utf-8")
        logger.info("Detailed report saved to %s", path)
        return path

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ScanResult:
        summary = data.get("summary", {})
        raw_findings = data.get("findings", {})
        buckets = {
            sev: tuple(Finding.from_dict(item) for item in raw_findings.get(sev.value, []))
            for sev in SEVERITIES
        }
        scanned_at = summary.get("scanTime")
        return ScanResult(
            buckets=buckets,
            scan_duration_ms=int(summary.get("scanDuration", 0)),
            scanned_file_count=int(summary.get("scannedFiles", 0)),
            scanned_at=parse_timestamp(scanned_at) if scanned_at else datetime.now(timezone.utc),
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> ScanResult:
        """Read a persisted report back into a ScanResult."""
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


