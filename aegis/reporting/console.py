"""
Aegis Console Reporter

Human summary of a ScanResult: counts per non-empty severity bucket,
most severe first, with a few example findings per bucket.
"""

from __future__ import annotations

import sys

import click

from aegis import __version__
from aegis.core.finding import SEVERITIES, ScanResult


def _safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


# Severity colors
SEVERITY_COLORS = {
    "critical": "bright_red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
    "info": "white",
}


class ConsoleReporter:
    """Renders the truncated console summary."""

    def __init__(self, target: str, examples_per_severity: int = 3, color: bool = True) -> None:
        self.target = target
        self.examples_per_severity = examples_per_severity
        self.color = color

    def report(self, result: ScanResult) -> None:
        """Print the summary to stdout."""
        _safe_echo(self.summarize(result))

    def summarize(self, result: ScanResult) -> str:
        lines: list[str] = []
        lines.extend(self._header(result))

        for sev in SEVERITIES:
            bucket = result.bucket(sev)
            if not bucket:
                continue
            color = SEVERITY_COLORS.get(sev.value, "white")
            lines.append(self._style(f"  {sev.value.upper()} ({len(bucket)})", fg=color, bold=True))
            for finding in bucket[: self.examples_per_severity]:
                lines.append(f"     {finding.display()}")
            hidden = len(bucket) - self.examples_per_severity
            if hidden > 0:
                lines.append(self._style(f"     +{hidden} more", fg="bright_black"))
            lines.append("")

        if result.total_findings == 0:
            lines.append(self._style("  [OK] No security issues found", fg="green", bold=True))
            lines.append("")

        lines.append(self._style("-" * 60, fg="bright_black"))
        lines.append(self._style("  Use --detailed for the full findings report", fg="bright_blue"))
        lines.append(self._style("  Use --json for machine-readable output", fg="bright_blue"))
        return "\n".join(lines)

    def _header(self, result: ScanResult) -> list[str]:
        return [
            "",
            self._style("=" * 60, fg="bright_blue"),
            self._style("  Aegis Security Scan Results", fg="bright_white", bold=True),
            self._style(f"  Version: {__version__}", fg="white"),
            self._style(f"  Target: {self.target}", fg="white"),
            self._style("=" * 60, fg="bright_blue"),
            f"  Scanned {result.scanned_file_count} files in {result.scan_duration_ms}ms",
            f"  Found {result.total_findings} security findings",
            "",
        ]

    def _style(self, text: str, **styles) -> str:
        return click.style(text, **styles) if self.color else text
