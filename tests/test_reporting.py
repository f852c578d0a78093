"""
Tests for Reporting Module
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from aegis.core.finding import SEVERITIES, ScanResult, Severity
from aegis.reporting.console import ConsoleReporter
from aegis.reporting.json_reporter import JSONReporter, format_timestamp


class TestConsoleReporter:
    """Tests for ConsoleReporter."""

    def test_empty_report(self):
        reporter = ConsoleReporter(target="/proj", color=False)
        content = reporter.summarize(ScanResult(scanned_file_count=0))

        assert "Aegis" in content
        assert "No security issues found" in content
        assert "Scanned 0 files" in content

    def test_counts_in_severity_order(self, sample_result: ScanResult):
        content = ConsoleReporter(target="/proj", color=False).summarize(sample_result)

        positions = [content.index(f"{sev.value.upper()} (") for sev in SEVERITIES]
        assert positions == sorted(positions)
        assert "CRITICAL (5)" in content
        assert "HIGH (1)" in content
        assert "No security issues found" not in content

    def test_truncates_examples(self, sample_result: ScanResult):
        content = ConsoleReporter(target="/proj", color=False).summarize(sample_result)

        assert "src/keys1.js:1 - Critical 1" in content
        assert "src/keys3.js:3 - Critical 3" in content
        assert "src/keys4.js" not in content
        assert "+2 more" in content

    def test_custom_example_count(self, sample_result: ScanResult):
        content = ConsoleReporter(target="/proj", examples_per_severity=5, color=False).summarize(sample_result)
        assert "src/keys5.js" in content
        assert "more" not in content

    def test_skips_empty_buckets(self, sample_findings):
        from aegis.core.aggregator import ResultAggregator

        result = ResultAggregator().aggregate([sample_findings[:5]])
        content = ConsoleReporter(target="/proj", color=False).summarize(result)
        assert "HIGH (" not in content

    def test_location_without_line(self, sample_result: ScanResult):
        content = ConsoleReporter(target="/proj", color=False).summarize(sample_result)
        assert "package.json - minimist: Prototype Pollution" in content

    def test_color_mode_adds_ansi(self, sample_result: ScanResult):
        content = ConsoleReporter(target="/proj", color=True).summarize(sample_result)
        assert "\033[" in content

    def test_no_color_mode(self, sample_result: ScanResult):
        content = ConsoleReporter(target="/proj", color=False).summarize(sample_result)
        assert "\033[" not in content


class TestJSONReporter:
    """Tests for JSONReporter."""

    def test_schema(self, sample_result: ScanResult):
        data = json.loads(JSONReporter("/proj").render(sample_result))

        assert set(data) == {"summary", "findings"}
        assert set(data["summary"]) == {"scanTime", "totalFindings", "scannedFiles", "scanDuration"}
        assert data["summary"]["totalFindings"] == 9
        assert data["summary"]["scannedFiles"] == 12
        assert data["summary"]["scanDuration"] == 42
        assert list(data["findings"]) == ["critical", "high", "medium", "low", "info"]

    def test_untruncated(self, sample_result: ScanResult):
        data = json.loads(JSONReporter("/proj").render(sample_result))
        assert len(data["findings"]["critical"]) == 5

    def test_finding_fields(self, sample_result: ScanResult):
        data = json.loads(JSONReporter("/proj").render(sample_result))
        high = data["findings"]["high"][0]
        assert high == {
            "severity": "high",
            "category": "Vulnerability",
            "file": "src/view.js",
            "line": 3,
            "description": "XSS Risk detected",
            "recommendation": "Sanitize",
            "cwe": "CWE-79",
            "owasp": "A03:2021 - Injection",
        }
        assert "line" not in data["findings"]["low"][0]

    def test_timestamp_format(self):
        when = datetime(2026, 10, 17, 8, 30, 0, 123000, tzinfo=timezone.utc)
        assert format_timestamp(when) == "2026-10-17T08:30:00.123Z"

    def test_persist_default_path(self, sample_result: ScanResult, temp_dir: Path):
        path = JSONReporter(temp_dir).persist(sample_result)

        assert path == temp_dir / "aegis-security-report.json"
        assert json.loads(path.read_text(encoding="utf-8"))["summary"]["totalFindings"] == 9

    def test_persist_custom_path(self, sample_result: ScanResult, temp_dir: Path):
        target = temp_dir / "out" / "report.json"
        assert JSONReporter(temp_dir).persist(sample_result, target) == target
        assert target.exists()

    def test_persist_does_not_mutate(self, sample_result: ScanResult, temp_dir: Path):
        before = sample_result.counts()
        JSONReporter(temp_dir).persist(sample_result)
        assert sample_result.counts() == before

    def test_round_trip(self, sample_result: ScanResult, temp_dir: Path):
        path = JSONReporter(temp_dir).persist(sample_result)
        loaded = JSONReporter.load(path)

        assert loaded.total_findings == sample_result.total_findings
        assert loaded.counts() == sample_result.counts()
        assert loaded.scanned_file_count == sample_result.scanned_file_count
        assert loaded.scan_duration_ms == sample_result.scan_duration_ms
        assert loaded.bucket(Severity.HIGH) == sample_result.bucket(Severity.HIGH)
