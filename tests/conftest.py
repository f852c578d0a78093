"""
Pytest Configuration and Fixtures

Shared fixtures for Aegis tests.

File names written by fixtures avoid the "test" marker on purpose:
such files are excluded from scans.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from aegis.core.aggregator import ResultAggregator
from aegis.core.config import AegisConfig
from aegis.core.finding import Category, Finding, ScanResult, Severity


API_KEY_LINE = 'const api_key = "sk_live_abcdefghijklmnopqrstuv";'
SQL_LINE = "const q = `SELECT * FROM users WHERE id = ${id}`;"
XSS_LINE = "document.write('<div>' + msg + '</div>');"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for scan targets."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config() -> AegisConfig:
    """Create a default configuration."""
    return AegisConfig()


@pytest.fixture
def sample_finding() -> Finding:
    """Create a sample finding for testing."""
    return Finding(
        severity=Severity.CRITICAL,
        category=Category.SECRET,
        file="src/settings.js",
        line=10,
        description="Potential API Key found in source code",
        recommendation="Move sensitive data to environment variables or secure key management",
        cwe="CWE-798",
        owasp="A02:2021 - Cryptographic Failures",
    )


@pytest.fixture
def sample_findings() -> list:
    """One finding per severity, plus extra criticals for truncation checks."""
    findings = [
        Finding(Severity.CRITICAL, Category.SECRET, f"src/keys{i}.js", f"Critical {i}", "Rotate", line=i)
        for i in range(1, 6)
    ]
    findings += [
        Finding(Severity.HIGH, Category.VULNERABILITY, "src/view.js", "XSS Risk detected", "Sanitize",
                line=3, cwe="CWE-79", owasp="A03:2021 - Injection"),
        Finding(Severity.MEDIUM, Category.COMPLIANCE, "src/db.js", "Insecure Direct Object Reference",
                "Check authorization", line=8),
        Finding(Severity.LOW, Category.DEPENDENCY, "package.json", "minimist: Prototype Pollution",
                "Update minimist to version 1.2.8"),
        Finding(Severity.INFO, Category.DEPENDENCY, "package.json", "debug: informational", "None"),
    ]
    return findings


@pytest.fixture
def sample_result(sample_findings) -> ScanResult:
    """A ScanResult built from sample_findings."""
    return ResultAggregator().aggregate(
        [sample_findings], scanned_file_count=12, scan_duration_ms=42,
    )


@pytest.fixture
def vulnerable_project(temp_dir: Path) -> Path:
    """A small project with one secret, one SQL injection and one XSS sink."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "config.js").write_text(API_KEY_LINE + "\n", encoding="utf-8")
    (temp_dir / "src" / "db.js").write_text(
        "function load(id) {\n  " + SQL_LINE + "\n  return run(q);\n}\n", encoding="utf-8"
    )
    (temp_dir / "src" / "view.js").write_text(XSS_LINE + "\n", encoding="utf-8")
    return temp_dir
