"""
Aegis Finding Model

A Finding represents one security issue found during scanning.
A ScanResult groups every finding of one scan into severity buckets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @classmethod
    def from_string(cls, value: str) -> "Severity":
        """Parse a severity from a string (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown severity: {value!r}") from None

    @property
    def rank(self) -> int:
        """Position in the total order; CRITICAL ranks highest."""
        return _SEVERITY_ORDER.index(self)

    def __ge__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __gt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __le__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_SEVERITY_ORDER = [Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]

# Most severe first; used for bucket iteration and report layout.
SEVERITIES = tuple(reversed(_SEVERITY_ORDER))


class Category(Enum):
    SECRET = "Secret Detection"
    VULNERABILITY = "Vulnerability"
    COMPLIANCE = "OWASP"
    DEPENDENCY = "Dependency"

    @classmethod
    def from_string(cls, value: str) -> "Category":
        """Accept either the member name ("secret") or the report value ("OWASP")."""
        for member in cls:
            if value.lower() in (member.name.lower(), member.value.lower()):
                return member
        raise ValueError(f"Unknown category: {value!r}")


RULE_CATEGORIES = (Category.SECRET, Category.VULNERABILITY, Category.COMPLIANCE)


@dataclass(frozen=True)
class Finding:
    severity: Severity
    category: Category
    file: str
    description: str
    recommendation: str
    line: Optional[int] = None
    cwe: Optional[str] = None
    owasp: Optional[str] = None

    def display(self) -> str:
        """One-line location and description for console printing."""
        loc = self.file if self.line is None else f"{self.file}:{self.line}"
        return f"{loc} - {self.description}"

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to a dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "category": self.category.value,
            "file": self.file,
        }
        if self.line is not None:
            result["line"] = self.line
        result["description"] = self.description
        result["recommendation"] = self.recommendation
        if self.cwe:
            result["cwe"] = self.cwe
        if self.owasp:
            result["owasp"] = self.owasp
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        return cls(
            severity=Severity.from_string(data["severity"]),
            category=Category.from_string(data["category"]),
            file=data["file"],
            line=data.get("line"),
            description=data["description"],
            recommendation=data["recommendation"],
            cwe=data.get("cwe"),
            owasp=data.get("owasp"),
        )


def _empty_buckets() -> dict[Severity, tuple[Finding, ...]]:
    return {sev: () for sev in SEVERITIES}


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of one scan.

    Every severity has a bucket, possibly empty. ``total_findings`` is
    derived from the buckets and cannot drift from them.
    """

    buckets: Mapping[Severity, tuple[Finding, ...]] = field(default_factory=_empty_buckets)
    scan_duration_ms: int = 0
    scanned_file_count: int = 0
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        # Read-only view; every severity present.
        buckets = {sev: tuple(self.buckets.get(sev, ())) for sev in SEVERITIES}
        object.__setattr__(self, "buckets", MappingProxyType(buckets))

    @property
    def total_findings(self) -> int:
        return sum(len(bucket) for bucket in self.buckets.values())

    def bucket(self, severity: Severity) -> tuple[Finding, ...]:
        return self.buckets.get(severity, ())

    @property
    def findings(self) -> Iterator[Finding]:
        """All findings, most severe bucket first."""
        for sev in SEVERITIES:
            yield from self.bucket(sev)

    def counts(self) -> dict[Severity, int]:
        return {sev: len(self.bucket(sev)) for sev in SEVERITIES}

    def at_or_above(self, threshold: Severity) -> int:
        """Number of findings whose severity is at least ``threshold``."""
        return sum(len(self.bucket(sev)) for sev in SEVERITIES if sev >= threshold)
