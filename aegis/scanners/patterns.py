"""
Aegis Pattern Scanner

Applies every rule of one category to every line of every file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from aegis.core.finding import Category, Finding
from aegis.core.scanner import BaseScanner
from aegis.rules.base import DetectionRule, RuleCatalog

logger = logging.getLogger(__name__)


class LineMatcher:
    """
    Line-oriented matcher.

    No short-circuiting: a line may fire any number of rules, and each
    match is its own Finding. Findings for one file keep line order.
    """

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root

    def scan(self, files: Sequence[Path], rules: Sequence[DetectionRule]) -> List[Finding]:
        findings: List[Finding] = []
        if not rules:
            return findings

        for file_path in files:
            try:
                content = file_path.read_text(encoding="utf-8", errors="ignore")
            except OSError as exc:
                logger.warning("Skipping unreadable file %s: %s", file_path, exc)
                continue

            findings.extend(self.scan_text(self.relative(file_path), content, rules))

        return findings

    @staticmethod
    def scan_text(file: str, content: str, rules: Sequence[DetectionRule]) -> List[Finding]:
        """Match ``content`` line by line; ``file`` is the reported path."""
        findings: List[Finding] = []
        for line_no, line in enumerate(content.split("\n"), start=1):
            line = line.rstrip("\r")
            for rule in rules:
                if rule.matches(line):
                    findings.append(
                        Finding(
                            severity=rule.severity,
                            category=rule.category,
                            file=file,
                            line=line_no,
                            description=rule.description,
                            recommendation=rule.recommendation,
                            cwe=rule.cwe,
                            owasp=rule.owasp,
                        )
                    )
        return findings

    def relative(self, file_path: Path) -> str:
        """Project-relative POSIX path; absolute if outside the root."""
        try:
            return file_path.relative_to(self.project_root).as_posix()
        except ValueError:
            return file_path.as_posix()


class PatternScanner(BaseScanner):
    """One detection phase: a LineMatcher bound to one rule category."""

    def __init__(self, project_root: Path, catalog: RuleCatalog, category: Category) -> None:
        super().__init__(project_root)
        self.catalog = catalog
        self.category = category
        self.name = category.name.lower()
        self.matcher = LineMatcher(project_root)

    def scan(self, files: Sequence[Path]) -> List[Finding]:
        rules = self.catalog.rules_for(self.category)
        findings = self.matcher.scan(files, rules)
        logger.debug("%s phase: %d finding(s) from %d rule(s)", self.name, len(findings), len(rules))
        return findings
