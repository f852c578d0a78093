"""
Aegis Dependency Auditor

Best-effort enrichment from external advisory sources:
- package.json      -> ``npm audit --json`` (subprocess)
- requirements.txt  -> OSV API (https://osv.dev), pinned versions only

Only manifests at the project root are considered. Every failure (tool
missing, bad exit, timeout, malformed output, network error) yields no
findings; nothing here raises into the scan.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence

import requests

from aegis.core.config import DependencyConfig
from aegis.core.finding import Category, Finding, Severity
from aegis.core.scanner import BaseScanner

logger = logging.getLogger(__name__)

OSV_API_URL = "https://api.osv.dev/v1/query"

NPM_MANIFEST = "package.json"
PYTHON_MANIFEST = "requirements.txt"
MANIFEST_FILES = (NPM_MANIFEST, PYTHON_MANIFEST)

# npm and GHSA use "moderate" where we use "medium".
SEVERITY_MAP = {
    "critical": Severity.CRITICAL,
    "high": Severity.HIGH,
    "moderate": Severity.MEDIUM,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
    "info": Severity.INFO,
}

# npm audit exits 1 when it found vulnerabilities; the JSON is still valid.
NPM_OK_EXIT_CODES = (0, 1)

_PINNED_REQUIREMENT = re.compile(r"^([A-Za-z0-9._-]+)(?:\[[^\]]*\])?\s*==\s*([0-9][^\s;,#]*)")


def map_severity(value: Any) -> Severity:
    """Map an advisory tool's severity name onto Severity; unknown -> MEDIUM."""
    if not isinstance(value, str):
        return Severity.MEDIUM
    return SEVERITY_MAP.get(value.strip().lower(), Severity.MEDIUM)


class DependencyAuditor(BaseScanner):
    """Merges advisory data for the project's declared dependencies."""

    name = "dependencies"

    def __init__(self, project_root: Path, config: Optional[DependencyConfig] = None) -> None:
        super().__init__(project_root)
        self.config = config or DependencyConfig()

    def is_applicable(self) -> bool:
        return self.config.enabled and any(
            (self.project_root / name).is_file() for name in self._enabled_manifests()
        )

    def scan(self, files: Sequence[Path] = ()) -> List[Finding]:
        return self.audit()

    def audit(self) -> List[Finding]:
        findings: List[Finding] = []
        if not self.config.enabled:
            return findings

        if self.config.npm_audit and (self.project_root / NPM_MANIFEST).is_file():
            findings.extend(self._npm_audit())

        if self.config.osv and (self.project_root / PYTHON_MANIFEST).is_file():
            findings.extend(self._osv_audit())

        return findings

    def _enabled_manifests(self) -> list[str]:
        manifests = []
        if self.config.npm_audit:
            manifests.append(NPM_MANIFEST)
        if self.config.osv:
            manifests.append(PYTHON_MANIFEST)
        return manifests

    # ── npm audit ──

    def _npm_audit(self) -> List[Finding]:
        npm_path = shutil.which("npm")
        if not npm_path:
            logger.info("npm not installed, skipping npm audit")
            return []

        try:
            result = subprocess.run(
                [npm_path, "audit", "--json"],
                cwd=self.project_root,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("npm audit timed out after %ss", self.config.timeout)
            return []
        except OSError as exc:
            logger.warning("npm audit could not be started: %s", exc)
            return []

        if result.returncode not in NPM_OK_EXIT_CODES:
            logger.warning("npm audit failed with exit code %d", result.returncode)
            return []

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            logger.warning("Malformed npm audit output: %s", exc)
            return []

        if not isinstance(data, dict):
            logger.warning("Malformed npm audit output: expected an object")
            return []

        return self.parse_npm_audit(data)

    @classmethod
    def parse_npm_audit(cls, data: dict[str, Any]) -> List[Finding]:
        """Parse npm 7+ (``vulnerabilities``) or npm 6 (``advisories``) audit JSON."""
        if isinstance(data.get("vulnerabilities"), dict):
            return cls._parse_npm_vulnerabilities(data["vulnerabilities"])
        if isinstance(data.get("advisories"), dict):
            return cls._parse_npm_advisories(data["advisories"])
        return []

    @staticmethod
    def _parse_npm_vulnerabilities(vulnerabilities: dict[str, Any]) -> List[Finding]:
        findings: List[Finding] = []
        for pkg, vuln in vulnerabilities.items():
            if not isinstance(vuln, dict):
                continue

            via = vuln.get("via") or []
            advisory = next((v for v in via if isinstance(v, dict)), {})
            title = advisory.get("title") or vuln.get("title")
            if not title:
                # Transitive: "via" only names the vulnerable dependencies.
                names = [v for v in via if isinstance(v, str)]
                title = f"Vulnerable through {', '.join(names)}" if names else "Known vulnerability"

            findings.append(
                Finding(
                    severity=map_severity(vuln.get("severity")),
                    category=Category.DEPENDENCY,
                    file=NPM_MANIFEST,
                    description=f"{pkg}: {title}",
                    recommendation=_npm_fix_message(pkg, vuln.get("fixAvailable")),
                    cwe=_join_cwe(advisory.get("cwe")),
                )
            )
        return findings

    @staticmethod
    def _parse_npm_advisories(advisories: dict[str, Any]) -> List[Finding]:
        findings: List[Finding] = []
        for advisory in advisories.values():
            if not isinstance(advisory, dict):
                continue
            pkg = advisory.get("module_name", "unknown")
            patched = advisory.get("patched_versions")
            fix_msg = advisory.get("recommendation") or (
                f"Update {pkg} to version {patched}" if patched else f"Update {pkg} to the latest version"
            )
            findings.append(
                Finding(
                    severity=map_severity(advisory.get("severity")),
                    category=Category.DEPENDENCY,
                    file=NPM_MANIFEST,
                    description=f"{pkg}: {advisory.get('title', 'Known vulnerability')}",
                    recommendation=fix_msg,
                    cwe=_join_cwe(advisory.get("cwe")),
                )
            )
        return findings

    # ── OSV API ──

    def _osv_audit(self) -> List[Finding]:
        manifest = self.project_root / PYTHON_MANIFEST
        try:
            content = manifest.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.warning("Skipping unreadable %s: %s", manifest, exc)
            return []

        # One time budget covers every lookup of the audit.
        deadline = time.monotonic() + self.config.timeout
        findings: List[Finding] = []
        for pkg_name, pkg_version, line_no in self.parse_requirements(content):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning("OSV audit exceeded %ss, skipping remaining packages", self.config.timeout)
                break
            try:
                vulns = self._query_osv(pkg_name, pkg_version, remaining)
            except (requests.ConnectionError, requests.Timeout) as exc:
                logger.warning("OSV unreachable, skipping remaining packages: %s", exc)
                break
            for vuln in vulns:
                findings.append(self._osv_finding(pkg_name, pkg_version, line_no, vuln))
        return findings

    @staticmethod
    def parse_requirements(content: str) -> list[tuple[str, str, int]]:
        """Return (name, version, line_number) for every ``==`` pin."""
        packages = []
        for line_no, line in enumerate(content.split("\n"), start=1):
            line = line.strip()
            if not line or line.startswith(("#", "-")):
                continue
            match = _PINNED_REQUIREMENT.match(line)
            if match:
                packages.append((match.group(1).lower(), match.group(2), line_no))
        return packages

    def _query_osv(self, package: str, version: str, timeout: float) -> list[dict[str, Any]]:
        """Query OSV for one pin. Connection errors and timeouts propagate to the caller."""
        payload = {
            "version": version,
            "package": {"name": package, "ecosystem": "PyPI"},
        }
        try:
            resp = requests.post(OSV_API_URL, json=payload, timeout=timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.ConnectionError, requests.Timeout):
            raise
        except (requests.RequestException, ValueError) as exc:
            logger.warning("OSV lookup failed for %s==%s: %s", package, version, exc)
            return []

        vulns = data.get("vulns", []) if isinstance(data, dict) else []
        return [v for v in vulns if isinstance(v, dict)]

    @staticmethod
    def _osv_finding(pkg_name: str, pkg_version: str, line_no: int, vuln: dict[str, Any]) -> Finding:
        vuln_id = vuln.get("id", "UNKNOWN")
        summary = vuln.get("summary") or "No description available."
        db_specific = vuln.get("database_specific") or {}

        fix_versions = _osv_fix_versions(vuln)
        fix_msg = f"Update {pkg_name} to a patched version"
        if fix_versions:
            fix_msg = f"Update {pkg_name} to version {', '.join(fix_versions)} or later"

        return Finding(
            severity=map_severity(db_specific.get("severity")),
            category=Category.DEPENDENCY,
            file=PYTHON_MANIFEST,
            line=line_no,
            description=f"{pkg_name}=={pkg_version}: {vuln_id} {summary}",
            recommendation=fix_msg,
            cwe=_join_cwe(db_specific.get("cwe_ids")),
        )


def _npm_fix_message(pkg: str, fix: Any) -> str:
    if isinstance(fix, dict) and fix.get("name"):
        msg = f"Update {fix['name']} to version {fix.get('version', 'latest')}"
        if fix.get("isSemVerMajor"):
            msg += " (semver-major upgrade)"
        return msg
    if fix:
        return f"Update {pkg} to version latest"
    return f"No fix available for {pkg} yet; consider replacing it"


def _join_cwe(cwe: Any) -> Optional[str]:
    if isinstance(cwe, str):
        return cwe or None
    if isinstance(cwe, list):
        ids = [str(c) for c in cwe if c]
        return ", ".join(ids) or None
    return None


def _osv_fix_versions(vuln: dict[str, Any]) -> list[str]:
    fix_versions = []
    for affected in vuln.get("affected", []):
        for rng in affected.get("ranges", []):
            for event in rng.get("events", []):
                fixed = event.get("fixed")
                if fixed and fixed not in fix_versions:
                    fix_versions.append(fixed)
    return fix_versions
