"""
OWASP compliance rules.
"""

from __future__ import annotations

import re

from aegis.core.finding import Category, Severity
from aegis.rules.base import DetectionRule

# (name, pattern, severity, cwe, owasp, recommendation)
PATTERNS: list[tuple[str, str, Severity, str, str, str]] = [
    ("Hardcoded Credentials",
     r"(?i)(?:password|user|username)['\"\s]*[:=]\s*['\"][^'\"]+['\"]|hardcoded_password",
     Severity.HIGH, "CWE-798", "A07:2021 - Identification and Authentication Failures",
     "Store credentials in environment variables or secure vault"),

    # Empty JS catch blocks and bare ``except ...: pass`` on one line.
    ("Insufficient Logging",
     r"(?i)catch\s*\([^)]*\)\s*\{\s*(?://.*|\s*)\}|\bexcept\b[^:\n]*:\s*pass\b"
     r"|no\s+logging|insufficient.*log",
     Severity.MEDIUM, "CWE-778", "A09:2021 - Security Logging and Monitoring Failures",
     "Add proper error logging and monitoring"),

    ("Insecure Direct Object Reference",
     r"(?i)req\.params\.[^.]*id.*database|findById\s*\(\s*req\.params"
     r"|objects\.get\s*\(\s*(?:pk|id)\s*=\s*request\.",
     Severity.MEDIUM, "CWE-639", "A01:2021 - Broken Access Control",
     "Implement proper authorization checks"),
]

RULES = [
    DetectionRule(
        name=name,
        category=Category.COMPLIANCE,
        pattern=re.compile(pattern),
        severity=severity,
        description=name,
        recommendation=recommendation,
        cwe=cwe,
        owasp=owasp,
    )
    for name, pattern, severity, cwe, owasp, recommendation in PATTERNS
]
