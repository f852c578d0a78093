"""
Vulnerability signature rules: injection sinks, path traversal, weak crypto.
"""

from __future__ import annotations

import re

from aegis.core.finding import Category, Severity
from aegis.rules.base import DetectionRule

INJECTION = "A03:2021 - Injection"
ACCESS_CONTROL = "A01:2021 - Broken Access Control"
CRYPTO = "A02:2021 - Cryptographic Failures"

# (name, pattern, severity, cwe, owasp, recommendation)
PATTERNS: list[tuple[str, str, Severity, str, str, str]] = [
    ("SQL Injection Risk",
     r"(?i)\$\{.*\}.*\bselect\b|\bselect\b.*\$\{.*\}|query\s*\(\s*['\"`].*\$\{"
     r"|execute\s*\(\s*f['\"]|\bf['\"](?:select|insert|update|delete)\b.*\{",
     Severity.CRITICAL, "CWE-89", INJECTION,
     "Use parameterized queries or ORM with proper escaping"),

    ("XSS Risk",
     r"(?i)innerHTML\s*=|document\.write\s*\(|\.html\s*\(|dangerouslySetInnerHTML|mark_safe\s*\(",
     Severity.HIGH, "CWE-79", INJECTION,
     "Sanitize user input and use safe DOM manipulation methods"),

    ("Command Injection Risk",
     r"(?i)\bexec\s*\(|\bsystem\s*\(|shell_exec|\bpopen\s*\(|shell\s*=\s*True",
     Severity.HIGH, "CWE-78", INJECTION,
     "Validate input and use safe command execution methods"),

    ("Path Traversal Risk",
     r"\.\.[/\\]",
     Severity.MEDIUM, "CWE-22", ACCESS_CONTROL,
     "Validate file paths and resolve them against an allowed base directory"),

    ("Weak Cryptography",
     r"(?i)(?<![a-z])(?:md5|sha-?1|rc4)(?![0-9])|\bdes\b",
     Severity.MEDIUM, "CWE-327", CRYPTO,
     "Use strong cryptographic algorithms like AES-256 or SHA-256+"),
]

RULES = [
    DetectionRule(
        name=name,
        category=Category.VULNERABILITY,
        pattern=re.compile(pattern),
        severity=severity,
        description=f"{name} detected",
        recommendation=recommendation,
        cwe=cwe,
        owasp=owasp,
    )
    for name, pattern, severity, cwe, owasp, recommendation in PATTERNS
]
