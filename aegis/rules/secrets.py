"""
Secret detection rules.

Every rule here tags CWE-798 (hardcoded credentials).
"""

from __future__ import annotations

import re

from aegis.core.finding import Category, Severity
from aegis.rules.base import DetectionRule

CWE = "CWE-798"
OWASP = "A02:2021 - Cryptographic Failures"
RECOMMENDATION = "Move sensitive data to environment variables or secure key management"

# (name, pattern, severity)
PATTERNS: list[tuple[str, str, Severity]] = [
    ("API Key",
     r"(?i)api[_-]?key['\"]*\s*[:=]\s*['\"][a-zA-Z0-9_]{15,}['\"]",
     Severity.CRITICAL),

    ("Database Password",
     r"(?i)password['\"]*\s*[:=]\s*['\"][^'\"]{4,}['\"]",
     Severity.HIGH),

    ("JWT Secret",
     r"(?i)(?:jwt[_-]?secret|secret)['\"]*\s*[:=]\s*['\"][^'\"]{15,}['\"]",
     Severity.CRITICAL),

    ("Private Key",
     r"-----BEGIN\s+(?:RSA\s+|EC\s+|DSA\s+|OPENSSH\s+)?PRIVATE\s+KEY-----",
     Severity.CRITICAL),

    ("AWS Access Key",
     r"AKIA[0-9A-Z]{16}",
     Severity.CRITICAL),

    ("Generic Secret",
     r"(?i)secret['\"]*\s*[:=]\s*['\"][^'\"]{10,}['\"]",
     Severity.HIGH),

    ("Hardcoded Credentials",
     r"(?i)(?:username|user|password|pass)['\"]*\s*[:=]\s*['\"][^'\"]{3,}['\"]",
     Severity.HIGH),
]

RULES = [
    DetectionRule(
        name=name,
        category=Category.SECRET,
        pattern=re.compile(pattern),
        severity=severity,
        description=f"Potential {name} found in source code",
        recommendation=RECOMMENDATION,
        cwe=CWE,
        owasp=OWASP,
    )
    for name, pattern, severity in PATTERNS
]
