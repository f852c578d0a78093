"""
Aegis - Pattern-based source security scanner

Walks a project tree and reports:
- Hardcoded secrets and credentials
- Injection, XSS and weak-crypto vulnerability signatures
- OWASP compliance patterns
- Vulnerable dependencies (npm audit / OSV enrichment)
"""

__version__ = "1.0.0"


__all__ = [
    "__version__",
]
