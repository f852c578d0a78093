"""
Aegis detection rule catalog.

Built-in rules live in one table per category; custom rules from
``.aegis.yaml`` are appended by ``load_catalog``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from aegis.core.config import AegisConfig
from aegis.rules import compliance, secrets, vulnerabilities
from aegis.rules.base import DetectionRule, RuleCatalog


@lru_cache(maxsize=1)
def default_catalog() -> RuleCatalog:
    """The built-in catalog, created once per process."""
    return RuleCatalog([*secrets.RULES, *vulnerabilities.RULES, *compliance.RULES])


def load_catalog(config: Optional[AegisConfig] = None) -> RuleCatalog:
    """Built-in catalog extended with the config's custom rules."""
    catalog = default_catalog()
    if config is None or not config.rules:
        return catalog
    return catalog.extended(DetectionRule.from_dict(data) for data in config.rules)


__all__ = [
    "DetectionRule",
    "RuleCatalog",
    "default_catalog",
    "load_catalog",
]
