"""
Aegis Detection Rules

A DetectionRule is a named, categorized line matcher plus remediation
metadata. A RuleCatalog is the frozen registry consulted by every scan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Pattern

from aegis.core.errors import RuleValidationError
from aegis.core.finding import RULE_CATEGORIES, Category, Severity


@dataclass(frozen=True)
class DetectionRule:
    name: str
    category: Category
    pattern: Pattern[str]
    severity: Severity
    description: str
    recommendation: str
    cwe: Optional[str] = None
    owasp: Optional[str] = None

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DetectionRule":
        """Build a rule from a config mapping, validating every field."""
        if not isinstance(data, dict):
            raise RuleValidationError(f"Rule definition must be a mapping, got {type(data).__name__}")

        missing = [key for key in ("name", "category", "pattern", "severity", "recommendation")
                   if not data.get(key)]
        if missing:
            raise RuleValidationError(
                f"Rule {data.get('name', '<unnamed>')!r} is missing: {', '.join(missing)}"
            )

        name = str(data["name"])
        try:
            category = Category.from_string(str(data["category"]))
            severity = Severity.from_string(str(data["severity"]))
        except ValueError as exc:
            raise RuleValidationError(f"Rule {name!r}: {exc}") from exc

        if category not in RULE_CATEGORIES:
            raise RuleValidationError(f"Rule {name!r}: category {category.name.lower()} is not matchable")

        try:
            pattern = re.compile(str(data["pattern"]))
        except re.error as exc:
            raise RuleValidationError(f"Rule {name!r}: invalid pattern: {exc}") from exc

        return cls(
            name=name,
            category=category,
            pattern=pattern,
            severity=severity,
            description=str(data.get("description") or name),
            recommendation=str(data["recommendation"]),
            cwe=data.get("cwe"),
            owasp=data.get("owasp"),
        )


class RuleCatalog:
    """Immutable, category-indexed collection of detection rules."""

    def __init__(self, rules: Iterable[DetectionRule]) -> None:
        rules = tuple(rules)
        seen: set[tuple[Category, str]] = set()
        for rule in rules:
            key = (rule.category, rule.name)
            if key in seen:
                raise RuleValidationError(
                    f"Duplicate rule {rule.name!r} in category {rule.category.name.lower()}"
                )
            seen.add(key)

        self._rules = rules
        self._by_category = {
            category: tuple(r for r in rules if r.category is category)
            for category in RULE_CATEGORIES
        }

    def rules_for(self, category: Category) -> tuple[DetectionRule, ...]:
        return self._by_category.get(category, ())

    def extended(self, extra: Iterable[DetectionRule]) -> "RuleCatalog":
        """Return a new catalog with ``extra`` appended."""
        return RuleCatalog(self._rules + tuple(extra))

    def __iter__(self) -> Iterator[DetectionRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)
