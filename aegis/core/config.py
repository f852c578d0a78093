"""
Aegis Configuration Management

Loads and manages configuration from .aegis.yaml files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".aegis.yaml"
DEFAULT_REPORT_FILENAME = "aegis-security-report.json"

DEFAULT_EXCLUDE_DIRS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "__pycache__",
    "venv",
    ".venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".eggs",
    "*.egg-info",
]

DEFAULT_EXCLUDE_FILES = [
    ".env.example",
    DEFAULT_REPORT_FILENAME,
]

DEFAULT_TEST_MARKERS = ["test", "tests", "__tests__"]

# Source code, key/credential material and structured config.
DEFAULT_EXTENSIONS = [
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".php", ".go", ".rb", ".cs",
    ".pem", ".key", ".env",
    ".conf", ".config", ".yaml", ".yml", ".json", ".xml",
]


@dataclass
class ReportConfig:
    file: str = DEFAULT_REPORT_FILENAME
    examples_per_severity: int = 3


@dataclass
class DependencyConfig:
    enabled: bool = True
    npm_audit: bool = True
    osv: bool = True
    timeout: float = 60.0


@dataclass
class AegisConfig:
    """Root configuration object for Aegis."""

    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    exclude_files: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_FILES))
    test_markers: list[str] = field(default_factory=lambda: list(DEFAULT_TEST_MARKERS))
    exclude_test_directories: bool = False
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    deduplicate: bool = False
    report: ReportConfig = field(default_factory=ReportConfig)
    dependencies: DependencyConfig = field(default_factory=DependencyConfig)
    rules: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AegisConfig":
        """Load configuration from a YAML file, falling back to defaults."""
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
            return cls()

        if not isinstance(raw, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", config_path)
            return cls()

        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "AegisConfig":
        """Build config from a parsed YAML dictionary; ill-typed values fall back to defaults."""
        report_data = _mapping(data, "report")
        report = ReportConfig(
            file=_string(report_data, "report.file", DEFAULT_REPORT_FILENAME),
            examples_per_severity=int(_number(report_data, "report.examples_per_severity", 3)),
        )

        deps_data = _mapping(data, "dependencies")
        dependencies = DependencyConfig(
            enabled=bool(deps_data.get("enabled", True)),
            npm_audit=bool(deps_data.get("npm_audit", True)),
            osv=bool(deps_data.get("osv", True)),
            timeout=float(_number(deps_data, "dependencies.timeout", 60.0)),
        )

        exclude_files = _string_list(data, "exclude_files", DEFAULT_EXCLUDE_FILES)
        # A persisted report must never feed the next scan.
        report_name = Path(report.file).name
        if report_name not in exclude_files:
            exclude_files.append(report_name)

        rules = data.get("rules")
        if rules is not None and not isinstance(rules, list):
            logger.warning("Ignoring config key 'rules': expected a list")
            rules = None

        return cls(
            exclude_dirs=_string_list(data, "exclude_dirs", DEFAULT_EXCLUDE_DIRS),
            exclude_files=exclude_files,
            test_markers=_string_list(data, "test_markers", DEFAULT_TEST_MARKERS),
            exclude_test_directories=bool(data.get("exclude_test_directories", False)),
            extensions=_string_list(data, "extensions", DEFAULT_EXTENSIONS),
            deduplicate=bool(data.get("deduplicate", False)),
            report=report,
            dependencies=dependencies,
            rules=list(rules or []),
        )


def _mapping(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring config section %r: expected a mapping", key)
        return {}
    return value


def _string_list(data: dict[str, Any], key: str, default: list[str]) -> list[str]:
    value = data.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        logger.warning("Ignoring config key %r: expected a list of strings", key)
        return list(default)
    return list(value)


def _string(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key.rsplit(".", 1)[-1])
    if value is None:
        return default
    if not isinstance(value, str) or not value:
        logger.warning("Ignoring config key %r: expected a non-empty string", key)
        return default
    return value


def _number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key.rsplit(".", 1)[-1])
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        logger.warning("Ignoring config key %r: expected a non-negative number", key)
        return default
    return value


def generate_default_config() -> str:
    """Generate a default .aegis.yaml configuration file content."""
    return """\
# Aegis Configuration

# Directory names (globs allowed) skipped together with their subtree
exclude_dirs:
  - node_modules
  - .git
  - dist
  - build
  - __pycache__
  - venv
  - .venv

# Exact file names never scanned
exclude_files:
  - .env.example
  - aegis-security-report.json

# Files whose name contains one of these markers are skipped
test_markers:
  - test
  - tests
  - __tests__

# Also skip directories carrying a test marker (legacy behaviour: false)
exclude_test_directories: false

# Collapse findings on the same file/line/category/CWE to the most severe
deduplicate: false

report:
  file: aegis-security-report.json
  examples_per_severity: 3

dependencies:
  enabled: true
  npm_audit: true   # package.json -> npm audit --json
  osv: true         # requirements.txt -> api.osv.dev
  timeout: 60

# Extra detection rules appended to the built-in catalog
# rules:
#   - name: Internal Token
#     category: secret
#     severity: critical
#     pattern: "itk_[a-z0-9]{32}"
#     recommendation: Rotate the token and load it from the vault
#     cwe: CWE-798
"""
