"""
Aegis CLI

Command-line interface for running security scans.

Commands:
    aegis scan [PATH]     - Scan a project tree
    aegis init            - Create a default .aegis.yaml
    aegis rules           - List the active detection rules
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from aegis import __version__
from aegis.core.config import CONFIG_FILENAME, AegisConfig, generate_default_config
from aegis.core.errors import ScanError
from aegis.core.finding import Category, Severity
from aegis.core.orchestrator import ScanOrchestrator
from aegis.reporting.console import ConsoleReporter
from aegis.reporting.json_reporter import JSONReporter
from aegis.rules import load_catalog

SEVERITY_CHOICES = [sev.value for sev in Severity]


def _safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


def _configure_logging(verbose: bool) -> None:
    # stderr keeps stdout clean for --json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.version_option(version=__version__, prog_name="Aegis")
def cli() -> None:
    """
    Aegis - Source Security Scanner

    Detect hardcoded secrets, vulnerability signatures, OWASP compliance
    issues and vulnerable dependencies in a project tree.
    """
    pass


# ═══════════════════════════════════════════════════════
#  aegis scan
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--output", "-o", "output_file", type=click.Path(dir_okay=False), default=None,
              help="Write the detailed report to this file (implies --detailed).")
@click.option("--detailed", is_flag=True, help="Also persist the full JSON report.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON instead of the summary.")
@click.option("--fail-on", type=click.Choice(SEVERITY_CHOICES, case_sensitive=False), default=None,
              help="Minimum severity that causes a non-zero exit code.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to .aegis.yaml configuration file.")
@click.option("--no-deps", is_flag=True, help="Skip the dependency audit.")
@click.option("--dedupe", is_flag=True, help="Collapse findings on the same file/line/category/CWE.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--verbose", "-v", is_flag=True, help="Log progress and skipped files to stderr.")
def scan(
    path: str,
    output_file: Optional[str],
    detailed: bool,
    as_json: bool,
    fail_on: Optional[str],
    config_path: Optional[str],
    no_deps: bool,
    dedupe: bool,
    no_color: bool,
    verbose: bool,
) -> None:
    """Scan a project directory for security issues.

    Examples:

        aegis scan

        aegis scan ./app --detailed --output report.json

        aegis scan --json --fail-on high
    """
    _configure_logging(verbose)
    target = Path(path).resolve()

    # ── Load configuration ──
    cfg_path = Path(config_path) if config_path else target / CONFIG_FILENAME
    config = AegisConfig.load(cfg_path)

    # CLI flags override config
    if dedupe:
        config.deduplicate = True

    try:
        orchestrator = ScanOrchestrator(target, config=config, include_dependencies=not no_deps)
        result = orchestrator.scan()
    except ScanError as exc:
        raise click.ClickException(str(exc)) from exc

    # ── Report ──
    json_reporter = JSONReporter(target, report_filename=config.report.file)
    if as_json:
        _safe_echo(json_reporter.render(result))
    else:
        console = ConsoleReporter(
            target=str(target),
            examples_per_severity=config.report.examples_per_severity,
            color=not no_color,
        )
        console.report(result)

    if detailed or output_file:
        report_path = json_reporter.persist(result, output_file)
        _safe_echo(click.style(f"  Detailed report saved to: {report_path}", fg="green"), err=as_json)

    # ── Exit code ──
    if fail_on and result.at_or_above(Severity.from_string(fail_on)):
        sys.exit(1)


# ═══════════════════════════════════════════════════════
#  aegis init
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--path", "-p", "target_path", type=click.Path(file_okay=False), default=".",
              help="Directory to create the config file in.")
def init(target_path: str) -> None:
    """Create a default .aegis.yaml."""
    target = Path(target_path).resolve()
    target.mkdir(parents=True, exist_ok=True)

    config_file = target / CONFIG_FILENAME
    if config_file.exists():
        _safe_echo(click.style(f"  [!] {config_file} already exists, skipping.", fg="yellow"))
        return

    config_file.write_text(generate_default_config(), encoding="utf-8")
    _safe_echo(click.style(f"  [+] Created {config_file}", fg="green"))
    _safe_echo("  Run 'aegis scan' to start scanning.")


# ═══════════════════════════════════════════════════════
#  aegis rules
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--category", "-c", type=click.Choice(["secret", "vulnerability", "compliance"]),
              default=None, help="Only list one category.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Include custom rules from this configuration file.")
def rules(category: Optional[str], config_path: Optional[str]) -> None:
    """List the active detection rules."""
    config = AegisConfig.load(Path(config_path) if config_path else None)
    try:
        catalog = load_catalog(config)
    except ScanError as exc:
        raise click.ClickException(str(exc)) from exc

    selected = [Category.from_string(category)] if category else None
    for rule in catalog:
        if selected and rule.category not in selected:
            continue
        tags = ", ".join(t for t in (rule.cwe, rule.owasp) if t)
        _safe_echo(
            f"{rule.category.name.lower():14s} {rule.severity.value:9s} {rule.name}"
            + (f"  [{tags}]" if tags else "")
        )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
