"""Command-line interface for provcheck.

This module uses the :mod:`click` library to expose the verification
engine to the installer.  ``health-check`` runs one component (or
``all``) and exits non-zero when it fails, with a distinct status for an
aborted run; ``config-check`` reports configuration keys a component still needs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import click

from . import __version__
from .config import TargetConfiguration, load_target_configuration
from .errors import ProvcheckError
from .health import HealthDomain, Orchestrator, health_check
from .notify import ConsoleSink

# Exit status used when a failing run was aborted
EXIT_ABORTED = 1
# Exit status for a failing run made with --no-exit-on-error
EXIT_FAILED = 3


@click.group()
@click.version_option(__version__, prog_name="provcheck")
def cli() -> None:
    """provcheck command-line interface."""
    pass


def _load_config(config_path: Optional[str]) -> TargetConfiguration:
    """Load the target configuration, converting errors for click."""
    try:
        return load_target_configuration(Path(config_path) if config_path else None)
    except OSError as exc:
        raise click.ClickException(f"Cannot read configuration file: {exc}")


def _orchestrator_options() -> Dict[str, Any]:
    """Extra keyword arguments for the orchestrator.

    Empty in production, where the real command runner and paths are
    used.  Factored out so tests can monkeypatch in stub runners.
    """
    return {}


@cli.command(name="health-check")
@click.argument("component", type=str)
@click.option(
    "--exit-on-error/--no-exit-on-error",
    default=True,
    help="Abort with status 1 when any error-level check fails (default: enabled)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Installer configuration file with KEY=VALUE lines (environment overrides it)",
)
@click.option(
    "--scrub/--no-scrub",
    default=None,
    help="Answer the ZFS scrub prompt up front instead of asking interactively",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the verdict as JSON on stdout (log lines go to stderr)",
)
@click.option(
    "--out",
    type=str,
    default=None,
    help="Optional path to write the JSON verdict to",
)
def health_check_command(
    component: str,
    exit_on_error: bool,
    config_path: Optional[str],
    scrub: Optional[bool],
    json_output: bool,
    out: Optional[str],
) -> None:
    """Verify COMPONENT: disks, luks, zfs, system, network or all.

    Every sub-check is logged as it runs.  The command exits 0 when the
    component passed, 1 when a failing run was aborted, 2 for an unknown
    component or missing configuration and 3 when the component failed
    under ``--no-exit-on-error``.
    """
    # Validate the component before touching configuration or probes
    try:
        domain = HealthDomain.parse(component)
    except ProvcheckError as exc:
        raise click.UsageError(str(exc))
    config = _load_config(config_path)
    sink = ConsoleSink(assume=scrub, to_stderr=json_output)
    try:
        verdict = health_check(
            domain,
            exit_on_error,
            config=config,
            sink=sink,
            **_orchestrator_options(),
        )
    except ProvcheckError as exc:
        raise click.UsageError(str(exc))

    report = verdict.model_dump(mode="json")
    if out:
        report_path = Path(out)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with report_path.open("w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, sort_keys=True)
    click.echo(
        f"health-check: component={domain.value} passed={verdict.passed} "
        f"errors={verdict.error_count} warnings={verdict.warning_count}",
        err=json_output,
    )
    if json_output:
        click.echo(json.dumps(report, indent=2, sort_keys=True))
    ctx = click.get_current_context()
    if verdict.aborted:
        ctx.exit(EXIT_ABORTED)
    ctx.exit(0 if verdict.passed else EXIT_FAILED)


@cli.command(name="config-check")
@click.argument("component", type=str, default="all")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Installer configuration file with KEY=VALUE lines (environment overrides it)",
)
def config_check(component: str, config_path: Optional[str]) -> None:
    """Check that the configuration keys COMPONENT needs are set.

    No probes are run.  Missing keys are listed on stderr and the
    command exits with status 2.
    """
    try:
        domain = HealthDomain.parse(component)
    except ProvcheckError as exc:
        raise click.UsageError(str(exc))
    config = _load_config(config_path)
    missing = Orchestrator(config, ConsoleSink()).missing_configuration(domain)
    if missing:
        click.echo("Missing configuration keys: " + ", ".join(missing), err=True)
        ctx = click.get_current_context()
        ctx.exit(2)
    click.echo(f"OK ({domain.value})")
