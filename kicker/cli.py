"""Thin CLI wrapper for kicker.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.

Invoked without a subcommand, kicker runs the whole pipeline: prepare
packages, build packages, prepare workspace. Each phase's outcome is
reported; a failing phase does not stop the next one.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from kicker import __version__
from kicker.config import Settings, get_settings, print_settings_json
from kicker.errors import KickerError
from kicker.log import setup_logging
from kicker.types import BatchMode, PhaseReport, StepStatus

app = typer.Typer(
    name="kicker",
    help="Kicker - sync, build and stage packages into a deployment workspace",
    invoke_without_command=True,
)
console = Console()
logger = logging.getLogger(__name__)

_STATUS_STYLE = {
    StepStatus.SUCCEEDED: "green",
    StepStatus.SKIPPED: "dim",
    StepStatus.UNREGISTERED: "yellow",
    StepStatus.FAILED: "red",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"kicker version {__version__}")
        raise typer.Exit()


def _parse_mode(mode: str | None, settings: Settings) -> BatchMode:
    try:
        return BatchMode(mode or settings.batch_mode)
    except ValueError:
        console.print(f"[red]Invalid mode: {mode}[/red]")
        console.print("Valid values: fail-fast, best-effort")
        raise typer.Exit(code=1) from None


def _print_report(report: PhaseReport, json_output: bool) -> None:
    if json_output:
        console.print(report.model_dump_json(indent=2))
        return

    console.print(f"[bold]{report.phase.capitalize()} results:[/bold]")
    for r in report.results:
        style = _STATUS_STYLE[r.status]
        line = f"  [{style}]{r.status.value:<12}[/{style}] {r.package}"
        if r.detail:
            line += f"  ({r.detail})"
        console.print(line)
        if r.error:
            console.print(f"      Error: {r.error}")


def _run_phase(name: str, phase: Callable[[], object]) -> bool:
    """Run one pipeline phase, reporting (not raising) its failure."""
    try:
        outcome = phase()
    except KickerError as e:
        logger.error("%s failed [%s]: %s", name, e.code, e)
        console.print(f"[red]✗ {name}: {e}[/red]")
        return False

    ok = not isinstance(outcome, PhaseReport) or outcome.ok
    if ok:
        console.print(f"[green]✓ {name}[/green]")
    else:
        console.print(f"[red]✗ {name}: some packages failed[/red]")
    return ok


def _sync_phase(settings: Settings, mode: BatchMode) -> PhaseReport:
    from kicker.packages.io import load_config
    from kicker.repos.sync import sync_packages

    config = load_config(settings.config_path)
    return sync_packages(
        config,
        settings.packages_dir,
        recursive=settings.recursive_clone,
        mode=mode,
    )


def _build_phase(settings: Settings, mode: BatchMode) -> PhaseReport:
    from kicker.builds.service import build_packages
    from kicker.packages.io import load_config

    config = load_config(settings.config_path)
    return build_packages(config, settings.packages_dir, mode=mode)


def _workspace_phase(settings: Settings) -> object:
    from kicker.workspace.layout import WorkspaceLayout
    from kicker.workspace.service import prepare_workspace

    return prepare_workspace(WorkspaceLayout.from_settings(settings))


def run_pipeline(settings: Settings, mode: BatchMode) -> bool:
    """Run prepare packages, build packages and prepare workspace in order.

    Returns:
        True if every phase succeeded.
    """
    results = [
        _run_phase("prepare packages", lambda: _sync_phase(settings, mode)),
        _run_phase("build packages", lambda: _build_phase(settings, mode)),
        _run_phase("prepare workspace", lambda: _workspace_phase(settings)),
    ]
    return all(results)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Kicker - sync, build and stage packages into a deployment workspace."""
    settings = get_settings()
    setup_logging(settings.log_level)
    if ctx.invoked_subcommand is None:
        if not run_pipeline(settings, _parse_mode(None, settings)):
            raise typer.Exit(code=1)


@app.command()
def run(
    mode: Annotated[
        str | None,
        typer.Option("--mode", "-m", help="fail-fast or best-effort"),
    ] = None,
) -> None:
    """Run the whole pipeline: sync, build, assemble the workspace."""
    settings = get_settings()
    if not run_pipeline(settings, _parse_mode(mode, settings)):
        raise typer.Exit(code=1)


@app.command()
def sync(
    mode: Annotated[
        str | None,
        typer.Option("--mode", "-m", help="fail-fast or best-effort"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Bring every enabled package to its pinned revision."""
    settings = get_settings()
    try:
        report = _sync_phase(settings, _parse_mode(mode, settings))
    except KickerError as e:
        console.print(f"[red]Error ({e.code}): {e}[/red]")
        raise typer.Exit(code=1) from None
    _print_report(report, json_output)
    if not report.ok:
        raise typer.Exit(code=1)


@app.command()
def build(
    mode: Annotated[
        str | None,
        typer.Option("--mode", "-m", help="fail-fast or best-effort"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Build every enabled package with its registered strategy."""
    settings = get_settings()
    try:
        report = _build_phase(settings, _parse_mode(mode, settings))
    except KickerError as e:
        console.print(f"[red]Error ({e.code}): {e}[/red]")
        raise typer.Exit(code=1) from None
    _print_report(report, json_output)
    if not report.ok:
        raise typer.Exit(code=1)


@app.command()
def workspace() -> None:
    """Assemble the workspace from build outputs."""
    settings = get_settings()
    try:
        result = _workspace_phase(settings)
    except KickerError as e:
        console.print(f"[red]Error ({e.code}): {e}[/red]")
        raise typer.Exit(code=1) from None
    console.print(
        f"[green]Workspace ready in {result.workspace_dir} "
        f"({len(result.staged)} files)[/green]"
    )


@app.command()
def status(
    service: Annotated[str, typer.Argument(help="docker-compose service name")],
) -> None:
    """Report whether a docker-compose service is up."""
    from kicker.runner import check_service_status

    if check_service_status(service):
        console.print(f"[green]{service} is up[/green]")
    else:
        console.print(f"[red]{service} is not running[/red]")
        raise typer.Exit(code=1)


config_app = typer.Typer(help="Inspect or bootstrap configuration")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective settings and the loaded package configuration."""
    from kicker.packages.io import config_to_dict, config_to_toml_string, load_config

    settings = get_settings()
    try:
        config = load_config(settings.config_path)
    except KickerError as e:
        console.print(f"[red]Error ({e.code}): {e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        output = {
            "settings": json.loads(print_settings_json(settings)),
            "config": config_to_dict(config),
        }
        console.print(json.dumps(output, indent=2))
        return

    console.print("[bold]Settings:[/bold]")
    console.print(f"  Config file:         {settings.config_path}")
    console.print(f"  Packages directory:  {settings.packages_dir}")
    console.print(f"  Workspace directory: {settings.workspace_dir}")
    console.print(f"  Batch mode:          {settings.batch_mode}")
    console.print(f"  Log level:           {settings.log_level}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(config_to_toml_string(config), markup=False, highlight=False)


@config_app.command("init")
def config_init(
    path: Annotated[
        Path | None,
        typer.Argument(help="Where to write the config (default: settings path)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """Write the default configuration file."""
    from kicker.packages.io import write_default_config

    target = path or get_settings().config_path
    try:
        config = write_default_config(target, overwrite=force)
    except FileExistsError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Use --force to overwrite")
        raise typer.Exit(code=1) from None

    console.print(
        f"[green]Wrote {target} ({len(config.packages)} packages, "
        f"{len(config.images)} images)[/green]"
    )


if __name__ == "__main__":
    app()
