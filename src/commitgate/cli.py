"""commitgate CLI - git pre-commit gate."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from commitgate import __version__
from commitgate.checks import CHECK_TYPES, build_checks
from commitgate.config import ConfigError, GateConfig, load_config
from commitgate.context import ExecutionContext
from commitgate.doctor import run_doctor
from commitgate.exec import CommandRunner, run_git
from commitgate.gate import run_gate
from commitgate.hooks import install_hook, uninstall_hook
from commitgate.staged import StagedQueryError
from commitgate.ui import Reporter

cli = typer.Typer(
    name="commitgate",
    help="Pre-commit gate: run project checks against staged changes.",
    no_args_is_help=True,
)

REPO_OPTION_HELP = "Repository path (defaults to current working directory)."
CONFIG_OPTION_HELP = "Config file (default: .commitgate.toml/.yaml or [tool.commitgate] in pyproject.toml)."


def _version_option_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log external commands and decisions to stderr."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show commitgate version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    _ = version
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False, show_time=False)],
            force=True,
        )


def _resolve_context(runner: CommandRunner, repo: Path | None) -> ExecutionContext:
    probe = ExecutionContext.for_repo(repo or Path.cwd())
    out = run_git(runner, ["rev-parse", "--show-toplevel"], ctx=probe, check=False)
    root = out.stdout.strip()
    if out.returncode != 0 or not root:
        detail = (out.stderr or out.stdout).strip() or "empty output"
        raise StagedQueryError(f"unable to resolve git repo root from {probe.repo_root}: {detail}")
    return ExecutionContext.for_repo(Path(root))


def _setup(repo: Path | None, config_path: Path | None) -> tuple[CommandRunner, ExecutionContext, GateConfig]:
    try:
        ctx = _resolve_context(CommandRunner(), repo)
        config = load_config(ctx.repo_root, config_path)
    except (StagedQueryError, ConfigError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    return CommandRunner(timeout=config.command_timeout), ctx, config


def _skip_from_env() -> list[str]:
    raw = os.getenv("COMMITGATE_SKIP", "")
    return [name.strip() for name in raw.split(",") if name.strip()]


@cli.command("run")
def run_cmd(
    repo: Path | None = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    only: list[str] | None = typer.Option(
        None,
        "--only",
        help="Run only this check (repeatable). Configured order is kept.",
    ),
) -> None:
    """Run the gate against the staged index (the pre-commit hook entry point).

    Exit codes:
      0 - Commit allowed
      N - Commit blocked (the blocking check's exit code, 1 by default)
      1 - Tooling or config error
    """
    runner, ctx, config = _setup(repo, config_path)

    try:
        checks = build_checks(config, only=only, skip=_skip_from_env())
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    try:
        result = run_gate(checks, ctx, runner, Reporter())
    except StagedQueryError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    raise typer.Exit(result.exit_code)


@cli.command("list")
def list_cmd(
    repo: Path | None = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
) -> None:
    """List configured checks in execution order."""
    _, _, config = _setup(repo, config_path)
    for index, name in enumerate(config.checks, start=1):
        check = CHECK_TYPES[name](config)
        typer.echo(f"{index}. {name} - {check.description}")


@cli.command("doctor")
def doctor_cmd(
    repo: Path | None = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Report which tools the gate's checks can use on this machine.

    Exit codes:
      0 - No failures (warnings allowed)
      2 - One or more checks failed
    """
    runner, ctx, config = _setup(repo, config_path)
    report = run_doctor(runner, ctx, config)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        typer.echo(f"commitgate {report.version}")
        typer.echo(f"repo_root={report.repo_root}")
        typer.echo(f"config={report.config_source or '(defaults)'}")
        for item in report.checks:
            typer.echo(f"[{item.status.upper()}] {item.id}: {item.message}")
            for step in item.remediation:
                typer.echo(f"    - {step}")
        typer.echo(f"Status: {report.status.upper()}")

    raise typer.Exit(2 if report.status == "failed" else 0)


@cli.command("install")
def install_cmd(
    repo: Path | None = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
    force: bool = typer.Option(False, "--force", help="Replace an existing hook (a backup is kept)."),
) -> None:
    """Install the git pre-commit hook that runs `commitgate run`."""
    runner = CommandRunner()
    try:
        ctx = _resolve_context(runner, repo)
        status = install_hook(runner, ctx, force=force)
    except RuntimeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"installed={status.path}")


@cli.command("uninstall")
def uninstall_cmd(
    repo: Path | None = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
) -> None:
    """Remove the commitgate-managed pre-commit hook."""
    runner = CommandRunner()
    try:
        ctx = _resolve_context(runner, repo)
        removed = uninstall_hook(runner, ctx)
    except RuntimeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo("removed=true" if removed else "removed=false (no hook installed)")


def main() -> None:
    cli()
