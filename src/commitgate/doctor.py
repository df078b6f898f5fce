"""Local environment checks for the pre-commit gate (doctor command).

Reports whether the tools each gate check depends on are present. Missing
optional tools are warnings: the gate degrades without them.
"""

import shutil
from dataclasses import asdict, dataclass, field
from typing import Literal

from commitgate import __version__
from commitgate.config import GateConfig
from commitgate.context import ExecutionContext
from commitgate.exec import CommandRunner
from commitgate.hooks import hook_status
from commitgate.probe import probe_tool_version
from commitgate.version import VersionError, version_satisfies


@dataclass
class CheckItem:
    """Individual check result."""

    id: str
    status: Literal["pass", "fail", "warn"]
    message: str
    remediation: list[str] = field(default_factory=list)


@dataclass
class DoctorReport:
    """Complete doctor check report."""

    version: str = __version__
    repo_root: str = ""
    config_source: str | None = None
    status: Literal["passed", "failed"] = "passed"
    checks: list[CheckItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _check_git() -> CheckItem:
    if shutil.which("git") is None:
        return CheckItem(
            id="git",
            status="fail",
            message="git executable not found on PATH",
            remediation=["Install git; the gate reads the staged index through it"],
        )
    return CheckItem(id="git", status="pass", message="git is available")


def _check_hook(runner: CommandRunner, ctx: ExecutionContext) -> CheckItem:
    try:
        status = hook_status(runner, ctx)
    except RuntimeError as e:
        return CheckItem(
            id="hook",
            status="fail",
            message=f"Cannot locate git hooks: {e}",
            remediation=["Run from inside a git repository or pass --repo"],
        )

    if status.state == "managed":
        return CheckItem(id="hook", status="pass", message=f"pre-commit hook installed at {status.path}")
    if status.state == "foreign":
        return CheckItem(
            id="hook",
            status="warn",
            message=f"{status.path} exists but is not managed by commitgate",
            remediation=["Replace it with: commitgate install --force"],
        )
    return CheckItem(
        id="hook",
        status="warn",
        message="pre-commit hook not installed",
        remediation=["Install it with: commitgate install"],
    )


def _check_ui_linter(ctx: ExecutionContext, config: GateConfig) -> CheckItem:
    linter = ctx.within(config.ui_dir).resolve(config.ui_linter)
    if linter.is_file():
        return CheckItem(id="ui_linter", status="pass", message=f"UI linter found at {linter}")
    return CheckItem(
        id="ui_linter",
        status="warn",
        message=f"UI linter not found at {linter}; ui-lint will be skipped",
        remediation=[f"Install UI dependencies (e.g. `npm install` in {config.ui_dir}/)"],
    )


def _check_ci_tool(runner: CommandRunner, ctx: ExecutionContext, config: GateConfig) -> CheckItem:
    probe = probe_tool_version(runner, ctx, config.tool_version_argv())
    remediation = [f"Install or upgrade {config.ci_tool} to {config.ci_tool_min_version} or newer"]
    if not probe.found or probe.version is None:
        return CheckItem(
            id="ci_tool",
            status="warn",
            message=f"{probe.describe()}; ci-config verification will be skipped",
            remediation=remediation,
        )

    try:
        ok = version_satisfies(config.ci_tool_min_version, probe.version)
    except VersionError as e:
        return CheckItem(id="ci_tool", status="warn", message=str(e), remediation=remediation)

    if not ok:
        return CheckItem(
            id="ci_tool",
            status="warn",
            message=f"{probe.describe()} is older than {config.ci_tool_min_version}",
            remediation=remediation,
        )
    return CheckItem(id="ci_tool", status="pass", message=f"{probe.describe()} (>= {config.ci_tool_min_version})")


def run_doctor(runner: CommandRunner, ctx: ExecutionContext, config: GateConfig) -> DoctorReport:
    """Run environment checks and summarise them.

    Only a missing git or an unlocatable hooks directory fails the report.
    """
    report = DoctorReport(
        repo_root=str(ctx.repo_root),
        config_source=str(config.source) if config.source else None,
    )

    report.checks.append(_check_git())
    report.checks.append(_check_hook(runner, ctx))
    if "ui-lint" in config.checks:
        report.checks.append(_check_ui_linter(ctx, config))
    if "ci-config" in config.checks:
        report.checks.append(_check_ci_tool(runner, ctx, config))

    report.status = "failed" if any(c.status == "fail" for c in report.checks) else "passed"
    return report
