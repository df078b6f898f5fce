"""Registered gate checks."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from commitgate.checks.base import Check, CheckResult, Outcome
from commitgate.checks.ci_config import CiConfigCheck
from commitgate.checks.ui_lint import UiLintCheck
from commitgate.config import GateConfig


def _ui_lint(config: GateConfig) -> Check:
    return UiLintCheck(ui_dir=config.ui_dir, linter=config.ui_linter)


def _ci_config(config: GateConfig) -> Check:
    return CiConfigCheck(
        config_dir=config.ci_config_dir,
        extension=config.ci_config_extension,
        disallowed_extensions=config.ci_disallowed_extensions,
        tool_argv=config.tool_version_argv(),
        min_version=config.ci_tool_min_version,
        verify_command=config.ci_verify_command,
    )


CHECK_TYPES: dict[str, Callable[[GateConfig], Check]] = {
    UiLintCheck.name: _ui_lint,
    CiConfigCheck.name: _ci_config,
}


def build_checks(
    config: GateConfig,
    only: Iterable[str] | None = None,
    skip: Iterable[str] | None = None,
) -> list[Check]:
    """Instantiate configured checks in configured order.

    Raises:
        ValueError: If *only* or *skip* name an unknown check
    """
    selected = set(only) if only else None
    skipped = set(skip or ())
    unknown = sorted(((selected or set()) | skipped) - set(CHECK_TYPES))
    if unknown:
        raise ValueError(f"Unknown check(s): {', '.join(unknown)}. Known: {', '.join(CHECK_TYPES)}")

    checks: list[Check] = []
    for name in config.checks:
        if selected is not None and name not in selected:
            continue
        if name in skipped:
            continue
        checks.append(CHECK_TYPES[name](config))
    return checks


__all__ = [
    "CHECK_TYPES",
    "Check",
    "CheckResult",
    "CiConfigCheck",
    "Outcome",
    "UiLintCheck",
    "build_checks",
]
