"""Pre-commit gate orchestrator.

Runs checks in order against one staged-set snapshot and stops at the first
block. Each check runs inside :func:`commitgate.context.isolated`, so a
check that changes directory or environment cannot affect the next one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from commitgate.checks.base import Check, CheckResult, Outcome
from commitgate.context import ExecutionContext, isolated
from commitgate.exec import CommandRunner
from commitgate.staged import StagedChangeSet
from commitgate.ui import Reporter

logger = logging.getLogger(__name__)


@dataclass
class GateResult:
    """Aggregate outcome of a gate run."""

    exit_code: int = 0
    results: list[CheckResult] = field(default_factory=list)

    @property
    def blocked(self) -> CheckResult | None:
        for result in self.results:
            if result.blocked:
                return result
        return None

    @property
    def allowed(self) -> bool:
        return self.exit_code == 0


def _run_one(
    check: Check,
    ctx: ExecutionContext,
    runner: CommandRunner,
    staged: StagedChangeSet,
    reporter: Reporter,
) -> CheckResult:
    try:
        if not check.is_applicable(staged):
            logger.debug("%s: not applicable", check.name)
            return check.not_applicable()
        with isolated():
            return check.run(ctx, runner, staged, reporter)
    except Exception as exc:
        logger.debug("%s raised", check.name, exc_info=True)
        return check.block(f"check '{check.name}' failed unexpectedly: {exc}")


def run_gate(
    checks: Sequence[Check],
    ctx: ExecutionContext,
    runner: CommandRunner,
    reporter: Reporter,
    staged: StagedChangeSet | None = None,
) -> GateResult:
    """Run *checks* in order; the first blocked result ends the run.

    Args:
        checks: Checks in execution order
        ctx: Repository execution context
        runner: Command runner shared by all checks
        reporter: Output sink
        staged: Pre-captured snapshot; captured from git when omitted

    Returns:
        GateResult whose exit_code is 0 or the blocking check's exit code

    Raises:
        StagedQueryError: If the staged set cannot be captured
    """
    if staged is None:
        staged = StagedChangeSet.capture(runner, ctx)

    gate = GateResult()
    for check in checks:
        result = _run_one(check, ctx, runner, staged, reporter)
        gate.results.append(result)
        logger.debug("%s: %s", check.name, result.outcome.value)

        if result.outcome is Outcome.BLOCKED:
            reporter.blocked(result.reason)
            gate.exit_code = result.exit_code
            break

    return gate
