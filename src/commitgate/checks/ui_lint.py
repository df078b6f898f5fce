"""Lint staged UI changes with the project's own linter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from commitgate.checks.base import Check, CheckResult

if TYPE_CHECKING:
    from commitgate.context import ExecutionContext
    from commitgate.exec import CommandRunner
    from commitgate.staged import StagedChangeSet
    from commitgate.ui import Reporter

logger = logging.getLogger(__name__)


class UiLintCheck(Check):
    """Run ``<ui_dir>/<linter>`` from inside ``ui_dir`` when UI files are staged.

    The linter is installed per developer (e.g. by ``npm install``); when it
    is absent the check stays silent instead of failing.
    """

    name = "ui-lint"
    description = "Lint staged changes under the UI directory"

    def __init__(self, ui_dir: str = "ui", linter: str = "node_modules/.bin/lint-staged") -> None:
        self.ui_dir = ui_dir.strip("/")
        self.linter = linter

    def is_applicable(self, staged: StagedChangeSet) -> bool:
        return bool(staged.under(self.ui_dir))

    def run(
        self,
        ctx: ExecutionContext,
        runner: CommandRunner,
        staged: StagedChangeSet,
        reporter: Reporter,
    ) -> CheckResult:
        ui_ctx = ctx.within(self.ui_dir)
        linter_path = ui_ctx.resolve(self.linter)
        if not linter_path.is_file():
            logger.debug("ui-lint: %s not present; skipping", linter_path)
            return self.passed()

        reporter.header(f"Running UI linter on {len(staged.under(self.ui_dir))} staged file(s) in {self.ui_dir}/")
        result = runner.run([str(linter_path)], cwd=ui_ctx.cwd, env=ui_ctx.env)
        reporter.tool_output(result)

        if not result.ok:
            return self.block(
                f"UI lint errors in {self.ui_dir}/ (exit {result.returncode}); fix them and re-stage."
            )

        reporter.step("UI lint passed")
        return self.passed()
