"""Keep the CI config directory consistent with what is committed.

Steps, each able to block:

1. No staged file under the directory may use a disallowed extension.
2. Nothing to verify (and nothing printed) unless a file with the recognised
   extension is staged.
3. Every recognised file under the directory must be fully staged; a commit
   carrying only part of the directory's edits is refused.
4. Probe the CI CLI. Missing, too old or unparseable degrades the check to
   a warning.
5. Run the verify command from inside the directory.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from commitgate.checks.base import Check, CheckResult
from commitgate.probe import probe_tool_version
from commitgate.staged import filter_suffix, unstaged_paths, untracked_paths
from commitgate.version import VersionError, version_satisfies

if TYPE_CHECKING:
    from commitgate.context import ExecutionContext
    from commitgate.exec import CommandRunner
    from commitgate.staged import StagedChangeSet
    from commitgate.ui import Reporter

logger = logging.getLogger(__name__)


def _listing(paths: Sequence[str]) -> str:
    return ", ".join(sorted(paths))


class CiConfigCheck(Check):
    name = "ci-config"
    description = "Verify staged CI config files are consistent and valid"

    def __init__(
        self,
        config_dir: str = ".circleci",
        extension: str = ".yml",
        disallowed_extensions: Sequence[str] = (".yaml",),
        tool_argv: Sequence[str] = ("circleci", "version", "--skip-update-check"),
        min_version: str = "0.1.5575",
        verify_command: Sequence[str] = ("make", "ci-verify"),
    ) -> None:
        self.config_dir = config_dir.strip("/")
        self.extension = extension
        self.disallowed_extensions = tuple(disallowed_extensions)
        self.tool_argv = tuple(tool_argv)
        self.min_version = min_version
        self.verify_command = tuple(verify_command)

    def is_applicable(self, staged: StagedChangeSet) -> bool:
        return bool(staged.with_suffix(self.config_dir, (self.extension, *self.disallowed_extensions)))

    def run(
        self,
        ctx: ExecutionContext,
        runner: CommandRunner,
        staged: StagedChangeSet,
        reporter: Reporter,
    ) -> CheckResult:
        wrong = staged.with_suffix(self.config_dir, self.disallowed_extensions)
        staged_configs = staged.with_suffix(self.config_dir, (self.extension,))
        if not wrong and not staged_configs:
            logger.debug("ci-config: no %s files staged; nothing to verify", self.extension)
            return self.passed()

        reporter.header(f"Checking CI config in {self.config_dir}/")
        if wrong:
            return self.block(
                f"Files in {self.config_dir}/ must use the {self.extension} extension, "
                f"not {'/'.join(self.disallowed_extensions)}: {_listing(wrong)}"
            )
        reporter.step(f"No {'/'.join(self.disallowed_extensions)} files staged")

        pending = filter_suffix(
            unstaged_paths(runner, ctx, self.config_dir) + untracked_paths(runner, ctx, self.config_dir),
            (self.extension,),
        )
        if pending:
            return self.block(
                f"Some {self.extension} files in {self.config_dir}/ are not staged: {_listing(set(pending))}. "
                f"Stage all of them (git add {self.config_dir}/) or none."
            )
        reporter.step(f"All {self.extension} changes in {self.config_dir}/ are staged")

        warning = self._tool_unavailable(ctx, runner)
        if warning:
            reporter.warn(f"{warning}; skipping {self.config_dir}/ verification")
            return self.passed(warning)

        reporter.step(f"Running {' '.join(self.verify_command)} in {self.config_dir}/")
        config_ctx = ctx.within(self.config_dir)
        result = runner.run(self.verify_command, cwd=config_ctx.cwd, env=config_ctx.env)
        reporter.tool_output(result)
        if not result.ok:
            return self.block(
                f"CI config verification failed (exit {result.returncode}); "
                f"run `{' '.join(self.verify_command)}` in {self.config_dir}/ for details."
            )

        reporter.step("CI config verified")
        return self.passed()

    def _tool_unavailable(self, ctx: ExecutionContext, runner: CommandRunner) -> str | None:
        """Return a warning when the CI CLI cannot be used, else None."""
        probe = probe_tool_version(runner, ctx, self.tool_argv)
        if not probe.found or probe.version is None:
            return probe.describe()

        try:
            satisfied = version_satisfies(self.min_version, probe.version)
        except VersionError as exc:
            logger.debug("ci-config: cannot compare versions: %s", exc)
            return f"cannot compare {probe.tool} version {probe.version} with {self.min_version}"

        if not satisfied:
            return f"{probe.tool} {probe.version} is older than the required {self.min_version}"
        return None
