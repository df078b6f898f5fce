"""Command runner used for every external tool invocation."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from commitgate.context import ExecutionContext

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def not_found(self) -> bool:
        return self.returncode == EXIT_NOT_FOUND


class ExecError(RuntimeError):
    """Raised when a command returns non-zero in check mode."""

    def __init__(self, result: ExecResult):
        rendered = " ".join(result.argv)
        detail = (result.stderr or result.stdout).strip()
        super().__init__(f"command failed ({result.returncode}): {rendered}\n{detail}")
        self.result = result


class CommandRunner:
    """Run external commands and return structured results.

    A missing executable and a timeout are reported as results with exit
    codes 127 and 124 rather than raised, so callers only branch on
    ``returncode``. Tests substitute any object with the same ``run``
    signature.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        check: bool = False,
    ) -> ExecResult:
        """Run *argv* in *cwd* with *env* overlaid on the process environment."""
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        logger.debug("exec %s (cwd=%s)", " ".join(argv), cwd)
        try:
            completed = subprocess.run(
                list(argv),
                cwd=cwd,
                env=full_env,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
            result = ExecResult(
                argv=tuple(argv),
                cwd=cwd.resolve(),
                returncode=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
            result = ExecResult(
                argv=tuple(argv),
                cwd=cwd.resolve(),
                returncode=EXIT_NOT_FOUND,
                stdout="",
                stderr=f"{argv[0]}: {exc.strerror or exc}",
            )
        except subprocess.TimeoutExpired:
            result = ExecResult(
                argv=tuple(argv),
                cwd=cwd.resolve(),
                returncode=EXIT_TIMEOUT,
                stdout="",
                stderr=f"{argv[0]}: timed out after {self.timeout}s",
            )

        logger.debug("exit %d: %s", result.returncode, " ".join(argv))
        if check and result.returncode != 0:
            raise ExecError(result)
        return result


def run_git(
    runner: CommandRunner,
    args: list[str],
    *,
    ctx: ExecutionContext,
    check: bool = True,
) -> ExecResult:
    """Run git command rooted at the context's repository."""
    return runner.run(["git", *args], cwd=ctx.repo_root, env=ctx.env, check=check)
