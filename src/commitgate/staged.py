"""Staged change set snapshot and working-tree diff queries."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import PurePosixPath

from commitgate.context import ExecutionContext
from commitgate.exec import CommandRunner, run_git

logger = logging.getLogger(__name__)


class StagedQueryError(RuntimeError):
    """Raised when git cannot report the index (e.g. not a repository)."""


def _split_z(output: str) -> list[str]:
    return [p for p in output.split("\0") if p]


def _dir_prefix(prefix: str) -> str:
    return prefix.strip("/") + "/"


def is_under(path: str, prefix: str) -> bool:
    """True when *path* is inside directory *prefix* (repo-relative, POSIX)."""
    return path.startswith(_dir_prefix(prefix))


def filter_suffix(paths: Iterable[str], suffixes: Iterable[str]) -> list[str]:
    wanted = {s.lower() for s in suffixes}
    return [p for p in paths if PurePosixPath(p).suffix.lower() in wanted]


@dataclass(frozen=True)
class StagedChangeSet:
    """Read-only snapshot of repo-relative paths staged for commit."""

    paths: tuple[str, ...]

    @classmethod
    def capture(cls, runner: CommandRunner, ctx: ExecutionContext) -> StagedChangeSet:
        result = run_git(runner, ["diff", "--cached", "--name-only", "-z"], ctx=ctx, check=False)
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise StagedQueryError(f"unable to list staged files in {ctx.repo_root}: {detail}")
        staged = cls(paths=tuple(_split_z(result.stdout)))
        logger.debug("staged change set: %d path(s)", len(staged))
        return staged

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def under(self, prefix: str) -> list[str]:
        """Staged paths inside directory *prefix*."""
        return [p for p in self.paths if is_under(p, prefix)]

    def with_suffix(self, prefix: str, suffixes: Iterable[str]) -> list[str]:
        """Staged paths inside *prefix* whose extension is one of *suffixes*."""
        return filter_suffix(self.under(prefix), suffixes)

    def matching(self, pattern: str) -> list[str]:
        """Staged paths matching shell-style *pattern* (``*`` spans ``/``)."""
        return [p for p in self.paths if fnmatch.fnmatchcase(p, pattern)]


def unstaged_paths(runner: CommandRunner, ctx: ExecutionContext, prefix: str) -> list[str]:
    """Tracked paths under *prefix* whose working-tree copy differs from the index."""
    result = run_git(
        runner,
        ["diff", "--name-only", "-z", "--", _dir_prefix(prefix)],
        ctx=ctx,
        check=False,
    )
    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip()
        raise StagedQueryError(f"unable to diff working tree under {prefix}: {detail}")
    return _split_z(result.stdout)


def untracked_paths(runner: CommandRunner, ctx: ExecutionContext, prefix: str) -> list[str]:
    """Untracked, non-ignored paths under *prefix*."""
    result = run_git(
        runner,
        ["ls-files", "--others", "--exclude-standard", "-z", "--", _dir_prefix(prefix)],
        ctx=ctx,
        check=False,
    )
    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip()
        raise StagedQueryError(f"unable to list untracked files under {prefix}: {detail}")
    return _split_z(result.stdout)
