"""Per-check execution context and process-state isolation."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path


@dataclass(frozen=True)
class ExecutionContext:
    """Where a check runs its commands.

    Checks never call ``os.chdir``; they derive a narrower context with
    :meth:`within` and pass its ``cwd`` to the runner.
    """

    repo_root: Path
    cwd: Path
    env: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def for_repo(cls, repo_root: Path, env: Mapping[str, str] | None = None) -> ExecutionContext:
        root = repo_root.resolve()
        return cls(repo_root=root, cwd=root, env=dict(env or {}))

    def within(self, subdir: str | Path) -> ExecutionContext:
        """Return a copy whose working directory is *subdir* of the repo root."""
        return replace(self, cwd=self.repo_root / subdir)

    def resolve(self, relative: str | Path) -> Path:
        return self.cwd / relative


@contextmanager
def isolated() -> Iterator[None]:
    """Restore the process working directory and environment on exit.

    Guards the gate against checks (or libraries they call) that mutate
    ambient process state; restoration also runs when the body raises.
    """
    saved_cwd = os.getcwd()
    saved_env = dict(os.environ)
    try:
        yield
    finally:
        os.chdir(saved_cwd)
        if dict(os.environ) != saved_env:
            os.environ.clear()
            os.environ.update(saved_env)
