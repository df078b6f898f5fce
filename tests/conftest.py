"""Pytest configuration and fixtures for commitgate tests."""
from __future__ import annotations

import io
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest
from rich.console import Console

from commitgate.context import ExecutionContext
from commitgate.exec import ExecError, ExecResult
from commitgate.ui import Reporter


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))
    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'commitgate' (the package) not 'src/commitgate' (filesystem path).",
            returncode=1
        )


class RunnerStub:
    """CommandRunner stand-in keyed by argv.

    ``outputs`` maps an argv tuple to ``(returncode, stdout, stderr)``.
    Unknown argv fails the test so every external call is accounted for.
    """

    def __init__(self, outputs: Mapping[tuple[str, ...], tuple[int, str, str]] | None = None):
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[tuple[str, ...], Path]] = []

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        check: bool = False,
    ) -> ExecResult:
        _ = env
        key = tuple(argv)
        self.calls.append((key, cwd))
        if key not in self.outputs:
            raise AssertionError(f"missing stub for argv: {list(argv)}")
        code, stdout, stderr = self.outputs[key]
        result = ExecResult(argv=key, cwd=cwd, returncode=code, stdout=stdout, stderr=stderr)
        if check and code != 0:
            raise ExecError(result)
        return result

    def argvs(self) -> list[tuple[str, ...]]:
        return [argv for argv, _ in self.calls]


def staged_output(*paths: str) -> tuple[int, str, str]:
    return (0, "".join(f"{p}\0" for p in paths), "")


@pytest.fixture
def runner_stub() -> type[RunnerStub]:
    return RunnerStub


@pytest.fixture
def z_output():
    return staged_output


@pytest.fixture
def ctx(tmp_path: Path) -> ExecutionContext:
    return ExecutionContext.for_repo(tmp_path)


@pytest.fixture
def reporter() -> Reporter:
    return Reporter(console=Console(file=io.StringIO(), width=200, color_system=None, highlight=False))


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one commit."""
    repo = tmp_path / "test_repo"
    repo.mkdir()

    subprocess.run(["git", "init"], cwd=repo, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=repo,
        check=True,
        capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=repo,
        check=True,
        capture_output=True,
    )

    (repo / "README.md").write_text("# Test Repo\n")
    subprocess.run(["git", "add", "README.md"], cwd=repo, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo,
        check=True,
        capture_output=True,
    )

    return repo


@pytest.fixture
def git_add(git_repo: Path):
    """Write files into ``git_repo`` and optionally stage them."""

    def _add(relative: str, content: str = "x: 1\n", *, stage: bool = True) -> Path:
        path = git_repo / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        if stage:
            subprocess.run(["git", "add", relative], cwd=git_repo, check=True, capture_output=True)
        return path

    return _add
