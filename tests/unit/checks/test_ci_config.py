"""Tests for the CI config consistency check."""

from __future__ import annotations

from commitgate.checks import CiConfigCheck, Outcome, UiLintCheck
from commitgate.gate import run_gate
from commitgate.staged import StagedChangeSet
from commitgate.ui import BLOCKED_LINE

UNSTAGED = ("git", "diff", "--name-only", "-z", "--", ".circleci/")
UNTRACKED = ("git", "ls-files", "--others", "--exclude-standard", "-z", "--", ".circleci/")
PROBE = ("circleci", "version", "--skip-update-check")
VERIFY = ("make", "ci-verify")
CLEAN = (0, "", "")


def _output(reporter) -> str:
    return reporter.console.file.getvalue()


def _staged(*paths: str) -> StagedChangeSet:
    return StagedChangeSet(paths=paths)


def test_applicability_needs_a_config_extension_under_dir():
    check = CiConfigCheck()
    assert check.is_applicable(_staged(".circleci/config/x.yml"))
    assert check.is_applicable(_staged(".circleci/config/jobs.yaml"))
    assert not check.is_applicable(_staged(".circleci/Makefile", ".circleci/README.md"))
    assert not check.is_applicable(_staged("ui/x.yml", "config.yml"))


def test_yaml_extension_blocks_even_without_yml(runner_stub, ctx, reporter):
    runner = runner_stub()
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/jobs.yaml"), reporter)

    assert result.outcome is Outcome.BLOCKED
    assert ".yml" in result.reason
    assert ".yaml" in result.reason
    assert ".circleci/config/jobs.yaml" in result.reason
    assert runner.calls == []


def test_yaml_extension_blocks_alongside_yml(runner_stub, ctx, reporter):
    result = CiConfigCheck().run(
        ctx, runner_stub(), _staged(".circleci/a.yml", ".circleci/b.yaml"), reporter
    )
    assert result.outcome is Outcome.BLOCKED


def test_no_yml_staged_passes_silently(runner_stub, ctx, reporter):
    runner = runner_stub()
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/Makefile"), reporter)

    assert result.outcome is Outcome.PASS
    assert runner.calls == []
    assert _output(reporter) == ""


def test_gate_is_silent_for_non_config_files_under_dir(runner_stub, ctx, reporter):
    gate = run_gate(
        [UiLintCheck(), CiConfigCheck()],
        ctx,
        runner_stub(),
        reporter,
        staged=_staged(".circleci/README.md", ".circleci/Makefile"),
    )

    assert gate.allowed
    assert [r.outcome for r in gate.results] == [Outcome.NOT_APPLICABLE, Outcome.NOT_APPLICABLE]
    assert _output(reporter) == ""


def test_partial_staging_blocks(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: (0, ".circleci/config/y.yml\0", ""),
        UNTRACKED: CLEAN,
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)

    assert result.outcome is Outcome.BLOCKED
    assert ".circleci/config/y.yml" in result.reason
    assert "not staged" in result.reason
    assert PROBE not in runner.argvs()


def test_untracked_yml_counts_as_unstaged(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: CLEAN,
        UNTRACKED: (0, ".circleci/config/new.yml\0.circleci/notes.txt\0", ""),
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)

    assert result.outcome is Outcome.BLOCKED
    assert "new.yml" in result.reason
    assert "notes.txt" not in result.reason


def test_unstaged_non_yml_files_are_ignored(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: (0, ".circleci/Makefile\0", ""),
        UNTRACKED: CLEAN,
        PROBE: (0, "0.1.5580\n", ""),
        VERIFY: CLEAN,
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)
    assert result.outcome is Outcome.PASS


def test_missing_cli_degrades_to_warning(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: CLEAN,
        UNTRACKED: CLEAN,
        PROBE: (127, "", "circleci: not found"),
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)

    assert result.outcome is Outcome.PASS
    assert result.warnings and "not installed" in result.warnings[0]
    assert VERIFY not in runner.argvs()
    assert "WARNING" in _output(reporter)
    assert BLOCKED_LINE not in _output(reporter)


def test_cli_without_skip_flag_degrades_to_warning(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: CLEAN,
        UNTRACKED: CLEAN,
        PROBE: (1, "", "Error: unknown flag: --skip-update-check"),
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)
    assert result.outcome is Outcome.PASS
    assert "too old" in result.warnings[0]


def test_old_cli_degrades_to_warning(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: CLEAN,
        UNTRACKED: CLEAN,
        PROBE: (0, "0.1.100+abc\n", ""),
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)

    assert result.outcome is Outcome.PASS
    assert "older than the required 0.1.5575" in result.warnings[0]
    assert VERIFY not in runner.argvs()


def test_verify_runs_in_config_dir_and_passes(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: CLEAN,
        UNTRACKED: CLEAN,
        PROBE: (0, "0.2.0\n", ""),
        VERIFY: (0, "Config file at config.yml is valid.\n", ""),
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml", ".circleci/config/y.yml"), reporter)

    assert result.outcome is Outcome.PASS
    assert result.warnings == ()
    assert runner.calls[-1] == (VERIFY, ctx.repo_root / ".circleci")
    lines = _output(reporter).splitlines()
    assert lines[0].startswith("==> ")
    assert all(line.startswith(("==>", "-->")) for line in lines if "valid" not in line)
    assert lines[-1] == "--> CI config verified"


def test_verify_failure_blocks(runner_stub, ctx, reporter):
    runner = runner_stub({
        UNSTAGED: CLEAN,
        UNTRACKED: CLEAN,
        PROBE: (0, "0.1.5575\n", ""),
        VERIFY: (2, "", "config.yml: Error: jobs.build is invalid\n"),
    })
    result = CiConfigCheck().run(ctx, runner, _staged(".circleci/config/x.yml"), reporter)

    assert result.outcome is Outcome.BLOCKED
    assert "verification failed" in result.reason
    assert "jobs.build is invalid" in _output(reporter)


def test_custom_directory_and_extensions(runner_stub, ctx, reporter):
    check = CiConfigCheck(
        config_dir="ci",
        extension=".yaml",
        disallowed_extensions=(".yml",),
        tool_argv=("ci-tool", "--version"),
        min_version="2.0",
        verify_command=("./verify.sh",),
    )
    result = check.run(ctx, runner_stub(), _staged("ci/pipeline.yml"), reporter)
    assert result.outcome is Outcome.BLOCKED
    assert "must use the .yaml extension" in result.reason
