"""External tool version probe."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from commitgate.context import ExecutionContext
from commitgate.exec import CommandRunner
from commitgate.version import Version, VersionError

logger = logging.getLogger(__name__)

ProbeStatus = Literal["found", "missing", "unsupported", "unparseable"]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of asking a tool for its version.

    Only ``found`` carries a version; every other status is a soft failure
    the caller is expected to degrade on.
    """

    tool: str
    status: ProbeStatus
    version: str | None = None
    detail: str = ""

    @property
    def found(self) -> bool:
        return self.status == "found"

    def describe(self) -> str:
        if self.status == "found":
            return f"{self.tool} {self.version}"
        if self.status == "missing":
            return f"{self.tool} is not installed"
        if self.status == "unsupported":
            return f"{self.tool} is too old to report its version ({self.detail})"
        return f"{self.tool} reported an unrecognised version: {self.detail!r}"


def probe_tool_version(
    runner: CommandRunner,
    ctx: ExecutionContext,
    argv: Sequence[str],
) -> ProbeResult:
    """Run ``argv`` (tool plus version arguments) and extract the version.

    Never raises for an absent or misbehaving tool. A non-zero exit is
    read as the tool not supporting the requested flags.
    """
    tool = argv[0]
    result = runner.run(argv, cwd=ctx.repo_root, env=ctx.env)
    if result.not_found:
        logger.debug("probe: %s not installed", tool)
        return ProbeResult(tool=tool, status="missing", detail=result.stderr.strip())
    if not result.ok:
        detail = (result.stderr or result.stdout).strip().splitlines()
        return ProbeResult(
            tool=tool,
            status="unsupported",
            detail=detail[0] if detail else f"exit {result.returncode}",
        )

    raw = result.stdout.strip()
    try:
        parsed = Version.parse(raw)
    except VersionError:
        logger.debug("probe: %s printed unparseable version %r", tool, raw)
        return ProbeResult(tool=tool, status="unparseable", detail=raw)

    logger.debug("probe: %s version %s", tool, parsed.text)
    return ProbeResult(tool=tool, status="found", version=parsed.text)
