"""Shared types for gate checks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from commitgate.context import ExecutionContext
    from commitgate.exec import CommandRunner
    from commitgate.staged import StagedChangeSet
    from commitgate.ui import Reporter


class Outcome(str, Enum):
    """Per-check result state."""

    NOT_APPLICABLE = "not-applicable"
    PASS = "pass"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class CheckResult:
    """What a check reports back to the gate."""

    name: str
    outcome: Outcome
    reason: str = ""
    exit_code: int = 0
    warnings: tuple[str, ...] = ()

    @property
    def blocked(self) -> bool:
        return self.outcome is Outcome.BLOCKED


class Check(ABC):
    """A named rule scoped to part of the staged change set.

    ``is_applicable`` must be free of side effects and output; ``run`` is
    only called when it returns True.
    """

    name: str = ""
    description: str = ""

    @abstractmethod
    def is_applicable(self, staged: StagedChangeSet) -> bool:
        """Return True when *staged* touches this check's scope."""

    @abstractmethod
    def run(
        self,
        ctx: ExecutionContext,
        runner: CommandRunner,
        staged: StagedChangeSet,
        reporter: Reporter,
    ) -> CheckResult:
        """Do the check's work and map the outcome to pass or blocked."""

    def not_applicable(self) -> CheckResult:
        return CheckResult(name=self.name, outcome=Outcome.NOT_APPLICABLE)

    def passed(self, *warnings: str) -> CheckResult:
        return CheckResult(name=self.name, outcome=Outcome.PASS, warnings=tuple(warnings))

    def block(self, reason: str, exit_code: int = 1) -> CheckResult:
        return CheckResult(name=self.name, outcome=Outcome.BLOCKED, reason=reason, exit_code=exit_code or 1)
