"""Install and remove the git pre-commit hook shim."""

from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from commitgate.context import ExecutionContext
from commitgate.exec import CommandRunner, ExecError, run_git

HOOK_NAME = "pre-commit"
HOOK_MARKER = "# managed-by: commitgate"
BACKUP_SUFFIX = ".commitgate.bak"

HookState = Literal["missing", "managed", "foreign"]


def hook_script(python: str | None = None) -> str:
    """Return the shim text, pinned to the interpreter that installed it."""
    interpreter = shlex.quote(python or sys.executable)
    return (
        "#!/bin/sh\n"
        f"{HOOK_MARKER}\n"
        "# Reinstall with: commitgate install --force\n"
        f'exec {interpreter} -m commitgate run "$@"\n'
    )


class HookInstallRefusal(RuntimeError):
    """Raised when installing would clobber a hook commitgate does not own."""


@dataclass(frozen=True)
class HookStatus:
    path: Path
    state: HookState


def resolve_hooks_dir(runner: CommandRunner, ctx: ExecutionContext) -> Path:
    """Return the hooks directory, honouring ``core.hooksPath``."""
    try:
        out = run_git(runner, ["rev-parse", "--git-path", "hooks"], ctx=ctx)
    except ExecError as exc:
        raise RuntimeError(f"unable to locate git hooks directory from {ctx.repo_root}: {exc}") from exc
    hooks = Path(out.stdout.strip())
    if not hooks.is_absolute():
        hooks = ctx.repo_root / hooks
    return hooks


def hook_status(runner: CommandRunner, ctx: ExecutionContext) -> HookStatus:
    path = resolve_hooks_dir(runner, ctx) / HOOK_NAME
    if not path.exists():
        return HookStatus(path=path, state="missing")
    text = path.read_text(encoding="utf-8", errors="replace")
    return HookStatus(path=path, state="managed" if HOOK_MARKER in text else "foreign")


def install_hook(runner: CommandRunner, ctx: ExecutionContext, *, force: bool = False) -> HookStatus:
    """Write the pre-commit shim.

    A managed hook is rewritten in place. A foreign hook is only replaced
    with *force*, after copying it to ``pre-commit.commitgate.bak``.
    """
    status = hook_status(runner, ctx)
    if status.state == "foreign":
        if not force:
            raise HookInstallRefusal(
                f"Refused: {status.path} exists and is not managed by commitgate (use --force to replace it)."
            )
        backup = status.path.with_name(f"{HOOK_NAME}{BACKUP_SUFFIX}")
        backup.write_bytes(status.path.read_bytes())

    status.path.parent.mkdir(parents=True, exist_ok=True)
    status.path.write_text(hook_script(), encoding="utf-8")
    status.path.chmod(0o755)
    return HookStatus(path=status.path, state="managed")


def uninstall_hook(runner: CommandRunner, ctx: ExecutionContext) -> bool:
    """Remove the managed hook; returns False when there is nothing to remove."""
    status = hook_status(runner, ctx)
    if status.state == "foreign":
        raise HookInstallRefusal(f"Refused: {status.path} is not managed by commitgate; leaving it in place.")
    if status.state == "missing":
        return False
    status.path.unlink()
    return True
