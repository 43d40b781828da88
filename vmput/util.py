"""Shared utility helpers for subprocess execution, paths, and command formatting."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

log = logger


@dataclass(frozen=True)
class CmdResult:
    code: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Captured text, preferring stderr when both streams are present."""
        return self.stderr if self.stderr.strip() else self.stdout


class CmdError(RuntimeError):
    def __init__(self, cmd: Sequence[str] | str, result: CmdResult):
        self.cmd = cmd
        self.result = result
        super().__init__(
            f'Command failed (code={result.code}): {cmd}\n{result.output}'.strip()
        )


def shell_join(cmd: Sequence[str]) -> str:
    return ' '.join(shlex.quote(c) for c in cmd)


def sudo_prefix(cmd: Sequence[str], *, sudo: bool = False) -> list[str]:
    if sudo and os.geteuid() != 0:
        # Non-interactive sudo: fail fast if password/TTY is required.
        return ['sudo', '-n', *cmd]
    return list(cmd)


def run_cmd(
    cmd: Sequence[str],
    *,
    sudo: bool = False,
    check: bool = True,
    combined: bool = False,
    text: bool = True,
) -> CmdResult:
    """
    Run ``cmd`` to completion and capture its output.

    With ``combined=True`` stderr is folded into stdout in arrival order and
    the result's ``stderr`` is empty. The child never inherits our stdin, so
    data piped into the calling process stays available to it.

    Raises:
        CmdError: if ``check`` is set and the command exits non-zero.
        OSError: if the executable cannot be started.
    """
    original_cmd = list(cmd)
    cmd = sudo_prefix(cmd, sudo=sudo)
    if cmd != original_cmd:
        log.opt(depth=1).debug(
            'Running with sudo: {}', shell_join(original_cmd)
        )
    log.opt(depth=1).debug('RUN: {}', shell_join(cmd))
    p = subprocess.run(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if combined else subprocess.PIPE,
        text=text,
    )
    res = CmdResult(p.returncode, p.stdout or '', p.stderr or '')
    if check and p.returncode != 0:
        log.opt(depth=1).error(
            'Command failed code={} cmd={} stderr={} stdout={}',
            p.returncode,
            shell_join(cmd),
            res.stderr.strip(),
            res.stdout.strip(),
        )
        raise CmdError(cmd, res)
    if p.returncode == 0:
        log.opt(depth=1).debug('Command ok code=0 cmd={}', shell_join(cmd))
    return res


def which(cmd: str) -> Optional[str]:
    from shutil import which as _which

    return _which(cmd)


def expand(path: str) -> str:
    return os.path.expandvars(os.path.expanduser(path))
