"""Host dependency checks for the external tools vmput drives."""

from __future__ import annotations

import os

from .config import Settings
from .util import which


def required_commands(settings: Settings) -> list[str]:
    cmds = [settings.virsh, settings.copy_in]
    if settings.sudo and os.geteuid() != 0:
        cmds.append('sudo')
    return cmds


def check_commands(settings: Settings) -> list[str]:
    return [c for c in required_commands(settings) if which(c) is None]
