"""Tests for host command checks."""

from __future__ import annotations

from vmput.config import Settings
from vmput.host import check_commands, required_commands


def test_check_commands(monkeypatch) -> None:
    present = {'virsh', 'sudo'}
    monkeypatch.setattr('vmput.host.os.geteuid', lambda: 1000)
    monkeypatch.setattr(
        'vmput.host.which',
        lambda cmd: f'/usr/bin/{cmd}' if cmd in present else None,
    )
    assert check_commands(Settings()) == ['virt-copy-in']


def test_sudo_not_required_for_root_or_when_disabled(monkeypatch) -> None:
    monkeypatch.setattr('vmput.host.os.geteuid', lambda: 0)
    assert 'sudo' not in required_commands(Settings())
    monkeypatch.setattr('vmput.host.os.geteuid', lambda: 1000)
    assert 'sudo' not in required_commands(Settings(sudo=False))
    assert required_commands(Settings(virsh='/opt/virsh'))[0] == '/opt/virsh'
