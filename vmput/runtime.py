"""Runtime helpers for constructing virsh and virt-copy-in command arguments."""

from __future__ import annotations

from .config import Settings


def _connect_args(settings: Settings) -> list[str]:
    uri = (settings.libvirt_uri or '').strip()
    return ['-c', uri] if uri else []


def virsh_cmd(settings: Settings, *args: str) -> list[str]:
    return [settings.virsh, *_connect_args(settings), *args]


def list_shutoff_cmd(settings: Settings) -> list[str]:
    return virsh_cmd(settings, 'list', '--state-shutoff', '--name')


def copy_in_args(
    settings: Settings, vm_name: str, local_path: str, target_dir: str
) -> list[str]:
    # Domain selector, local file, then guest directory.
    return [*_connect_args(settings), '-d', vm_name, local_path, target_dir]


def copy_in_cmd(
    settings: Settings, vm_name: str, local_path: str, target_dir: str
) -> list[str]:
    return [
        settings.copy_in,
        *copy_in_args(settings, vm_name, local_path, target_dir),
    ]
