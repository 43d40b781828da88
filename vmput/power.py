"""Power state checks against libvirt before touching a disk image."""

from __future__ import annotations

from loguru import logger

from .config import Settings
from .errors import VMStateError
from .runtime import list_shutoff_cmd
from .util import CmdError, run_cmd, shell_join

log = logger


def parse_domain_names(stdout: str) -> list[str]:
    """Split ``virsh list --name`` output into stripped, non-empty names."""
    text = (stdout or '').strip()
    if not text:
        return []
    names = [line.strip() for line in text.splitlines()]
    return [n for n in names if n]


def shutoff_domains(settings: Settings) -> list[str]:
    cmd = list_shutoff_cmd(settings)
    try:
        res = run_cmd(cmd, sudo=settings.sudo, check=True)
    except CmdError as ex:
        detail = ex.result.stderr.strip() or ex.result.stdout.strip()
        raise VMStateError(
            f'virsh command execution error (code={ex.result.code}): '
            f'{shell_join(cmd)}\n{detail}'.strip()
        ) from ex
    except OSError as ex:
        raise VMStateError(f'virsh command execution error: {ex}') from ex
    return parse_domain_names(res.stdout)


def is_shutoff(vm_name: str, settings: Settings) -> bool:
    names = shutoff_domains(settings)
    log.debug('Shut off domains: {}', names or '(none)')
    return vm_name in names


def require_shutoff(vm_name: str, settings: Settings) -> None:
    if not is_shutoff(vm_name, settings):
        raise VMStateError(
            f"Error: VM '{vm_name}' is not shut off. For safety, files can "
            'only be placed on VMs that are in shutoff state.'
        )
    log.debug('VM {} is shut off', vm_name)
