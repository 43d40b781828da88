"""Copy a staged file into a shut off VM's disk image with virt-copy-in."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from loguru import logger

from .config import InjectParams, Settings
from .errors import ExternalToolError
from .power import require_shutoff
from .runtime import copy_in_args, copy_in_cmd, list_shutoff_cmd
from .stage import staged_input, staged_path
from .util import run_cmd, shell_join, sudo_prefix

log = logger


def success_message(params: InjectParams) -> str:
    return (
        f'Successfully copied file {params.target_file} to directory '
        f'{params.target_dir} on VM {params.vm_name}'
    )


def copy_in(params: InjectParams, staged: Path, settings: Settings) -> str:
    """Run virt-copy-in for ``staged`` and return its combined output."""
    args = copy_in_args(
        settings, params.vm_name, str(staged), params.target_dir
    )
    log.info('Executing command: {} {}', settings.copy_in, ' '.join(args))
    cmd = copy_in_cmd(settings, params.vm_name, str(staged), params.target_dir)
    try:
        res = run_cmd(cmd, sudo=settings.sudo, check=False, combined=True)
    except OSError as ex:
        raise ExternalToolError(
            f'{settings.copy_in} command execution error: {ex}'
        ) from ex
    if res.code != 0:
        raise ExternalToolError(
            f'{settings.copy_in} command execution error: exit status '
            f'{res.code}\n{res.stdout}'.rstrip(),
            output=res.stdout,
        )
    return res.stdout


def place_file(
    params: InjectParams,
    settings: Settings,
    *,
    dry_run: bool = False,
    stdin: BinaryIO | None = None,
) -> str:
    """
    Check the VM is shut off, stage the input, and copy it into the VM.

    Returns the confirmation line for the caller to print.
    """
    if dry_run:
        staged = staged_path(params, settings)
        log.info(
            'DRYRUN: {}',
            shell_join(sudo_prefix(list_shutoff_cmd(settings), sudo=settings.sudo)),
        )
        log.info(
            'DRYRUN: {}',
            shell_join(
                sudo_prefix(
                    copy_in_cmd(
                        settings, params.vm_name, str(staged), params.target_dir
                    ),
                    sudo=settings.sudo,
                )
            ),
        )
        return (
            f'Dry run: would copy file {params.target_file} to directory '
            f'{params.target_dir} on VM {params.vm_name}'
        )
    require_shutoff(params.vm_name, settings)
    with staged_input(params, settings, stdin=stdin) as staged:
        output = copy_in(params, staged, settings)
    if output.strip():
        log.debug('{} output: {}', settings.copy_in, output.strip())
    return success_message(params)
